from __future__ import annotations

import sys
from pathlib import Path
sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest

from feedback_analytics import schemas
from feedback_analytics.alignment import classify_gap, classify_response, compute_gap
from feedback_analytics.ratings import ValidationError


@pytest.mark.parametrize(
    "gap, expected",
    [
        (0.0, "aligned"),
        (1.0, "aligned"),
        (-1.0, "aligned"),
        (1.0 + 1e-9, "blind_spot"),
        (2.5, "blind_spot"),
        (-1.0 - 1e-9, "hidden_strength"),
        (-2.5, "hidden_strength"),
    ],
)
def test_classify_gap_default_threshold(gap, expected):
    assert classify_gap(gap) == expected


def test_classify_gap_respects_threshold():
    assert classify_gap(0.6, threshold=0.5) == "blind_spot"
    assert classify_gap(0.5, threshold=0.5) == "aligned"
    assert classify_gap(-0.6, threshold=0.5) == "hidden_strength"


@pytest.mark.parametrize("threshold", [-1.0, float("nan"), "wide"])
def test_classify_gap_rejects_invalid_threshold(threshold):
    with pytest.raises(ValidationError):
        classify_gap(0.0, threshold=threshold)
    with pytest.raises(ValidationError):
        classify_gap(None, threshold=threshold)


def test_classify_gap_undefined():
    assert classify_gap(None) is None
    assert compute_gap(None, 4.0) is None
    assert compute_gap(5.0, None) is None


def test_gap_sign_convention():
    assert compute_gap(6.0, 4.0) == pytest.approx(2.0)
    assert compute_gap(3.0, 4.5) == pytest.approx(-1.5)


def test_no_reviewers_leaves_result_unclassified():
    response = schemas.QuestionResponse(question_id="q1", self_rating=6, reviewer_ratings=[])

    result = classify_response(response)

    assert result.mean_reviewer_rating is None
    assert result.gap is None
    assert result.alignment is None
    assert result.reviewer_count == 0
    assert result.classifiable is False


def test_self_and_reviewer_scenario():
    question_1 = schemas.Question(id="q1", text="Listens well")
    question_2 = schemas.Question(id="q2", text="Delegates")

    first = classify_response(
        schemas.QuestionResponse(question_id="q1", self_rating=5, reviewer_ratings=[4, 4]),
        question_1,
        threshold=1.0,
    )
    second = classify_response(
        schemas.QuestionResponse(question_id="q2", self_rating=4, reviewer_ratings=[6, 7]),
        question_2,
        threshold=1.0,
    )

    assert first.mean_reviewer_rating == pytest.approx(4.0)
    assert first.gap == pytest.approx(1.0)
    assert first.alignment == "aligned"
    assert first.text == "Listens well"

    assert second.mean_reviewer_rating == pytest.approx(6.5)
    assert second.gap == pytest.approx(-2.5)
    assert second.alignment == "hidden_strength"
    assert second.reviewer_count == 2


def test_reviewers_without_self_rating_have_mean_but_no_gap():
    result = classify_response(
        schemas.QuestionResponse(question_id="q1", self_rating=None, reviewer_ratings=[3, 5])
    )

    assert result.mean_reviewer_rating == pytest.approx(4.0)
    assert result.gap is None
    assert result.alignment is None
