from __future__ import annotations

import sys
from pathlib import Path
sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest

from feedback_analytics import schemas
from feedback_analytics.pipeline import build_section_definitions, evaluate_assessment
from feedback_analytics.ratings import ValidationError


def make_assessment(scale_max=7):
    return schemas.AssessmentDefinition(
        id="a1",
        title="Leadership 360",
        sections=[
            schemas.AssessmentSection(
                id="s1",
                title="Leading Self",
                questions=[
                    schemas.Question(
                        id="q1",
                        text="Stays calm under pressure",
                        scale_max=scale_max,
                        competencies=[schemas.CompetencyRef(id="c1", name="Resilience")],
                    ),
                    schemas.Question(id="q2", text="Delegates appropriately", scale_max=scale_max),
                    schemas.Question(id="q3", text="What should they keep doing?", type="free_text"),
                ],
            ),
            schemas.AssessmentSection(
                id="s2",
                title="Driving Results",
                questions=[schemas.Question(id="q4", text="Sets clear expectations", scale_max=scale_max)],
            ),
        ],
    )


def test_evaluate_assessment_end_to_end():
    responses = [
        schemas.QuestionResponse(question_id="q1", self_rating=5, reviewer_ratings=[4, 4]),
        schemas.QuestionResponse(question_id="q2", self_rating=4, reviewer_ratings=[6, 7]),
        schemas.QuestionResponse(question_id="q3", comments=["Keep the weekly one-to-ones"]),
    ]

    result = evaluate_assessment(make_assessment(), responses, threshold=1.0)

    leading_self, driving_results = result.sections
    q1, q2, q3 = leading_self.questions
    assert q1.alignment == "aligned"
    assert q1.gap == pytest.approx(1.0)
    assert q2.alignment == "hidden_strength"
    assert q2.gap == pytest.approx(-2.5)
    assert q3.gap is None
    assert q3.comments == ["Keep the weekly one-to-ones"]

    assert leading_self.self_average == pytest.approx(4.5)
    assert leading_self.reviewer_average == pytest.approx(5.25)

    # No responses at all for the second section.
    assert driving_results.reviewer_average is None
    assert driving_results.questions[0].alignment is None

    assert [c.competency_id for c in result.competencies] == ["c1"]
    assert result.competencies[0].gap == pytest.approx(1.0)


def test_later_response_for_same_question_wins():
    responses = [
        schemas.QuestionResponse(question_id="q1", self_rating=2, reviewer_ratings=[6]),
        schemas.QuestionResponse(question_id="q1", self_rating=6, reviewer_ratings=[6]),
    ]

    sections = build_section_definitions(make_assessment(), responses)

    assert sections[0].questions[0].self_rating == 6.0
    assert sections[0].questions[0].alignment == "aligned"


def test_unknown_question_responses_are_ignored():
    responses = [schemas.QuestionResponse(question_id="q-unknown", self_rating=3, reviewer_ratings=[3])]

    result = evaluate_assessment(make_assessment(), responses)

    assert result.reviewer_average is None
    assert result.overall_alignment is None


def test_ratings_are_clamped_before_classification():
    responses = [schemas.QuestionResponse(question_id="q1", self_rating=12, reviewer_ratings=[6, 9])]

    result = evaluate_assessment(make_assessment(), responses)
    question = result.sections[0].questions[0]

    assert question.self_rating == 7.0
    assert question.mean_reviewer_rating == pytest.approx(6.5)
    assert question.alignment == "aligned"


def test_invalid_scale_propagates():
    responses = [schemas.QuestionResponse(question_id="q1", self_rating=5, reviewer_ratings=[4])]

    with pytest.raises(ValidationError):
        evaluate_assessment(make_assessment(scale_max=0), responses)


def test_configured_scale_applies_to_questions_without_one():
    responses = [schemas.QuestionResponse(question_id="q1", self_rating=7, reviewer_ratings=[7])]

    result = evaluate_assessment(make_assessment(scale_max=None), responses, default_scale_max=5)
    question = result.sections[0].questions[0]

    assert question.self_rating == 5.0
    assert question.mean_reviewer_rating == 5.0


@pytest.mark.parametrize("threshold", [-1, float("nan")])
def test_invalid_threshold_is_rejected(threshold):
    responses = [schemas.QuestionResponse(question_id="q1", self_rating=4, reviewer_ratings=[4])]

    with pytest.raises(ValidationError):
        evaluate_assessment(make_assessment(), responses, threshold=threshold)


def test_zero_threshold_only_aligns_exact_matches():
    responses = [
        schemas.QuestionResponse(question_id="q1", self_rating=4, reviewer_ratings=[4]),
        schemas.QuestionResponse(question_id="q2", self_rating=4, reviewer_ratings=[5]),
    ]

    result = evaluate_assessment(make_assessment(), responses, threshold=0)
    q1, q2 = result.sections[0].questions[:2]

    assert q1.alignment == "aligned"
    assert q2.alignment == "hidden_strength"
