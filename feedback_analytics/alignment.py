"""Gap computation and alignment classification for single questions."""

from __future__ import annotations

from typing import Optional, Sequence

from . import schemas
from .ratings import ValidationError
from .utils import mean_or_none

DEFAULT_ALIGNMENT_THRESHOLD = 1.0


def validate_threshold(threshold: object) -> float:
    try:
        value = float(threshold)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Alignment threshold is not numeric: {threshold!r}") from exc
    if not value >= 0:
        raise ValidationError(f"Alignment threshold must not be negative, got {threshold!r}")
    return value


def compute_gap(self_rating: Optional[float], reviewer_mean: Optional[float]) -> Optional[float]:
    """Signed gap; positive when the self rating exceeds the reviewer mean."""
    if self_rating is None or reviewer_mean is None:
        return None
    return float(self_rating) - float(reviewer_mean)


def classify_gap(
    gap: Optional[float],
    threshold: float = DEFAULT_ALIGNMENT_THRESHOLD,
) -> Optional[schemas.Alignment]:
    """Classify ``gap`` against ``threshold``; the boundary counts as aligned."""
    threshold = validate_threshold(threshold)
    if gap is None:
        return None
    if abs(gap) <= threshold:
        return "aligned"
    if gap > threshold:
        return "blind_spot"
    return "hidden_strength"


def classify_response(
    response: schemas.QuestionResponse,
    question: Optional[schemas.Question] = None,
    *,
    threshold: float = DEFAULT_ALIGNMENT_THRESHOLD,
) -> schemas.QuestionResult:
    """Build a QuestionResult from one normalized response.

    With no reviewer ratings the reviewer mean, gap and alignment all stay
    ``None`` and the result is excluded from every rollup.
    """
    reviewer_ratings: Sequence[Optional[float]] = response.reviewer_ratings
    reviewer_mean = mean_or_none(reviewer_ratings)
    reviewer_count = sum(1 for value in reviewer_ratings if value is not None)
    gap = compute_gap(response.self_rating, reviewer_mean)
    return schemas.QuestionResult(
        question_id=response.question_id,
        text=question.text if question else "",
        self_rating=response.self_rating,
        mean_reviewer_rating=reviewer_mean,
        reviewer_count=reviewer_count,
        gap=gap,
        alignment=classify_gap(gap, threshold),
        comments=list(response.comments),
        competencies=list(question.competencies) if question else [],
    )


__all__ = [
    "DEFAULT_ALIGNMENT_THRESHOLD",
    "classify_gap",
    "classify_response",
    "compute_gap",
    "validate_threshold",
]
