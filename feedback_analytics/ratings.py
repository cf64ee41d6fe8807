"""Validation and clamping of raw self/reviewer ratings."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from . import schemas
from .utils import safe_float

logger = logging.getLogger(__name__)

SCALE_MIN = 1.0


class ValidationError(ValueError):
    """Structurally invalid analytics input."""


def clamp_rating(value: object, scale_max: float) -> Optional[float]:
    """Return ``value`` clamped to ``[1, scale_max]`` or ``None`` when absent."""
    try:
        rating = safe_float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Rating is not numeric: {value!r}") from exc
    if rating is None:
        return None
    clamped = min(max(rating, SCALE_MIN), float(scale_max))
    if clamped != rating:
        logger.debug("Clamped rating %s to %s (scale max %s)", rating, clamped, scale_max)
    return clamped


def validate_scale_max(scale_max: object) -> float:
    if scale_max is None:
        raise ValidationError("Rating question is missing a scale maximum")
    try:
        value = safe_float(scale_max)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Scale maximum is not numeric: {scale_max!r}") from exc
    if value is None or value <= 0:
        raise ValidationError(f"Scale maximum must be positive, got {scale_max!r}")
    return value


def normalize_ratings(
    self_rating: object,
    reviewer_ratings: Sequence[object],
    scale_max: object,
) -> tuple[Optional[float], list[float]]:
    """Validate ``scale_max`` and clamp one self rating plus its reviewer ratings.

    Absent reviewer entries are dropped, never counted as zero.
    """
    bound = validate_scale_max(scale_max)
    normalized_self = clamp_rating(self_rating, bound)
    normalized_reviewers = []
    for value in reviewer_ratings:
        rating = clamp_rating(value, bound)
        if rating is not None:
            normalized_reviewers.append(rating)
    return normalized_self, normalized_reviewers


def normalize_response(
    response: schemas.QuestionResponse,
    question: schemas.Question,
    *,
    default_scale_max: Optional[float] = schemas.DEFAULT_SCALE_MAX,
) -> schemas.QuestionResponse:
    """Return a normalized copy of ``response`` for ``question``.

    Only rating questions carry numeric ratings; for every other question type
    the ratings are dropped so the question never enters a numeric rollup.
    A question without its own scale maximum uses ``default_scale_max``.
    """
    if question.type != "rating":
        return response.model_copy(update={"self_rating": None, "reviewer_ratings": []})

    scale_max = question.scale_max if question.scale_max is not None else default_scale_max
    self_rating, reviewer_ratings = normalize_ratings(
        response.self_rating,
        response.reviewer_ratings,
        scale_max,
    )
    return response.model_copy(
        update={"self_rating": self_rating, "reviewer_ratings": reviewer_ratings}
    )


__all__ = [
    "ValidationError",
    "clamp_rating",
    "normalize_ratings",
    "normalize_response",
    "validate_scale_max",
    "SCALE_MIN",
]
