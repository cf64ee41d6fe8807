"""Reporting aggregates built on top of computed results."""

from __future__ import annotations

import math
from collections import Counter, OrderedDict
from typing import Dict, Iterable, List, Sequence

from . import schemas
from .ratings import validate_scale_max
from .trends import average_score, completion_rate
from .utils import mean_or_none

DEFAULT_HIGHLIGHT_LIMIT = 3


def category_performance(
    results: Iterable[schemas.AssessmentResult],
) -> List[schemas.CategoryPerformance]:
    """Average reviewer score per section title across one individual's history.

    Sections that never had a defined reviewer average are left out instead of
    being ranked as zero.
    """
    scores: "OrderedDict[str, List[float]]" = OrderedDict()
    for result in results:
        for section in result.sections:
            if section.reviewer_average is None:
                continue
            scores.setdefault(section.section_title, []).append(section.reviewer_average)

    categories = [
        schemas.CategoryPerformance(
            category=title,
            average_score=mean_or_none(values),
            total_assessments=len(values),
        )
        for title, values in scores.items()
    ]
    categories.sort(key=lambda c: c.average_score, reverse=True)
    return categories


def question_highlights(
    result: schemas.AssessmentResult,
    *,
    limit: int = DEFAULT_HIGHLIGHT_LIMIT,
) -> schemas.QuestionHighlights:
    rated = [
        q
        for section in result.sections
        for q in section.questions
        if q.mean_reviewer_rating is not None
    ]

    def highlight(q: schemas.QuestionResult) -> schemas.QuestionHighlight:
        return schemas.QuestionHighlight(
            question_id=q.question_id,
            text=q.text,
            mean_reviewer_rating=q.mean_reviewer_rating,
            gap=q.gap,
        )

    ranked = sorted(rated, key=lambda q: q.mean_reviewer_rating, reverse=True)
    # Short lists are split so the upper half are strengths and the rest improvement
    # areas; no question appears in both.
    strong_count = min(limit, (len(ranked) + 1) // 2)
    strongest = ranked[:strong_count]
    weakest = sorted(ranked[strong_count:], key=lambda q: q.mean_reviewer_rating)[:limit]
    return schemas.QuestionHighlights(
        top_strengths=[highlight(q) for q in strongest],
        areas_for_improvement=[highlight(q) for q in weakest],
    )


def score_distribution(
    responses: Iterable[schemas.QuestionResponse],
    scale_max: float = schemas.DEFAULT_SCALE_MAX,
) -> Dict[int, int]:
    """Count reviewer ratings per scale point ``1..scale_max``."""
    top = int(math.floor(validate_scale_max(scale_max)))
    counts: Counter[int] = Counter()
    for response in responses:
        for rating in response.reviewer_ratings:
            if rating is None:
                continue
            point = int(math.floor(float(rating) + 0.5))
            counts[min(max(point, 1), top)] += 1
    return {point: counts.get(point, 0) for point in range(1, top + 1)}


def completion_summary(
    records: Sequence[schemas.CompletedAssessmentRecord],
) -> schemas.CompletionSummary:
    completed = [r for r in records if r.status == "completed"]
    return schemas.CompletionSummary(
        total=len(records),
        completed=len(completed),
        completion_rate=completion_rate(records),
        average_score=average_score(completed),
    )


__all__ = [
    "DEFAULT_HIGHLIGHT_LIMIT",
    "category_performance",
    "completion_summary",
    "question_highlights",
    "score_distribution",
]
