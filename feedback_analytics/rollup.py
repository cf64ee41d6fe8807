"""Fold per-question results into section, competency and assessment results."""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Sequence

from . import schemas
from .alignment import DEFAULT_ALIGNMENT_THRESHOLD, classify_gap, compute_gap
from .utils import mean_or_none

logger = logging.getLogger(__name__)


def _classifiable(questions: Iterable[schemas.QuestionResult]) -> List[schemas.QuestionResult]:
    return [q for q in questions if q.gap is not None]


def _means(
    questions: Sequence[schemas.QuestionResult],
) -> tuple[Optional[float], Optional[float]]:
    usable = _classifiable(questions)
    self_mean = mean_or_none(q.self_rating for q in usable)
    reviewer_mean = mean_or_none(q.mean_reviewer_rating for q in usable)
    return self_mean, reviewer_mean


def rollup_competencies(
    questions: Iterable[schemas.QuestionResult],
    *,
    threshold: float = DEFAULT_ALIGNMENT_THRESHOLD,
) -> List[schemas.CompetencyResult]:
    """One CompetencyResult per competency referenced by ``questions``.

    A question contributes to every competency it declares. Competencies keep
    the order in which they are first referenced.
    """
    buckets: "OrderedDict[str, Dict[str, object]]" = OrderedDict()
    for question in questions:
        for competency in question.competencies:
            bucket = buckets.setdefault(
                competency.id,
                {"name": competency.name, "questions": []},
            )
            if not bucket["name"] and competency.name:
                bucket["name"] = competency.name
            bucket["questions"].append(question)

    results: List[schemas.CompetencyResult] = []
    for competency_id, bucket in buckets.items():
        members = bucket["questions"]
        self_mean, reviewer_mean = _means(members)
        gap = compute_gap(self_mean, reviewer_mean)
        results.append(
            schemas.CompetencyResult(
                competency_id=competency_id,
                competency_name=str(bucket["name"]),
                self_average=self_mean,
                reviewer_average=reviewer_mean,
                gap=gap,
                alignment=classify_gap(gap, threshold),
                question_count=len(_classifiable(members)),
            )
        )
    return results


def rollup_section(
    section: schemas.SectionDefinition,
    *,
    threshold: float = DEFAULT_ALIGNMENT_THRESHOLD,
) -> schemas.SectionResult:
    self_mean, reviewer_mean = _means(section.questions)
    gap = compute_gap(self_mean, reviewer_mean)
    if reviewer_mean is None:
        logger.debug("Section %s has no classifiable questions", section.section_id)
    return schemas.SectionResult(
        section_id=section.section_id,
        section_title=section.section_title,
        questions=list(section.questions),
        self_average=self_mean,
        reviewer_average=reviewer_mean,
        overall_gap=gap,
        overall_alignment=classify_gap(gap, threshold),
        competency_results=rollup_competencies(section.questions, threshold=threshold),
    )


def rollup_assessment(
    sections: Sequence[schemas.SectionDefinition],
    *,
    threshold: float = DEFAULT_ALIGNMENT_THRESHOLD,
) -> schemas.AssessmentResult:
    """Roll every section up and derive assessment-wide competency and overall results.

    Overall means come from the classifiable questions themselves, not from the
    section means, so sections with more questions weigh more.
    """
    section_results = [rollup_section(section, threshold=threshold) for section in sections]
    all_questions = [q for section in sections for q in section.questions]
    self_mean, reviewer_mean = _means(all_questions)
    gap = compute_gap(self_mean, reviewer_mean)
    return schemas.AssessmentResult(
        sections=section_results,
        competencies=rollup_competencies(all_questions, threshold=threshold),
        self_average=self_mean,
        reviewer_average=reviewer_mean,
        overall_gap=gap,
        overall_alignment=classify_gap(gap, threshold),
    )


def to_section_definitions(
    sections: Iterable[schemas.SectionResult],
) -> List[schemas.SectionDefinition]:
    """Turn section results back into rollup input."""
    return [
        schemas.SectionDefinition(
            section_id=section.section_id,
            section_title=section.section_title,
            questions=list(section.questions),
        )
        for section in sections
    ]


def rank_sections(
    sections: Iterable[schemas.SectionResult],
    *,
    limit: Optional[int] = None,
    descending: bool = True,
) -> List[schemas.SectionResult]:
    """Sections ordered by reviewer average, omitting those without one."""
    ranked = [s for s in sections if s.reviewer_average is not None]
    ranked.sort(key=lambda s: s.reviewer_average, reverse=descending)
    if limit is not None:
        ranked = ranked[:limit]
    return ranked


__all__ = [
    "rank_sections",
    "rollup_assessment",
    "rollup_competencies",
    "rollup_section",
    "to_section_definitions",
]
