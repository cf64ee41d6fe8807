"""Anonymized organization-level rollups.

This module is the only place where several individuals' results are
combined. It reads nothing but reviewer averages from its inputs: self
ratings, gaps and comments are never copied into an organization result, and
aggregates over fewer than ``min_cohort_size`` individuals are suppressed.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from . import schemas
from .ratings import ValidationError
from .utils import mean_or_none

logger = logging.getLogger(__name__)

DEFAULT_MIN_COHORT_SIZE = 5


class _Bucket:
    __slots__ = ("key", "label", "values")

    def __init__(self, key: str, label: str) -> None:
        self.key = key
        self.label = label
        self.values: List[float] = []

    def add(self, value: Optional[float]) -> None:
        if value is not None:
            self.values.append(float(value))

    def publish(self, min_cohort_size: int) -> tuple[Optional[float], int, bool]:
        cohort = len(self.values)
        if cohort < min_cohort_size:
            if cohort:
                logger.info(
                    "Suppressing aggregate %r: cohort of %d is below minimum %d",
                    self.label or self.key,
                    cohort,
                    min_cohort_size,
                )
            return None, cohort, True
        return mean_or_none(self.values), cohort, False


def _check_min_cohort(min_cohort_size: int) -> int:
    if min_cohort_size < 1:
        raise ValidationError(f"min_cohort_size must be at least 1, got {min_cohort_size}")
    return int(min_cohort_size)


def _competency_results(
    buckets: Mapping[str, _Bucket],
    min_cohort_size: int,
) -> List[schemas.OrganizationCompetencyResult]:
    results = []
    for bucket in buckets.values():
        average, cohort, suppressed = bucket.publish(min_cohort_size)
        results.append(
            schemas.OrganizationCompetencyResult(
                competency_id=bucket.key,
                competency_name=bucket.label,
                reviewer_average=average,
                cohort_size=cohort,
                suppressed=suppressed,
            )
        )
    return results


def _collect_competencies(
    target: "OrderedDict[str, _Bucket]",
    competencies: Iterable[schemas.CompetencyResult],
) -> None:
    for competency in competencies:
        bucket = target.get(competency.competency_id)
        if bucket is None:
            bucket = target[competency.competency_id] = _Bucket(
                competency.competency_id, competency.competency_name
            )
        bucket.add(competency.reviewer_average)


def aggregate_organization_sections(
    results: Sequence[schemas.AssessmentResult],
    *,
    min_cohort_size: int = DEFAULT_MIN_COHORT_SIZE,
) -> List[schemas.OrganizationSectionResult]:
    """One anonymized section result per section title.

    The reviewer average is the mean of the individuals' section reviewer
    averages, skipping individuals whose section had nothing to classify.
    """
    min_cohort_size = _check_min_cohort(min_cohort_size)
    sections: "OrderedDict[str, Dict[str, object]]" = OrderedDict()

    for result in results:
        for section in result.sections:
            entry = sections.get(section.section_title)
            if entry is None:
                entry = sections[section.section_title] = {
                    "section_id": section.section_id,
                    "average": _Bucket(section.section_id, section.section_title),
                    "questions": OrderedDict(),
                    "competencies": OrderedDict(),
                }
            entry["average"].add(section.reviewer_average)
            for question in section.questions:
                questions = entry["questions"]
                bucket = questions.get(question.question_id)
                if bucket is None:
                    bucket = questions[question.question_id] = _Bucket(
                        question.question_id, question.text
                    )
                bucket.add(question.mean_reviewer_rating)
            _collect_competencies(entry["competencies"], section.competency_results)

    output: List[schemas.OrganizationSectionResult] = []
    for title, entry in sections.items():
        average, cohort, suppressed = entry["average"].publish(min_cohort_size)
        question_results = []
        for bucket in entry["questions"].values():
            q_average, q_cohort, q_suppressed = bucket.publish(min_cohort_size)
            question_results.append(
                schemas.OrganizationQuestionResult(
                    question_id=bucket.key,
                    text=bucket.label,
                    mean_reviewer_rating=q_average,
                    cohort_size=q_cohort,
                    suppressed=q_suppressed,
                )
            )
        output.append(
            schemas.OrganizationSectionResult(
                section_id=str(entry["section_id"]),
                section_title=title,
                questions=question_results,
                reviewer_average=average,
                competency_results=_competency_results(entry["competencies"], min_cohort_size),
                cohort_size=cohort,
                suppressed=suppressed,
            )
        )
    return output


def aggregate_organization_competencies(
    results: Sequence[schemas.AssessmentResult],
    *,
    min_cohort_size: int = DEFAULT_MIN_COHORT_SIZE,
) -> List[schemas.OrganizationCompetencyResult]:
    min_cohort_size = _check_min_cohort(min_cohort_size)
    buckets: "OrderedDict[str, _Bucket]" = OrderedDict()
    for result in results:
        _collect_competencies(buckets, result.competencies)
    return _competency_results(buckets, min_cohort_size)


def aggregate_organization(
    results: Sequence[schemas.AssessmentResult],
    *,
    min_cohort_size: int = DEFAULT_MIN_COHORT_SIZE,
) -> schemas.OrganizationResult:
    return schemas.OrganizationResult(
        sections=aggregate_organization_sections(results, min_cohort_size=min_cohort_size),
        competencies=aggregate_organization_competencies(results, min_cohort_size=min_cohort_size),
        cohort_size=len(results),
        min_cohort_size=min_cohort_size,
    )


def aggregate_system(
    results_by_organization: Mapping[str, Sequence[schemas.AssessmentResult]],
    *,
    min_cohort_size: int = DEFAULT_MIN_COHORT_SIZE,
) -> Dict[str, schemas.OrganizationResult]:
    """Organization rollups keyed by the caller's organization grouping key."""
    min_cohort_size = _check_min_cohort(min_cohort_size)
    return {
        organization_id: aggregate_organization(results, min_cohort_size=min_cohort_size)
        for organization_id, results in results_by_organization.items()
    }


__all__ = [
    "DEFAULT_MIN_COHORT_SIZE",
    "aggregate_organization",
    "aggregate_organization_competencies",
    "aggregate_organization_sections",
    "aggregate_system",
]
