"""End-to-end evaluation of one individual's assessment responses."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from . import schemas
from .alignment import DEFAULT_ALIGNMENT_THRESHOLD, classify_response, validate_threshold
from .ratings import normalize_response
from .rollup import rollup_assessment

logger = logging.getLogger(__name__)


def _index_responses(
    responses: Iterable[schemas.QuestionResponse],
) -> Dict[str, schemas.QuestionResponse]:
    # Later records win: a resubmission arrives as a newer record for the same question.
    indexed: Dict[str, schemas.QuestionResponse] = {}
    for response in responses:
        if response.question_id in indexed:
            logger.debug("Replacing earlier response for question %s", response.question_id)
        indexed[response.question_id] = response
    return indexed


def build_section_definitions(
    assessment: schemas.AssessmentDefinition,
    responses: Iterable[schemas.QuestionResponse],
    *,
    threshold: float = DEFAULT_ALIGNMENT_THRESHOLD,
    default_scale_max: float = schemas.DEFAULT_SCALE_MAX,
) -> List[schemas.SectionDefinition]:
    """Normalize and classify every question of ``assessment``.

    ``default_scale_max`` applies to rating questions that declare no scale.
    """
    threshold = validate_threshold(threshold)
    indexed = _index_responses(responses)
    known_ids = {q.id for section in assessment.sections for q in section.questions}
    unknown = sorted(set(indexed) - known_ids)
    if unknown:
        logger.debug("Ignoring responses for unknown questions: %s", ", ".join(unknown))

    sections: List[schemas.SectionDefinition] = []
    for section in assessment.sections:
        results: List[schemas.QuestionResult] = []
        for question in section.questions:
            raw = indexed.get(question.id) or schemas.QuestionResponse(question_id=question.id)
            normalized = normalize_response(raw, question, default_scale_max=default_scale_max)
            results.append(classify_response(normalized, question, threshold=threshold))
        sections.append(
            schemas.SectionDefinition(
                section_id=section.id,
                section_title=section.title,
                questions=results,
            )
        )
    return sections


def evaluate_assessment(
    assessment: schemas.AssessmentDefinition,
    responses: Iterable[schemas.QuestionResponse],
    *,
    threshold: float = DEFAULT_ALIGNMENT_THRESHOLD,
    default_scale_max: float = schemas.DEFAULT_SCALE_MAX,
) -> schemas.AssessmentResult:
    sections = build_section_definitions(
        assessment,
        responses,
        threshold=threshold,
        default_scale_max=default_scale_max,
    )
    return rollup_assessment(sections, threshold=threshold)


__all__ = ["build_section_definitions", "evaluate_assessment"]
