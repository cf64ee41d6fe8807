"""Pydantic schemas shared across the analytics core."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, PositiveInt, computed_field

QuestionType = Literal["rating", "multiple_choice", "yes_no", "free_text"]
Alignment = Literal["aligned", "blind_spot", "hidden_strength"]
Trend = Literal["up", "down", "stable"]
TimeWindow = Literal["week", "month", "quarter", "year"]
AssessmentStatus = Literal["completed", "in_progress", "pending"]

DEFAULT_SCALE_MAX = 7


class CompetencyRef(BaseModel):
    id: str
    name: str = ""

    model_config = {"frozen": True}


class Question(BaseModel):
    id: str
    text: str = ""
    type: QuestionType = "rating"
    # None defers to the deployment-wide scale maximum.
    scale_max: Optional[float] = None
    competencies: List[CompetencyRef] = Field(default_factory=list)

    model_config = {"frozen": True}


class AssessmentSection(BaseModel):
    id: str
    title: str
    questions: List[Question] = Field(default_factory=list)

    model_config = {"frozen": True}


class AssessmentDefinition(BaseModel):
    id: str
    title: str = ""
    sections: List[AssessmentSection] = Field(default_factory=list)

    model_config = {"frozen": True}


class QuestionResponse(BaseModel):
    question_id: str
    self_rating: Optional[float] = None
    # Reviewer identities are dropped before records reach the core.
    reviewer_ratings: List[Optional[float]] = Field(default_factory=list)
    comments: List[str] = Field(default_factory=list)

    model_config = {"frozen": True, "extra": "ignore"}


class QuestionResult(BaseModel):
    question_id: str
    text: str = ""
    self_rating: Optional[float] = None
    mean_reviewer_rating: Optional[float] = None
    reviewer_count: int = 0
    gap: Optional[float] = None
    alignment: Optional[Alignment] = None
    comments: List[str] = Field(default_factory=list)
    competencies: List[CompetencyRef] = Field(default_factory=list)

    @computed_field(return_type=bool)
    def classifiable(self) -> bool:
        return self.gap is not None


class CompetencyResult(BaseModel):
    competency_id: str
    competency_name: str = ""
    self_average: Optional[float] = None
    reviewer_average: Optional[float] = None
    gap: Optional[float] = None
    alignment: Optional[Alignment] = None
    question_count: int = 0


class SectionDefinition(BaseModel):
    """Rollup input: one section's already-classified questions."""

    section_id: str
    section_title: str
    questions: List[QuestionResult] = Field(default_factory=list)


class SectionResult(BaseModel):
    section_id: str
    section_title: str
    questions: List[QuestionResult] = Field(default_factory=list)
    self_average: Optional[float] = None
    reviewer_average: Optional[float] = None
    overall_gap: Optional[float] = None
    overall_alignment: Optional[Alignment] = None
    competency_results: List[CompetencyResult] = Field(default_factory=list)


class AssessmentResult(BaseModel):
    sections: List[SectionResult] = Field(default_factory=list)
    competencies: List[CompetencyResult] = Field(default_factory=list)
    self_average: Optional[float] = None
    reviewer_average: Optional[float] = None
    overall_gap: Optional[float] = None
    overall_alignment: Optional[Alignment] = None


class OrganizationQuestionResult(BaseModel):
    question_id: str
    text: str = ""
    self_rating: None = None
    mean_reviewer_rating: Optional[float] = None
    gap: None = None
    alignment: None = None
    comments: List[str] = Field(default_factory=list, max_length=0)
    cohort_size: int = 0
    suppressed: bool = False


class OrganizationCompetencyResult(BaseModel):
    competency_id: str
    competency_name: str = ""
    self_average: None = None
    reviewer_average: Optional[float] = None
    gap: None = None
    alignment: None = None
    cohort_size: int = 0
    suppressed: bool = False


class OrganizationSectionResult(BaseModel):
    section_id: str
    section_title: str
    questions: List[OrganizationQuestionResult] = Field(default_factory=list)
    self_average: None = None
    reviewer_average: Optional[float] = None
    overall_gap: None = None
    overall_alignment: None = None
    competency_results: List[OrganizationCompetencyResult] = Field(default_factory=list)
    comments: List[str] = Field(default_factory=list, max_length=0)
    cohort_size: int = 0
    suppressed: bool = False


class OrganizationResult(BaseModel):
    sections: List[OrganizationSectionResult] = Field(default_factory=list)
    competencies: List[OrganizationCompetencyResult] = Field(default_factory=list)
    cohort_size: int = 0
    min_cohort_size: int = 1


class CompletedAssessmentRecord(BaseModel):
    status: AssessmentStatus = "completed"
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    total_score: Optional[float] = None

    model_config = {"frozen": True, "extra": "ignore"}


class PerformanceMetric(BaseModel):
    label: str
    value: float = 0.0
    previous_value: float = 0.0
    change: float = 0.0
    trend: Trend = "stable"


class PeerComparison(BaseModel):
    individual_average: float
    organization_average: Optional[float] = None
    percentile: Optional[int] = None
    rank: Optional[int] = None
    population_size: int = 0

    @computed_field(return_type=bool)
    def available(self) -> bool:
        return self.population_size > 0


class CategoryPerformance(BaseModel):
    category: str
    average_score: float
    total_assessments: int


class QuestionHighlight(BaseModel):
    question_id: str
    text: str = ""
    mean_reviewer_rating: float
    gap: Optional[float] = None


class QuestionHighlights(BaseModel):
    top_strengths: List[QuestionHighlight] = Field(default_factory=list)
    areas_for_improvement: List[QuestionHighlight] = Field(default_factory=list)


class CompletionSummary(BaseModel):
    total: int = 0
    completed: int = 0
    completion_rate: float = 0.0
    average_score: float = 0.0


# Request bodies ---------------------------------------------------------------


class IndividualResultRequest(BaseModel):
    assessment: AssessmentDefinition
    responses: List[QuestionResponse] = Field(default_factory=list)
    alignment_threshold: Optional[float] = None


class OrganizationResultRequest(BaseModel):
    results: List[AssessmentResult] = Field(default_factory=list)
    min_cohort_size: Optional[PositiveInt] = None


class SystemResultRequest(BaseModel):
    organizations: Dict[str, List[AssessmentResult]] = Field(default_factory=dict)
    min_cohort_size: Optional[PositiveInt] = None


class TrendRequest(BaseModel):
    records: List[CompletedAssessmentRecord] = Field(default_factory=list)
    window: TimeWindow = "month"
    now: Optional[datetime] = None


class PeerComparisonRequest(BaseModel):
    individual_average: float
    population: List[float] = Field(default_factory=list)


class CategoryRequest(BaseModel):
    results: List[AssessmentResult] = Field(default_factory=list)


class DistributionRequest(BaseModel):
    responses: List[QuestionResponse] = Field(default_factory=list)
    scale_max: Optional[float] = None


class CompletionRequest(BaseModel):
    records: List[CompletedAssessmentRecord] = Field(default_factory=list)


class IndividualResultResponse(BaseModel):
    result: AssessmentResult
    highlights: QuestionHighlights
