"""FastAPI application wiring for the analytics core."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse

from . import schemas
from .insights import (
    category_performance,
    completion_summary,
    question_highlights,
    score_distribution,
)
from .organization import aggregate_organization, aggregate_system
from .peers import compare_to_peers
from .pipeline import evaluate_assessment
from .ratings import ValidationError
from .settings import AnalyticsSettings, load_settings
from .trends import compute_performance_metrics

logger = logging.getLogger(__name__)


def create_app(
    settings_path: Path | str | None = None,
    settings: Optional[AnalyticsSettings] = None,
) -> FastAPI:
    app = FastAPI(default_response_class=ORJSONResponse)
    if settings is None:
        settings = load_settings(Path(settings_path) if settings_path else None)
    app.state.settings = settings

    def current_settings(request: Request) -> AnalyticsSettings:
        return request.app.state.settings

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> ORJSONResponse:
        logger.warning("Rejected analytics request to %s: %s", request.url.path, exc)
        return ORJSONResponse(status_code=422, content={"detail": str(exc)})

    @app.get("/api/settings")
    async def api_settings(request: Request) -> AnalyticsSettings:
        return current_settings(request)

    @app.post("/api/results/individual")
    async def api_individual(
        request: Request, payload: schemas.IndividualResultRequest
    ) -> schemas.IndividualResultResponse:
        cfg = current_settings(request)
        threshold = (
            payload.alignment_threshold
            if payload.alignment_threshold is not None
            else cfg.alignment_threshold
        )
        result = evaluate_assessment(
            payload.assessment,
            payload.responses,
            threshold=threshold,
            default_scale_max=cfg.scale_max,
        )
        return schemas.IndividualResultResponse(
            result=result,
            highlights=question_highlights(result, limit=cfg.highlight_limit),
        )

    @app.post("/api/results/organization")
    async def api_organization(
        request: Request, payload: schemas.OrganizationResultRequest
    ) -> schemas.OrganizationResult:
        cfg = current_settings(request)
        min_cohort = (
            payload.min_cohort_size
            if payload.min_cohort_size is not None
            else cfg.min_cohort_size
        )
        return aggregate_organization(payload.results, min_cohort_size=min_cohort)

    @app.post("/api/results/system")
    async def api_system(
        request: Request, payload: schemas.SystemResultRequest
    ) -> Dict[str, schemas.OrganizationResult]:
        cfg = current_settings(request)
        min_cohort = (
            payload.min_cohort_size
            if payload.min_cohort_size is not None
            else cfg.min_cohort_size
        )
        return aggregate_system(payload.organizations, min_cohort_size=min_cohort)

    @app.post("/api/metrics/trends")
    async def api_trends(
        request: Request, payload: schemas.TrendRequest
    ) -> List[schemas.PerformanceMetric]:
        cfg = current_settings(request)
        return compute_performance_metrics(
            payload.records,
            payload.window,
            now=payload.now,
            windows=cfg.window_durations(),
            epsilon=cfg.trend_stable_epsilon,
        )

    @app.post("/api/metrics/peers")
    async def api_peers(payload: schemas.PeerComparisonRequest) -> schemas.PeerComparison:
        return compare_to_peers(payload.individual_average, payload.population)

    @app.post("/api/insights/categories")
    async def api_categories(payload: schemas.CategoryRequest) -> List[schemas.CategoryPerformance]:
        return category_performance(payload.results)

    @app.post("/api/insights/distribution")
    async def api_distribution(request: Request, payload: schemas.DistributionRequest) -> Dict[str, int]:
        cfg = current_settings(request)
        scale_max = payload.scale_max if payload.scale_max is not None else cfg.scale_max
        distribution = score_distribution(payload.responses, scale_max=scale_max)
        return {str(point): count for point, count in distribution.items()}

    @app.post("/api/insights/completion")
    async def api_completion(payload: schemas.CompletionRequest) -> schemas.CompletionSummary:
        return completion_summary(payload.records)

    return app


__all__ = ["create_app"]
