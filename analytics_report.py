#!/usr/bin/env python3
"""Compute assessment analytics from exported JSON records and print them.

Examples::

    python analytics_report.py individual --assessment assessment.json --responses responses.jsonl
    python analytics_report.py organization results.json --min-cohort 5
    python analytics_report.py trends records.jsonl --window quarter
    python analytics_report.py distribution responses.jsonl --scale-max 5
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError as SchemaValidationError
from rich.console import Console

from console.report import render_assessment, render_distribution, render_metrics, render_organization
from feedback_analytics import schemas
from feedback_analytics.insights import completion_summary, question_highlights, score_distribution
from feedback_analytics.organization import aggregate_organization
from feedback_analytics.pipeline import evaluate_assessment
from feedback_analytics.ratings import ValidationError
from feedback_analytics.settings import AnalyticsSettings, load_settings
from feedback_analytics.trends import compute_performance_metrics
from feedback_analytics.utils import dumps_json, load_json, load_records
from utils.logger_setup import setup_logging_from_config

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Assessment analytics reports")
    parser.add_argument("--config", default=None, help="Path to the YAML configuration file")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of tables")
    sub = parser.add_subparsers(dest="command", required=True)

    individual = sub.add_parser("individual", help="Gap analysis for one individual")
    individual.add_argument("--assessment", required=True, help="Assessment definition JSON")
    individual.add_argument("--responses", required=True, help="Question responses JSON/JSONL")
    individual.add_argument("--threshold", type=float, default=None, help="Alignment threshold override")

    organization = sub.add_parser("organization", help="Anonymized organization rollup")
    organization.add_argument("results", help="Individual assessment results JSON/JSONL")
    organization.add_argument("--min-cohort", type=int, default=None, help="Minimum cohort size")

    trends = sub.add_parser("trends", help="Windowed performance metrics")
    trends.add_argument("records", help="Completed assessment records JSON/JSONL")
    trends.add_argument("--window", default="month", help="week, month, quarter or year")
    trends.add_argument("--now", default=None, help="ISO timestamp to use as the window end")

    distribution = sub.add_parser("distribution", help="Reviewer rating counts per scale point")
    distribution.add_argument("responses", help="Question responses JSON/JSONL")
    distribution.add_argument("--scale-max", type=float, default=None, help="Scale maximum override")
    return parser


def run_individual(args: argparse.Namespace, settings: AnalyticsSettings, console: Console) -> None:
    assessment = schemas.AssessmentDefinition.model_validate(load_json(Path(args.assessment)))
    responses = [
        schemas.QuestionResponse.model_validate(item) for item in load_records(Path(args.responses))
    ]
    threshold = args.threshold if args.threshold is not None else settings.alignment_threshold
    result = evaluate_assessment(
        assessment,
        responses,
        threshold=threshold,
        default_scale_max=settings.scale_max,
    )
    highlights = question_highlights(result, limit=settings.highlight_limit)
    if args.json:
        console.print_json(
            dumps_json(
                schemas.IndividualResultResponse(result=result, highlights=highlights).model_dump(mode="json")
            )
        )
        return
    render_assessment(result, highlights=highlights, console=console)


def run_organization(args: argparse.Namespace, settings: AnalyticsSettings, console: Console) -> None:
    results = [
        schemas.AssessmentResult.model_validate(item) for item in load_records(Path(args.results))
    ]
    min_cohort = args.min_cohort if args.min_cohort is not None else settings.min_cohort_size
    org_result = aggregate_organization(results, min_cohort_size=min_cohort)
    if args.json:
        console.print_json(dumps_json(org_result.model_dump(mode="json")))
        return
    render_organization(org_result, console=console)


def run_trends(args: argparse.Namespace, settings: AnalyticsSettings, console: Console) -> None:
    records = [
        schemas.CompletedAssessmentRecord.model_validate(item)
        for item in load_records(Path(args.records))
    ]
    now = datetime.fromisoformat(args.now) if args.now else None
    metrics = compute_performance_metrics(
        records,
        args.window,
        now=now,
        windows=settings.window_durations(),
        epsilon=settings.trend_stable_epsilon,
    )
    if args.json:
        console.print_json(dumps_json([m.model_dump(mode="json") for m in metrics]))
        return
    render_metrics(metrics, args.window, summary=completion_summary(records), console=console)


def run_distribution(args: argparse.Namespace, settings: AnalyticsSettings, console: Console) -> None:
    responses = [
        schemas.QuestionResponse.model_validate(item) for item in load_records(Path(args.responses))
    ]
    scale_max = args.scale_max if args.scale_max is not None else settings.scale_max
    counts = score_distribution(responses, scale_max=scale_max)
    if args.json:
        console.print_json(dumps_json({str(point): count for point, count in counts.items()}))
        return
    render_distribution(counts, console=console)


COMMANDS = {
    "individual": run_individual,
    "organization": run_organization,
    "trends": run_trends,
    "distribution": run_distribution,
}


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    args = build_parser().parse_args(argv)
    console = console or Console()
    config_path = Path(args.config) if args.config else None
    try:
        if config_path is not None:
            setup_logging_from_config(config_path)
        settings = load_settings(config_path)
        COMMANDS[args.command](args, settings, console)
    except (FileNotFoundError, ValidationError, SchemaValidationError, ValueError) as exc:
        logger.error("Report failed: %s", exc)
        console.print(f"Error: {exc}", style="red", markup=False)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
