from __future__ import annotations

from datetime import timedelta
from typing import Iterable, Mapping, Optional, Sequence

import humanize
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from feedback_analytics import schemas

ALIGNMENT_STYLES = {
    "aligned": ("Aligned", "green"),
    "blind_spot": ("Blind spot", "red"),
    "hidden_strength": ("Hidden strength", "magenta"),
}
TREND_STYLES = {
    "up": ("↑", "green"),
    "down": ("↓", "red"),
    "stable": ("→", "yellow"),
}


def format_score(value: Optional[float]) -> str:
    if value is None:
        return "n/a"
    return f"{value:.2f}"


def format_gap(value: Optional[float]) -> str:
    if value is None:
        return "n/a"
    return f"{value:+.2f}"


def alignment_text(alignment: Optional[str]) -> Text:
    if alignment is None:
        return Text("No data", style="dim")
    label, style = ALIGNMENT_STYLES.get(alignment, (alignment, "white"))
    return Text(label, style=style)


def format_metric_value(metric: schemas.PerformanceMetric) -> str:
    if metric.label == "Completion Rate":
        return f"{metric.value:.1f}%"
    if metric.label == "Time to Complete":
        if metric.value <= 0:
            return "n/a"
        return humanize.naturaldelta(timedelta(minutes=metric.value))
    if metric.label == "Assessments Completed":
        return humanize.intcomma(int(metric.value))
    return f"{metric.value:.2f}"


def build_section_table(sections: Sequence[schemas.SectionResult], title: str = "Sections") -> Table:
    table = Table(title=title, expand=True)
    table.add_column("Section", style="bold")
    table.add_column("Self", justify="right")
    table.add_column("Reviewers", justify="right")
    table.add_column("Gap", justify="right")
    table.add_column("Alignment")
    for section in sections:
        table.add_row(
            section.section_title,
            format_score(section.self_average),
            format_score(section.reviewer_average),
            format_gap(section.overall_gap),
            alignment_text(section.overall_alignment),
        )
    return table


def build_question_table(section: schemas.SectionResult) -> Table:
    table = Table(title=section.section_title, expand=True)
    table.add_column("Question", style="bold", ratio=3)
    table.add_column("Self", justify="right")
    table.add_column("Reviewers", justify="right")
    table.add_column("Gap", justify="right")
    table.add_column("Alignment")
    for question in section.questions:
        reviewers = format_score(question.mean_reviewer_rating)
        if question.reviewer_count:
            reviewers = f"{reviewers} ({question.reviewer_count})"
        table.add_row(
            question.text or question.question_id,
            format_score(question.self_rating),
            reviewers,
            format_gap(question.gap),
            alignment_text(question.alignment),
        )
    return table


def build_competency_table(competencies: Iterable[schemas.CompetencyResult]) -> Table:
    table = Table(title="Competencies", expand=True)
    table.add_column("Competency", style="bold")
    table.add_column("Questions", justify="right")
    table.add_column("Self", justify="right")
    table.add_column("Reviewers", justify="right")
    table.add_column("Gap", justify="right")
    table.add_column("Alignment")
    for competency in competencies:
        table.add_row(
            competency.competency_name or competency.competency_id,
            str(competency.question_count),
            format_score(competency.self_average),
            format_score(competency.reviewer_average),
            format_gap(competency.gap),
            alignment_text(competency.alignment),
        )
    return table


def build_organization_table(result: schemas.OrganizationResult) -> Table:
    table = Table(
        title=f"Organization ({result.cohort_size} individuals, minimum cohort {result.min_cohort_size})",
        expand=True,
    )
    table.add_column("Section", style="bold")
    table.add_column("Cohort", justify="right")
    table.add_column("Reviewers", justify="right")
    for section in result.sections:
        if section.suppressed:
            average = Text("insufficient data", style="dim")
        else:
            average = Text(format_score(section.reviewer_average))
        table.add_row(section.section_title, str(section.cohort_size), average)
    return table


def build_metrics_table(metrics: Sequence[schemas.PerformanceMetric], window: str) -> Table:
    table = Table(title=f"Performance ({window})", expand=True)
    table.add_column("Metric", style="bold")
    table.add_column("Current", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("Trend", justify="center")
    for metric in metrics:
        arrow, style = TREND_STYLES[metric.trend]
        table.add_row(
            metric.label,
            format_metric_value(metric),
            Text(f"{metric.change:+.1f}%", style=style),
            Text(arrow, style=style),
        )
    return table


def build_distribution_table(distribution: Mapping[int, int]) -> Table:
    total = sum(distribution.values())
    table = Table(title=f"Reviewer rating distribution ({humanize.intcomma(total)} ratings)", expand=True)
    table.add_column("Rating", justify="right", style="bold")
    table.add_column("Count", justify="right")
    table.add_column("Share", justify="right")
    for point, count in sorted(distribution.items()):
        share = f"{100.0 * count / total:.1f}%" if total else "n/a"
        table.add_row(str(point), humanize.intcomma(count), share)
    return table


def completion_panel(summary: schemas.CompletionSummary) -> Panel:
    body = Text.assemble(
        ("Completed ", "bold"),
        f"{humanize.intcomma(summary.completed)} of {humanize.intcomma(summary.total)}",
        ("  Rate ", "bold"),
        f"{summary.completion_rate:.1f}%",
        ("  Average score ", "bold"),
        format_score(summary.average_score if summary.completed else None),
    )
    return Panel(body, title="Completion")


def render_assessment(
    result: schemas.AssessmentResult,
    *,
    highlights: Optional[schemas.QuestionHighlights] = None,
    console: Optional[Console] = None,
) -> None:
    console = console or Console()
    summary = Text.assemble(
        ("Self ", "bold"),
        format_score(result.self_average),
        ("  Reviewers ", "bold"),
        format_score(result.reviewer_average),
        ("  Gap ", "bold"),
        format_gap(result.overall_gap),
        "  ",
        alignment_text(result.overall_alignment),
    )
    console.print(Panel(summary, title="Overall"))
    console.print(build_section_table(result.sections))
    for section in result.sections:
        if section.questions:
            console.print(build_question_table(section))
    if result.competencies:
        console.print(build_competency_table(result.competencies))
    if highlights is not None:
        for label, items in (
            ("Top strengths", highlights.top_strengths),
            ("Areas for improvement", highlights.areas_for_improvement),
        ):
            if not items:
                continue
            lines = "\n".join(
                f"{item.text or item.question_id}: {item.mean_reviewer_rating:.2f}" for item in items
            )
            console.print(Panel(lines, title=label))


def render_organization(result: schemas.OrganizationResult, *, console: Optional[Console] = None) -> None:
    console = console or Console()
    console.print(build_organization_table(result))


def render_metrics(
    metrics: Sequence[schemas.PerformanceMetric],
    window: str,
    *,
    summary: Optional[schemas.CompletionSummary] = None,
    console: Optional[Console] = None,
) -> None:
    console = console or Console()
    console.print(build_metrics_table(metrics, window))
    if summary is not None:
        console.print(completion_panel(summary))


def render_distribution(distribution: Mapping[int, int], *, console: Optional[Console] = None) -> None:
    console = console or Console()
    console.print(build_distribution_table(distribution))


__all__ = [
    "build_competency_table",
    "build_distribution_table",
    "build_metrics_table",
    "build_organization_table",
    "build_question_table",
    "build_section_table",
    "completion_panel",
    "format_gap",
    "format_metric_value",
    "format_score",
    "render_assessment",
    "render_distribution",
    "render_metrics",
    "render_organization",
]
