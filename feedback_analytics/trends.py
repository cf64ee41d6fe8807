"""Windowed performance metrics with period-over-period trend direction."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Mapping, Optional, Sequence

from . import schemas
from .ratings import ValidationError
from .utils import mean_or_zero

logger = logging.getLogger(__name__)

DEFAULT_WINDOWS: Mapping[str, timedelta] = {
    "week": timedelta(days=7),
    "month": timedelta(days=30),
    "quarter": timedelta(days=90),
    "year": timedelta(days=365),
}
STABLE_EPSILON = 0.01


@dataclass(frozen=True)
class WindowPartition:
    current: List[schemas.CompletedAssessmentRecord]
    previous: List[schemas.CompletedAssessmentRecord]
    current_start: datetime
    previous_start: datetime
    end: datetime


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _placement_time(record: schemas.CompletedAssessmentRecord) -> Optional[datetime]:
    # Unfinished records have no completion time; place them by their start.
    stamp = record.completed_at or record.started_at
    return _as_utc(stamp) if stamp is not None else None


def resolve_window(
    window: str,
    windows: Optional[Mapping[str, timedelta]] = None,
) -> timedelta:
    table = DEFAULT_WINDOWS if windows is None else windows
    try:
        duration = table[window]
    except KeyError:
        raise ValidationError(
            f"Unknown time window {window!r}; expected one of {', '.join(table)}"
        ) from None
    if duration <= timedelta(0):
        raise ValidationError(f"Time window {window!r} must have a positive duration")
    return duration


def partition_records(
    records: Sequence[schemas.CompletedAssessmentRecord],
    window: str,
    *,
    now: Optional[datetime] = None,
    windows: Optional[Mapping[str, timedelta]] = None,
) -> WindowPartition:
    """Split ``records`` into ``[now - w, now]`` and ``[now - 2w, now - w)``."""
    duration = resolve_window(window, windows)
    end = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    current_start = end - duration
    previous_start = current_start - duration

    current: List[schemas.CompletedAssessmentRecord] = []
    previous: List[schemas.CompletedAssessmentRecord] = []
    skipped = 0
    for record in records:
        stamp = _placement_time(record)
        if stamp is None:
            skipped += 1
            continue
        if current_start <= stamp <= end:
            current.append(record)
        elif previous_start <= stamp < current_start:
            previous.append(record)
    if skipped:
        logger.debug("Skipped %d records without timestamps", skipped)
    return WindowPartition(
        current=current,
        previous=previous,
        current_start=current_start,
        previous_start=previous_start,
        end=end,
    )


def calculate_change(current: float, previous: float) -> float:
    """Percent change from ``previous`` to ``current``.

    A zero previous value yields 100 when current is positive and 0 otherwise.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100.0


def get_trend(current: float, previous: float, epsilon: float = STABLE_EPSILON) -> schemas.Trend:
    delta = current - previous
    if abs(delta) < epsilon:
        return "stable"
    return "up" if delta > 0 else "down"


def completion_rate(records: Sequence[schemas.CompletedAssessmentRecord]) -> float:
    if not records:
        return 0.0
    completed = sum(1 for r in records if r.status == "completed")
    return completed / len(records) * 100.0


def average_score(records: Sequence[schemas.CompletedAssessmentRecord]) -> float:
    return mean_or_zero(r.total_score for r in records)


def completed_count(records: Sequence[schemas.CompletedAssessmentRecord]) -> float:
    return float(sum(1 for r in records if r.status == "completed"))


def mean_minutes_to_complete(records: Sequence[schemas.CompletedAssessmentRecord]) -> float:
    durations = []
    for record in records:
        if record.started_at is None or record.completed_at is None:
            continue
        minutes = (_as_utc(record.completed_at) - _as_utc(record.started_at)).total_seconds() / 60.0
        if minutes < 0:
            continue
        durations.append(minutes)
    return mean_or_zero(durations)


MetricFn = Callable[[Sequence[schemas.CompletedAssessmentRecord]], float]

METRICS: Sequence[tuple[str, MetricFn]] = (
    ("Completion Rate", completion_rate),
    ("Average Score", average_score),
    ("Assessments Completed", completed_count),
    ("Time to Complete", mean_minutes_to_complete),
)


def build_metric(
    label: str,
    current: float,
    previous: float,
    *,
    epsilon: float = STABLE_EPSILON,
) -> schemas.PerformanceMetric:
    return schemas.PerformanceMetric(
        label=label,
        value=current,
        previous_value=previous,
        change=calculate_change(current, previous),
        trend=get_trend(current, previous, epsilon),
    )


def compute_performance_metrics(
    records: Sequence[schemas.CompletedAssessmentRecord],
    window: str = "month",
    *,
    now: Optional[datetime] = None,
    windows: Optional[Mapping[str, timedelta]] = None,
    epsilon: float = STABLE_EPSILON,
) -> List[schemas.PerformanceMetric]:
    partition = partition_records(records, window, now=now, windows=windows)
    logger.debug(
        "Window %s: %d current, %d previous records",
        window,
        len(partition.current),
        len(partition.previous),
    )
    return [
        build_metric(label, fn(partition.current), fn(partition.previous), epsilon=epsilon)
        for label, fn in METRICS
    ]


__all__ = [
    "DEFAULT_WINDOWS",
    "METRICS",
    "STABLE_EPSILON",
    "WindowPartition",
    "build_metric",
    "calculate_change",
    "compute_performance_metrics",
    "get_trend",
    "partition_records",
    "resolve_window",
]
