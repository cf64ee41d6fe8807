"""Deployment configuration for the analytics core."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, Field, PositiveFloat, PositiveInt

from .alignment import DEFAULT_ALIGNMENT_THRESHOLD
from .insights import DEFAULT_HIGHLIGHT_LIMIT
from .organization import DEFAULT_MIN_COHORT_SIZE
from .schemas import DEFAULT_SCALE_MAX
from .trends import STABLE_EPSILON


def _default_windows() -> Dict[str, PositiveFloat]:
    return {"week": 7, "month": 30, "quarter": 90, "year": 365}


class LoggingSettings(BaseModel):
    level: str = "INFO"
    log_file: Optional[str] = None


class AnalyticsSettings(BaseModel):
    alignment_threshold: float = Field(default=DEFAULT_ALIGNMENT_THRESHOLD, ge=0)
    scale_max: PositiveFloat = DEFAULT_SCALE_MAX
    min_cohort_size: PositiveInt = DEFAULT_MIN_COHORT_SIZE
    # Durations in days.
    trend_windows: Dict[str, PositiveFloat] = Field(default_factory=_default_windows)
    trend_stable_epsilon: float = Field(default=STABLE_EPSILON, gt=0)
    highlight_limit: PositiveInt = DEFAULT_HIGHLIGHT_LIMIT
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = {
        "extra": "ignore",
    }

    def window_durations(self) -> Dict[str, timedelta]:
        return {name: timedelta(days=days) for name, days in self.trend_windows.items()}


def load_settings(config_path: Optional[Path] = None) -> AnalyticsSettings:
    """Read settings from a YAML file; defaults when no path is given."""
    if config_path is None:
        return AnalyticsSettings()
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    data = yaml.safe_load(config_path.read_text()) or {}
    return AnalyticsSettings.model_validate(data)


__all__ = ["AnalyticsSettings", "LoggingSettings", "load_settings"]
