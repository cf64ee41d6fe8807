"""Terminal rendering of analytics results."""

from .report import render_assessment, render_distribution, render_metrics, render_organization  # noqa: F401

__all__ = [
    "render_assessment",
    "render_distribution",
    "render_metrics",
    "render_organization",
]
