"""Assessment analytics core exposing rollups, trends and the FastAPI app factory."""

from .organization import aggregate_organization, aggregate_system
from .peers import compare_to_peers
from .pipeline import evaluate_assessment
from .ratings import ValidationError
from .server import create_app
from .trends import compute_performance_metrics

__all__ = [
    "ValidationError",
    "aggregate_organization",
    "aggregate_system",
    "compare_to_peers",
    "compute_performance_metrics",
    "create_app",
    "evaluate_assessment",
]
