"""Percentile and rank of one individual within an organization's population."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from . import schemas


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compare_to_peers(
    individual_average: float,
    population: Sequence[float],
) -> schemas.PeerComparison:
    """Percentile is the share of the population at or below the individual.

    Rank counts how many peers score strictly higher, plus one. An empty
    population has neither.
    """
    scores = np.asarray([float(v) for v in population if v is not None], dtype=float)
    size = int(scores.size)
    if size == 0:
        return schemas.PeerComparison(individual_average=float(individual_average))

    at_or_below = int(np.count_nonzero(scores <= individual_average))
    strictly_above = int(np.count_nonzero(scores > individual_average))
    return schemas.PeerComparison(
        individual_average=float(individual_average),
        organization_average=float(np.mean(scores)),
        percentile=_round_half_up(at_or_below / size * 100.0),
        rank=strictly_above + 1,
        population_size=size,
    )


__all__ = ["compare_to_peers"]
