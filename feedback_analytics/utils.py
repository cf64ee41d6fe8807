"""Utility helpers for the analytics core."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional

import orjson


def load_json(path: Path) -> Any:
    """Load JSON via orjson for performance."""
    with path.open("rb") as f:
        return orjson.loads(f.read())


def load_jsonl(path: Path) -> Iterator[Any]:
    """Yield JSON objects from a JSONL file."""
    with path.open("rb") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            yield orjson.loads(line)


def load_records(path: Path) -> list:
    """Load a list of records from either a JSON array or a JSONL file."""
    if path.suffix == ".jsonl":
        return list(load_jsonl(path))
    data = load_json(path)
    if isinstance(data, dict):
        return [data]
    return list(data)


def dumps_json(data: Any) -> str:
    return orjson.dumps(data).decode("utf-8")


def safe_float(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, ``None`` for absent or non-finite input.

    Raises ``TypeError``/``ValueError`` for values that cannot be read as a number.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise TypeError(f"boolean is not a rating: {value!r}")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    result = float(value)
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def mean_or_none(values: Iterable[Optional[float]]) -> Optional[float]:
    """Arithmetic mean of the defined values, ``None`` when there are none."""
    defined = [float(v) for v in values if v is not None]
    if not defined:
        return None
    return math.fsum(defined) / len(defined)


def mean_or_zero(values: Iterable[Optional[float]]) -> float:
    result = mean_or_none(values)
    return 0.0 if result is None else result
