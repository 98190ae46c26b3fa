"""Shared helpers for reading loosely-shaped snapshot content."""

from __future__ import annotations

import math
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal


def read_field(item: object, name: str) -> object:
    """Read *name* from a dataclass row or a plain mapping; missing is None."""
    if item is None:
        return None
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def as_list(value: object) -> list:
    """Sequences pass through as a list; anything else is empty."""
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def as_number(value: object) -> float | None:
    """Numeric value or None for missing, NaN and unparseable input."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def build_map_by_key(items: object, key: str) -> dict[object, object]:
    """Index rows by *key*; later duplicates win, rows without a key are skipped."""
    mapping: dict[object, object] = {}
    for item in as_list(items):
        value = read_field(item, key)
        if value is not None:
            mapping[value] = item
    return mapping


def format_numeric(value: float | None, digits: int = 1) -> str:
    """Fixed-point text with ties rounded away from zero (0.25 -> "0.3")."""
    if value is None:
        return "--"
    if not math.isfinite(value):
        return f"{value:.{digits}f}"
    return str(Decimal(value).quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP))
