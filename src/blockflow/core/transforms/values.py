# src/blockflow/core/transforms/values.py
"""Cell coercions shared by the transform algorithms."""

from __future__ import annotations

import json
import locale
import math
from collections.abc import Callable
from datetime import UTC, date, datetime
from typing import Any

# (percent complete 0-100, human-readable message)
type ProgressCallback = Callable[[float, str], None]


def to_number(value: Any) -> float | None:
    """Numeric view of a cell for comparisons, or None when not numeric."""
    if value is None:
        return None
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else float(value)
    if isinstance(value, (datetime, date)):
        return instant(value)
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return None if math.isnan(number) else number
    return None


def coerce_number(value: Any) -> int | float | None:
    """Number suitable for arithmetic; ints stay ints, booleans are not numbers."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return None if math.isnan(value) else value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return None if math.isnan(number) else number
    return None


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_temporal(value: Any) -> bool:
    return isinstance(value, (datetime, date))


def instant(value: datetime | date) -> float:
    """POSIX timestamp; naive values and plain dates are taken as UTC."""
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.timestamp()


def to_text(value: Any) -> str:
    """String coercion used by string operators and text comparison."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def compare_text(left: str, right: str) -> int:
    """Case-insensitive, locale-aware three-way comparison."""
    return locale.strcoll(left.casefold(), right.casefold())
