"""
Numeric helpers shared by the analytics engines.

Every percentage and day count shown on the dashboards is rounded half-up
(``2.5 -> 3``), not with Python's banker's rounding, so the same record set
always yields the same integer a program officer sees on screen.
"""

from __future__ import annotations

import math
from typing import Any


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward positive infinity."""
    return math.floor(value + 0.5)


def round_to(value: float, places: int = 2) -> float:
    """Round half-up to ``places`` decimals (display precision for scores)."""
    factor = 10 ** places
    return round_half_up(value * factor) / factor


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def to_number(value: Any, default: float = 0.0) -> float:
    """Coerce a loosely-typed API value to a finite float.

    ``None``, booleans, unparseable strings, NaN and infinities all map to
    ``default``.

    Args:
        value:   Raw value (int, float, Decimal, numeric string, ...).
        default: Returned when ``value`` is not a usable number.

    Returns:
        A finite float.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number
