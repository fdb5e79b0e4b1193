"""
Timestamp coercion and whole-day arithmetic.

Key concepts:
  - All timestamps inside the engine are timezone-aware UTC ``datetime``
    objects.  Naive inputs are assumed to already be UTC; date-only inputs
    are anchored at midnight UTC.
  - Day counts are the signed difference between two instants expressed in
    days and rounded half-up, so 14.5 days counts as 15.
  - ``now`` is never read implicitly by the analytics engine; ``utcnow()``
    exists for the CLI layer only.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

from program_insights.utils.numeric import round_half_up

_SECONDS_PER_DAY = 86_400.0

# Placeholder strings the admin API emits instead of null.
_NULL_STRINGS = frozenset({"", "null", "undefined", "none", "n/a"})


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to a naive datetime, or convert an aware one to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Coerce a raw timestamp value to an aware UTC ``datetime`` or ``None``.

    Accepts ``datetime``, ``date``, and ISO-8601 strings (``"2024-01-15"``,
    ``"2024-01-15T08:30:00Z"``, ``"2024-01-15 08:30:00"``).  Anything else,
    including placeholder strings such as ``"null"``, yields ``None``.

    Args:
        value: Raw value from an input record.

    Returns:
        Aware UTC datetime, or ``None`` when the value is missing or invalid.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if text.lower() in _NULL_STRINGS:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return ensure_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def days_between(start: datetime, end: datetime) -> int:
    """Signed whole days from ``start`` to ``end`` (rounded half-up)."""
    return round_half_up((end - start).total_seconds() / _SECONDS_PER_DAY)


def days_ago(now: datetime, days: int) -> datetime:
    """Return the instant exactly ``days`` x 24h before ``now``."""
    return ensure_utc(now) - timedelta(days=days)


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)
