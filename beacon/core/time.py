"""
Beacon: Date and Calendar-Month Utilities

This module implements the small amount of calendar arithmetic the
planning engine needs: day distances between an analysis instant and a
deadline, calendar-month keys and offsets, and lenient ISO date parsing.

Key responsibilities:
- Compute whole-day distances between ``now`` and a deadline
- Map dates onto calendar months and step months forwards/backwards
- Parse ISO date strings without raising on malformed input

External dependencies:
- datetime: Standard library date arithmetic only

Thread safety: Thread-safe (stateless, no shared mutable state)

Author: Beacon Team
Created: 2025-11-24
Last Modified: 2025-12-02
Status: Development
Version: v0.1.0
"""

# ============================================================================
# Imports
# ============================================================================

from __future__ import annotations

import math
from datetime import date, datetime, time
from typing import Any, Optional

# ============================================================================
# Constants
# ============================================================================

SECONDS_PER_DAY: int = 24 * 60 * 60

# The engine approximates a month as 30 days when converting day
# distances into month counts.
DAYS_PER_MONTH: int = 30

# ============================================================================
# Public API
# ============================================================================


def as_date(value: date | datetime) -> date:
    """Return the calendar date of ``value``."""

    if isinstance(value, datetime):
        return value.date()
    return value


def days_until(target: date, now: date | datetime) -> int:
    """Return the number of days from ``now`` until ``target``.

    ``target`` is interpreted as midnight at the start of that day. When
    ``now`` carries a time component, partial days are rounded up, so a
    deadline later today-or-tomorrow counts as one day away. Past
    deadlines yield zero or negative values.
    """

    if isinstance(now, datetime):
        deadline = datetime.combine(target, time.min, tzinfo=now.tzinfo)
        seconds = (deadline - now).total_seconds()
        return math.ceil(seconds / SECONDS_PER_DAY)
    return (target - now).days


def months_from_days(days: int) -> int:
    """Convert a day distance into a month count, floored at one month."""

    return max(1, math.ceil(days / DAYS_PER_MONTH))


def month_key(value: date | datetime) -> str:
    """Return the ``YYYY-MM`` key of the month containing ``value``."""

    return f"{value.year:04d}-{value.month:02d}"


def month_start(value: date | datetime) -> date:
    """Return the first day of the month containing ``value``."""

    return date(value.year, value.month, 1)


def calendar_months_between(start: date | datetime, end: date | datetime) -> int:
    """Return the signed number of calendar-month boundaries from start to end.

    Day-of-month is ignored: 2025-01-31 to 2025-02-01 is one month.
    """

    return (end.year - start.year) * 12 + (end.month - start.month)


def add_months(value: date, months: int) -> date:
    """Shift ``value`` by ``months`` calendar months.

    The day is clamped to the last valid day of the resulting month
    (2025-01-31 plus one month is 2025-02-28).
    """

    index = value.year * 12 + (value.month - 1) + months
    year, month_index = divmod(index, 12)
    month = month_index + 1
    day = min(value.day, _days_in_month(year, month))
    return date(year, month, day)


def parse_date(value: Any) -> Optional[date]:
    """Leniently parse ``value`` into a :class:`date`.

    Accepts ``date``/``datetime`` instances and ISO-8601 strings (date
    only or full timestamps, including a trailing ``Z``). Anything else,
    including empty or malformed strings, returns ``None``.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def _days_in_month(year: int, month: int) -> int:
    if month == 12:
        return 31
    return (date(year, month + 1, 1) - date(year, month, 1)).days
