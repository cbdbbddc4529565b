# synergies/services/filters.py
"""
In-memory filters applied to an already loaded view, the way the back-office
screens narrow their tables: free-text search, multi-select and date range.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional, Sequence
from zoneinfo import ZoneInfo

from synergies.core.clock import as_utc
from synergies.core.config import settings


def matches_search(q: Optional[str], values: Iterable[Optional[str]]) -> bool:
    """Case-insensitive substring test on any of the values; empty query matches."""
    if not q:
        return True
    needle = q.strip().lower()
    if not needle:
        return True
    return any(needle in (v or "").lower() for v in values)


def in_selection(value: Optional[str], selected: Optional[Sequence[str]]) -> bool:
    """Empty selection lets everything through."""
    if not selected:
        return True
    return (value or "") in selected


def in_date_range(
    value: datetime,
    date_from: Optional[date],
    date_to: Optional[date],
) -> bool:
    """
    Inclusive on both ends, in the back office's local time:
    date_from starts at 00:00:00, date_to runs through 23:59:59.
    """
    tz = ZoneInfo(settings.DISPLAY_TIMEZONE)
    ts = as_utc(value)
    if date_from is not None:
        start = datetime.combine(date_from, time.min, tzinfo=tz)
        if ts < start:
            return False
    if date_to is not None:
        end = datetime.combine(date_to + timedelta(days=1), time.min, tzinfo=tz)
        if ts >= end:
            return False
    return True


def distinct_sorted(values: Iterable[Optional[str]]) -> list[str]:
    return sorted({v for v in values if v})
