"""Utility functions for the ExamGrader backend."""

import math
import uuid
from datetime import datetime, timezone
from typing import Iterable, List, Tuple


def new_id(prefix: str) -> str:
    """Generate a prefixed identifier, e.g. ``sub_1a2b3c4d5e6f``."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def round_half_up(value: float) -> int:
    """Round .5 upwards, like the browser's Math.round."""
    return int(math.floor(value + 0.5))


def format_percentage(obtained: float, total: float) -> int:
    """Whole-number percentage; 0 when nothing was possible."""
    if total == 0:
        return 0
    return round_half_up((obtained / total) * 100)


def to_naive_utc(value: datetime) -> datetime:
    """Convert to UTC and drop tzinfo. Naive values are taken as UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def month_window(month: int, year: int) -> Tuple[datetime, datetime]:
    """
    Return ``(start, end)`` for a calendar month in UTC.

    ``end`` is the first instant of the following month, so a query of
    ``start <= t < end`` includes the month's last instant.
    """
    start = datetime(year, month, 1)
    if month == 12:
        end = datetime(year + 1, 1, 1)
    else:
        end = datetime(year, month + 1, 1)
    return start, end


def previous_month(month: int, year: int) -> Tuple[int, int]:
    """January rolls back to December of the previous year."""
    if month == 1:
        return 12, year - 1
    return month - 1, year


def unique_in_order(items: Iterable[str]) -> List[str]:
    """Drop duplicates, keeping the first occurrence of each item."""
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result
