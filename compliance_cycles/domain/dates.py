"""Day-boundary and calendar primitives shared by both cycle models.

Everything here works on naive datetimes in one local calendar. No timezone
conversion happens: aware inputs keep their wall clock and drop ``tzinfo``.
"""

from __future__ import annotations

import calendar
import math
from datetime import MAXYEAR, date, datetime, time, timedelta
from typing import Any, Sequence

from compliance_cycles.domain.exceptions import InvalidArgument
from compliance_cycles.utils import converters

SECONDS_PER_DAY = 24 * 60 * 60
OUT_OF_RANGE = "date out of supported range"


def coerce_datetime(value: Any, field: str = "date") -> datetime:
    """Return ``value`` as a naive datetime or raise :class:`InvalidArgument`."""

    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidArgument(f"{field} is required")
    parsed = converters.to_datetime(value)
    if parsed is None:
        raise InvalidArgument(f"{field} is not a valid date: {value!r}")
    return parsed


def start_of_day(value: date | datetime) -> datetime:
    day = value.date() if isinstance(value, datetime) else value
    return datetime.combine(day, time.min)


def end_of_day(value: date | datetime) -> datetime:
    day = value.date() if isinstance(value, datetime) else value
    return datetime.combine(day, time.max)


def _check_month(month: int) -> None:
    if not isinstance(month, int) or isinstance(month, bool) or not 1 <= month <= 12:
        raise InvalidArgument(f"Invalid month number: {month}. Must be 1-12.")


def days_in_month(year: int, month: int) -> int:
    """Number of days in ``month`` of ``year`` (leap aware)."""

    _check_month(month)
    return calendar.monthrange(year, month)[1]


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """First instant and last instant of a calendar month."""

    last_day = days_in_month(year, month)
    return start_of_day(date(year, month, 1)), end_of_day(date(year, month, last_day))


def next_month(year: int, month: int) -> tuple[int, int]:
    _check_month(month)
    if month == 12:
        if year >= MAXYEAR:
            raise InvalidArgument(OUT_OF_RANGE)
        return year + 1, 1
    return year, month + 1


def month_name(month: int, names: Sequence[str]) -> str:
    _check_month(month)
    return names[month - 1]


def inclusive_days(start: date | datetime, end: date | datetime) -> int:
    """Calendar days from ``start`` to ``end`` counting both ends; 0 when reversed."""

    first = start.date() if isinstance(start, datetime) else start
    last = end.date() if isinstance(end, datetime) else end
    return max(0, (last - first).days + 1)


def whole_days_between(earlier: datetime, later: datetime) -> int:
    """Completed 24-hour periods from ``earlier`` to ``later`` (never negative)."""

    if later <= earlier:
        return 0
    return (later - earlier) // timedelta(days=1)


def days_until(now: datetime, target: datetime) -> int:
    """Days remaining until ``target``, rounded up."""

    return math.ceil((target - now).total_seconds() / SECONDS_PER_DAY)


def add_days(value: datetime, days: int) -> datetime:
    try:
        return value + timedelta(days=days)
    except OverflowError as exc:
        raise InvalidArgument(OUT_OF_RANGE) from exc


__all__ = [
    "coerce_datetime",
    "start_of_day",
    "end_of_day",
    "days_in_month",
    "month_bounds",
    "next_month",
    "month_name",
    "inclusive_days",
    "whole_days_between",
    "days_until",
    "add_days",
]
