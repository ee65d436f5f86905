"""Fixed-width period arithmetic used to bucket events.

Bucket keys produced here must match, character for character, the keys the
store computes with :func:`statkeeper.db.dialects.period_key_expression`.
Weeks follow ISO-8601: they start on Monday and are keyed by ISO year and ISO
week number, so the last days of December can belong to week ``01`` of the
next year.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Iterator, NamedTuple

from ..exceptions import ValidationError


class Period(str, Enum):
    """Supported bucket widths."""

    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @classmethod
    def parse(cls, value: "Period | str") -> "Period":
        if isinstance(value, Period):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as exc:
            raise ValidationError(f"Unsupported period: {value!r}") from exc


class PeriodBucket(NamedTuple):
    """Half-open bucket ``[start, end)`` with its canonical key."""

    start: datetime
    end: datetime
    key: str


def truncate(value: datetime, period: Period) -> datetime:
    """Round ``value`` down to the start of its ``period``."""

    if period is Period.MINUTE:
        return value.replace(second=0, microsecond=0)
    if period is Period.HOUR:
        return value.replace(minute=0, second=0, microsecond=0)
    day_start = value.replace(hour=0, minute=0, second=0, microsecond=0)
    if period is Period.DAY:
        return day_start
    if period is Period.WEEK:
        return day_start - timedelta(days=day_start.weekday())
    if period is Period.MONTH:
        return day_start.replace(day=1)
    if period is Period.YEAR:
        return day_start.replace(month=1, day=1)
    raise ValidationError(f"Unsupported period: {period!r}")


def advance(value: datetime, period: Period, steps: int = 1) -> datetime:
    """Move a truncated ``value`` forward by ``steps`` whole periods."""

    if period is Period.MINUTE:
        return value + timedelta(minutes=steps)
    if period is Period.HOUR:
        return value + timedelta(hours=steps)
    if period is Period.DAY:
        return value + timedelta(days=steps)
    if period is Period.WEEK:
        return value + timedelta(weeks=steps)
    if period is Period.MONTH:
        months = value.year * 12 + (value.month - 1) + steps
        return value.replace(year=months // 12, month=months % 12 + 1)
    if period is Period.YEAR:
        return value.replace(year=value.year + steps)
    raise ValidationError(f"Unsupported period: {period!r}")


def period_key(value: datetime, period: Period) -> str:
    """Canonical textual key of the bucket containing ``value``."""

    if period is Period.WEEK:
        iso_year, iso_week, _ = value.isocalendar()
        return f"{iso_year:04d}{iso_week:02d}"
    return value.strftime(_KEY_FORMATS[period])


_KEY_FORMATS = {
    Period.YEAR: "%Y",
    Period.MONTH: "%Y-%m",
    Period.DAY: "%Y-%m-%d",
    Period.HOUR: "%Y-%m-%d %H",
    Period.MINUTE: "%Y-%m-%d %H:%M",
}


def generate_periods(
    start: datetime, end: datetime, period: Period
) -> Iterator[PeriodBucket]:
    """Yield consecutive buckets covering ``[start, end)``.

    At least one bucket is always produced, even when ``start >= end``.
    """

    current = truncate(start, period)
    while True:
        following = advance(current, period)
        yield PeriodBucket(current, following, period_key(current, period))
        current = following
        if not current < end:
            break


__all__ = [
    "Period",
    "PeriodBucket",
    "advance",
    "generate_periods",
    "period_key",
    "truncate",
]
