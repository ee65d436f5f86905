"""Immutable period/range builder shared by counter and timing queries."""

from __future__ import annotations

import copy
from datetime import datetime, timedelta
from typing import TypeVar

from ..domain.clock import Clock, as_utc, utc_now
from ..domain.periods import Period, PeriodBucket, generate_periods

DEFAULT_PERIOD = Period.DAY
DEFAULT_RANGE = timedelta(weeks=1)

_Q = TypeVar("_Q", bound="PeriodRangeQuery")


class PeriodRangeQuery:
    """Fluent ``start``/``end``/``group_by_*`` builder.

    Every builder call returns a modified copy. Unset bounds default to
    ``[now - default_range, now)`` using the injected clock, evaluated when the
    query runs.
    """

    def __init__(
        self,
        *,
        clock: Clock | None = None,
        default_period: Period | str = DEFAULT_PERIOD,
        default_range: timedelta = DEFAULT_RANGE,
    ) -> None:
        self._clock = clock or utc_now
        self._period = Period.parse(default_period)
        self._default_range = default_range
        self._start: datetime | None = None
        self._end: datetime | None = None

    def _with(self: _Q, **changes: object) -> _Q:
        clone = copy.copy(self)
        for key, value in changes.items():
            setattr(clone, f"_{key}", value)
        return clone

    @property
    def period(self) -> Period:
        return self._period

    def group_by(self: _Q, period: Period | str) -> _Q:
        return self._with(period=Period.parse(period))

    def group_by_year(self: _Q) -> _Q:
        return self.group_by(Period.YEAR)

    def group_by_month(self: _Q) -> _Q:
        return self.group_by(Period.MONTH)

    def group_by_week(self: _Q) -> _Q:
        return self.group_by(Period.WEEK)

    def group_by_day(self: _Q) -> _Q:
        return self.group_by(Period.DAY)

    def group_by_hour(self: _Q) -> _Q:
        return self.group_by(Period.HOUR)

    def group_by_minute(self: _Q) -> _Q:
        return self.group_by(Period.MINUTE)

    def start(self: _Q, value: datetime) -> _Q:
        return self._with(start=as_utc(value))

    def end(self: _Q, value: datetime) -> _Q:
        return self._with(end=as_utc(value))

    def bounds(self) -> tuple[datetime, datetime]:
        """Resolved ``(start, end)`` as naive UTC."""

        end = self._end if self._end is not None else as_utc(self._clock())
        start = self._start if self._start is not None else end - self._default_range
        return start, end

    def periods(self) -> list[PeriodBucket]:
        start, end = self.bounds()
        return list(generate_periods(start, end, self._period))


__all__ = ["DEFAULT_PERIOD", "DEFAULT_RANGE", "PeriodRangeQuery"]
