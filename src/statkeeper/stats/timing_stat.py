"""Named timing stats stored in the shared timing table.

Subclass :class:`TimingStat` to declare a timing stream::

    class ResponseTimeStats(TimingStat):
        pass

    stats = ResponseTimeStats(engine)
    stats.start("conversation-42")
    stats.end("conversation-42")
    stats.query().group_by_hour().get()

Rows are scoped by the ``name`` column, which defaults to the class name.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, ClassVar, Mapping

import sqlalchemy as sa
from sqlalchemy.engine import Engine

from ..db.schema import time_stats_events
from ..domain.clock import Clock
from ..domain.models import TimingEvent
from ..domain.periods import Period
from .period_range import DEFAULT_PERIOD, DEFAULT_RANGE
from .timing_query import TimingQuery
from .timing_writer import TimingWriter


class TimingStat:
    """Base class for a named timing stream."""

    name: ClassVar[str | None] = None

    def __init__(
        self,
        engine: Engine,
        table: sa.Table = time_stats_events,
        *,
        attributes: Mapping[str, Any] | None = None,
        clock: Clock | None = None,
        default_period: Period | str = DEFAULT_PERIOD,
        default_range: timedelta = DEFAULT_RANGE,
    ) -> None:
        self._engine = engine
        self._table = table
        self._attributes = {**(attributes or {}), "name": self.get_name()}
        self._clock = clock
        self._default_period = default_period
        self._default_range = default_range

    @classmethod
    def get_name(cls) -> str:
        return cls.name or cls.__name__

    def writer(self) -> TimingWriter:
        return TimingWriter(
            self._engine, self._table, self._attributes, clock=self._clock
        )

    def query(self) -> TimingQuery:
        return TimingQuery(
            self._engine,
            self._table,
            self._attributes,
            clock=self._clock,
            default_period=self._default_period,
            default_range=self._default_range,
        )

    def start(
        self,
        identifier: str,
        at: datetime | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> TimingEvent:
        return self.writer().start(identifier, at, context)

    def end(
        self,
        identifier: str,
        at: datetime | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> int | None:
        """Close the timer; ``None`` when no start is open for ``identifier``."""

        return self.writer().end(identifier, at, context)

    def record(
        self,
        duration_ms: int,
        at: datetime | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> TimingEvent:
        return self.writer().record(duration_ms, at, context)


__all__ = ["TimingStat"]
