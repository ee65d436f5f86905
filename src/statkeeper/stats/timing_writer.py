"""Timing event writer: start/end pairing and direct duration records."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

import sqlalchemy as sa
import structlog
from sqlalchemy.engine import Connection, Engine

from ..db.filters import ensure_columns, equality_conditions
from ..domain.clock import Clock, as_utc, epoch_ms, resolve_timestamp, utc_now
from ..domain.models import TimingEvent, TimingEventType

logger = structlog.get_logger(__name__)


class TimingWriter:
    """Append timing rows scoped by a fixed set of column attributes.

    ``end`` closes the most recent open ``start`` for an identifier (LIFO). The
    start row is kept and only gets its ``ended_at`` stamped, so it can no
    longer be matched.
    """

    def __init__(
        self,
        engine: Engine,
        table: sa.Table,
        attributes: Mapping[str, Any] | None = None,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._engine = engine
        self._table = table
        self._attributes = dict(attributes or {})
        self._clock = clock or utc_now
        ensure_columns(table, self._attributes)

    @property
    def table(self) -> sa.Table:
        return self._table

    @property
    def attributes(self) -> dict[str, Any]:
        return dict(self._attributes)

    def start(
        self,
        identifier: str,
        at: datetime | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> TimingEvent:
        """Open a timer for ``identifier``; never checks for existing opens."""

        started_at = resolve_timestamp(at, self._clock)
        with self._engine.begin() as conn:
            event = self._insert(
                conn,
                event_type=TimingEventType.START,
                identifier=identifier,
                started_at=started_at,
                ended_at=None,
                duration_ms=None,
                context=context,
            )
        logger.debug("timing_started", table=self._table.name, identifier=identifier)
        return event

    def end(
        self,
        identifier: str,
        at: datetime | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> int | None:
        """Close the newest open timer and return its duration in ms.

        Returns ``None`` and writes nothing when no open start exists for
        ``identifier`` in this scope. Start and end contexts are merged, end
        keys winning.
        """

        ended_at = resolve_timestamp(at, self._clock)
        columns = self._table.c
        lookup = (
            sa.select(columns.id, columns.started_at, columns.context)
            .where(
                *equality_conditions(self._table, self._attributes),
                columns.type == TimingEventType.START.value,
                columns.identifier == identifier,
                columns.ended_at.is_(None),
            )
            .order_by(columns.started_at.desc(), columns.id.desc())
            .limit(1)
        )
        with self._engine.begin() as conn:
            opened = conn.execute(lookup).first()
            if opened is None:
                logger.debug(
                    "timing_end_unmatched",
                    table=self._table.name,
                    identifier=identifier,
                )
                return None

            duration_ms = epoch_ms(ended_at) - epoch_ms(opened.started_at)
            self._insert(
                conn,
                event_type=TimingEventType.COMPLETED,
                identifier=identifier,
                started_at=opened.started_at,
                ended_at=ended_at,
                duration_ms=duration_ms,
                context={**(opened.context or {}), **(context or {})},
            )
            conn.execute(
                sa.update(self._table)
                .where(columns.id == opened.id)
                .values(ended_at=ended_at, updated_at=as_utc(self._clock()))
            )
        logger.debug(
            "timing_completed",
            table=self._table.name,
            identifier=identifier,
            duration_ms=duration_ms,
        )
        return duration_ms

    def record(
        self,
        duration_ms: int,
        at: datetime | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> TimingEvent:
        """Store a pre-measured duration without a start marker."""

        recorded_at = resolve_timestamp(at, self._clock)
        with self._engine.begin() as conn:
            event = self._insert(
                conn,
                event_type=TimingEventType.COMPLETED,
                identifier=None,
                started_at=recorded_at,
                ended_at=recorded_at,
                duration_ms=int(duration_ms),
                context=context,
            )
        logger.debug(
            "timing_recorded", table=self._table.name, duration_ms=int(duration_ms)
        )
        return event

    def _insert(
        self,
        conn: Connection,
        *,
        event_type: TimingEventType,
        identifier: str | None,
        started_at: datetime,
        ended_at: datetime | None,
        duration_ms: int | None,
        context: Mapping[str, Any] | None,
    ) -> TimingEvent:
        now = as_utc(self._clock())
        stored_context = dict(context) if context else None
        values = {
            **self._attributes,
            "type": event_type.value,
            "identifier": identifier,
            "started_at": started_at,
            "ended_at": ended_at,
            "duration_ms": duration_ms,
            "context": stored_context,
            "created_at": now,
            "updated_at": now,
        }
        result = conn.execute(sa.insert(self._table).values(values))
        return TimingEvent(
            id=result.inserted_primary_key[0],
            type=event_type,
            identifier=identifier,
            started_at=started_at,
            ended_at=ended_at,
            duration_ms=duration_ms,
            context=stored_context,
            scope=dict(self._attributes),
        )


__all__ = ["TimingWriter"]
