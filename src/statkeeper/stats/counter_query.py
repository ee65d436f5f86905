"""Counter reconstruction from the append-only event log.

The value of a counter at ``t`` is the value of its latest ``set`` event at or
before ``t`` (zero without one) plus every ``change`` recorded after that
``set`` and not after ``t``. Events sharing a timestamp are ordered by their
primary key, i.e. insertion order.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Mapping

import sqlalchemy as sa
import structlog
from sqlalchemy.engine import Connection, Engine

from ..db.filters import equality_conditions
from ..domain.clock import Clock, resolve_timestamp
from ..domain.models import CounterDataPoint, CounterEvent, CounterEventType
from ..domain.periods import Period, generate_periods
from .families import CounterFamily
from .period_range import DEFAULT_PERIOD, DEFAULT_RANGE, PeriodRangeQuery

logger = structlog.get_logger(__name__)


class CounterQuery(PeriodRangeQuery):
    """Read side of one named counter within a scope."""

    def __init__(
        self,
        engine: Engine,
        family: CounterFamily,
        criteria: Mapping[str, Any],
        name: str,
        *,
        clock: Clock | None = None,
        default_period: Period | str = DEFAULT_PERIOD,
        default_range: timedelta = DEFAULT_RANGE,
    ) -> None:
        super().__init__(
            clock=clock, default_period=default_period, default_range=default_range
        )
        self._engine = engine
        self._family = family
        self._criteria = dict(criteria)
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def criteria(self) -> dict[str, Any]:
        return dict(self._criteria)

    def get_value(self, as_of: datetime | None = None) -> int:
        """Counter value at ``as_of`` (inclusive); defaults to now."""

        moment = resolve_timestamp(as_of, self._clock)
        with self._engine.connect() as conn:
            return self._value_at(conn, moment, inclusive=True)

    def events(self) -> list[CounterEvent]:
        """Every event of this counter in reconstruction order."""

        table = self._family.table
        stmt = (
            sa.select(table)
            .where(*self._scope())
            .order_by(table.c.created_at.asc(), table.c.id.asc())
        )
        with self._engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [self._family.to_event(row) for row in rows]

    def get(self) -> list[CounterDataPoint]:
        """One :class:`CounterDataPoint` per bucket of the configured range."""

        start, end = self.bounds()
        buckets = list(generate_periods(start, end, self.period))
        first_start = buckets[0].start
        columns = self._family.table.c
        stmt = (
            sa.select(columns.type, columns.value, columns.created_at)
            .where(
                *self._scope(),
                columns.created_at >= first_start,
                columns.created_at < end,
            )
            .order_by(columns.created_at.asc(), columns.id.asc())
        )
        with self._engine.connect() as conn:
            value = self._value_at(conn, first_start, inclusive=False)
            rows = conn.execute(stmt).all()

        points: list[CounterDataPoint] = []
        index = 0
        for bucket in buckets:
            opening = value
            increments = decrements = 0
            while index < len(rows) and rows[index].created_at < bucket.end:
                event_type, amount, _ = rows[index]
                index += 1
                if CounterEventType(event_type) is CounterEventType.SET:
                    value = int(amount)
                    continue
                value += int(amount)
                if amount >= 0:
                    increments += int(amount)
                else:
                    decrements -= int(amount)
            points.append(
                CounterDataPoint(
                    start=bucket.start,
                    end=bucket.end,
                    value=value,
                    increments=increments,
                    decrements=decrements,
                    difference=value - opening,
                )
            )
        logger.debug(
            "counter_series_built",
            table=self._family.name,
            stat=self._name,
            buckets=len(points),
            events=len(rows),
        )
        return points

    def _scope(self) -> list[sa.ColumnElement[bool]]:
        table = self._family.table
        return [
            *equality_conditions(table, self._criteria),
            table.c.name == self._name,
        ]

    def _value_at(self, conn: Connection, moment: datetime, *, inclusive: bool) -> int:
        columns = self._family.table.c
        bound = columns.created_at <= moment if inclusive else columns.created_at < moment
        scope = self._scope()

        last_set = conn.execute(
            sa.select(columns.id, columns.value, columns.created_at)
            .where(*scope, bound, columns.type == CounterEventType.SET.value)
            .order_by(columns.created_at.desc(), columns.id.desc())
            .limit(1)
        ).first()

        change_conditions = [*scope, bound, columns.type == CounterEventType.CHANGE.value]
        base = 0
        if last_set is not None:
            base = int(last_set.value)
            change_conditions.append(
                sa.or_(
                    columns.created_at > last_set.created_at,
                    sa.and_(
                        columns.created_at == last_set.created_at,
                        columns.id > last_set.id,
                    ),
                )
            )
        delta = conn.execute(
            sa.select(sa.func.coalesce(sa.func.sum(columns.value), 0)).where(
                *change_conditions
            )
        ).scalar_one()
        return base + int(delta)


__all__ = ["CounterQuery"]
