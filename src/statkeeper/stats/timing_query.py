"""Time-bucketed aggregation over completed timing events."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Iterator, Mapping

import sqlalchemy as sa
import structlog
from sqlalchemy.engine import Engine

from ..db.dialects import period_key_expression
from ..db.filters import ensure_columns, equality_conditions
from ..domain.clock import Clock
from ..domain.models import TimeDataPoint, TimingEventType
from ..domain.periods import Period, generate_periods
from .period_range import DEFAULT_PERIOD, DEFAULT_RANGE, PeriodRangeQuery

logger = structlog.get_logger(__name__)


class TimingQuery(PeriodRangeQuery):
    """Aggregate ``completed`` timing rows whose ``started_at`` is in range.

    ``get`` returns one :class:`TimeDataPoint` per bucket, zero-filled where
    nothing was recorded. The ``get_*`` accessors aggregate the whole range.
    """

    def __init__(
        self,
        engine: Engine,
        table: sa.Table,
        attributes: Mapping[str, Any] | None = None,
        *,
        clock: Clock | None = None,
        default_period: Period | str = DEFAULT_PERIOD,
        default_range: timedelta = DEFAULT_RANGE,
    ) -> None:
        super().__init__(
            clock=clock, default_period=default_period, default_range=default_range
        )
        self._engine = engine
        self._table = table
        self._attributes = dict(attributes or {})
        ensure_columns(table, self._attributes)

    @property
    def attributes(self) -> dict[str, Any]:
        return dict(self._attributes)

    def get(self) -> list[TimeDataPoint]:
        return list(self.iter_points())

    def iter_points(self) -> Iterator[TimeDataPoint]:
        """Yield bucket summaries in chronological order."""

        start, end = self.bounds()
        stats = self._stats_per_period(start, end)
        logger.debug(
            "timing_periods_aggregated",
            table=self._table.name,
            period=self.period.value,
            populated=len(stats),
        )
        for bucket in generate_periods(start, end, self.period):
            row = stats.get(bucket.key)
            if row is None:
                yield TimeDataPoint.empty(bucket.start, bucket.end)
            else:
                yield TimeDataPoint.from_aggregate(bucket.start, bucket.end, row)

    def get_average(self) -> int:
        return self._aggregate(sa.func.avg(self._table.c.duration_ms))

    def get_count(self) -> int:
        return self._aggregate(sa.func.count())

    def get_min(self) -> int:
        return self._aggregate(sa.func.min(self._table.c.duration_ms))

    def get_max(self) -> int:
        return self._aggregate(sa.func.max(self._table.c.duration_ms))

    def _conditions(self, start: datetime, end: datetime) -> list[sa.ColumnElement[bool]]:
        columns = self._table.c
        return [
            *equality_conditions(self._table, self._attributes),
            columns.type == TimingEventType.COMPLETED.value,
            columns.started_at >= start,
            columns.started_at < end,
            columns.duration_ms.is_not(None),
        ]

    def _aggregate(self, expression: sa.ColumnElement[Any]) -> int:
        start, end = self.bounds()
        stmt = sa.select(expression).select_from(self._table).where(
            *self._conditions(start, end)
        )
        with self._engine.connect() as conn:
            result = conn.execute(stmt).scalar()
        return int(result or 0)

    def _stats_per_period(
        self, start: datetime, end: datetime
    ) -> dict[str, Mapping[str, Any]]:
        duration = self._table.c.duration_ms
        period_key = period_key_expression(
            self._engine.dialect.name, self.period, self._table.c.started_at
        )
        stmt = (
            sa.select(
                sa.func.count().label("count"),
                sa.func.sum(duration).label("total_duration_ms"),
                sa.func.avg(duration).label("avg_duration_ms"),
                sa.func.min(duration).label("min_duration_ms"),
                sa.func.max(duration).label("max_duration_ms"),
                period_key.label("period"),
            )
            .select_from(self._table)
            .where(*self._conditions(start, end))
            .group_by(period_key)
        )
        with self._engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return {str(row["period"]): row for row in rows}


__all__ = ["TimingQuery"]
