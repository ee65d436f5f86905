"""Write side of counter stats backed by SQLAlchemy Core."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Mapping

import sqlalchemy as sa
import structlog
from sqlalchemy.engine import Engine

from ..db.filters import equality_conditions
from ..domain.clock import Clock, as_utc, resolve_timestamp, utc_now
from ..domain.models import CounterEvent, CounterEventType
from ..domain.periods import Period
from ..exceptions import CapabilityError
from .counter_query import CounterQuery
from .families import CounterFamily
from .period_range import DEFAULT_PERIOD, DEFAULT_RANGE
from .scope import HasId, StatScope, resolve_key

logger = structlog.get_logger(__name__)


class CounterRepository:
    """Append counter events for one stat family and open scopes on it.

    Usage::

        repository = CounterRepository(engine, user_stats)
        repository.for_owner(user).on(tenant).increase("logins")
        repository.for_owner(user).on(tenant).value("logins")
    """

    def __init__(
        self,
        engine: Engine,
        family: CounterFamily,
        *,
        clock: Clock | None = None,
        default_period: Period | str = DEFAULT_PERIOD,
        default_range: timedelta = DEFAULT_RANGE,
    ) -> None:
        self._engine = engine
        self._family = family
        self._clock = clock or utc_now
        self._default_period = Period.parse(default_period)
        self._default_range = default_range

    @property
    def family(self) -> CounterFamily:
        return self._family

    @property
    def engine(self) -> Engine:
        return self._engine

    def for_owner(self, owner: HasId | Any) -> StatScope:
        """Scope subsequent calls to ``owner`` (an entity or its raw id)."""

        return StatScope(repository=self, owner_id=resolve_key(owner))

    def append(
        self,
        criteria: Mapping[str, Any],
        name: str,
        event_type: CounterEventType,
        value: int,
        at: datetime | None = None,
    ) -> CounterEvent:
        """Insert one event and return it as stored."""

        recorded_at = resolve_timestamp(at, self._clock)
        values: dict[str, Any] = {
            **criteria,
            "name": name,
            "type": event_type.value,
            "value": int(value),
            "created_at": recorded_at,
            "updated_at": as_utc(self._clock()),
        }
        with self._engine.begin() as conn:
            result = conn.execute(sa.insert(self._family.table).values(values))
            event_id = result.inserted_primary_key[0]
        logger.debug(
            "counter_event_written",
            table=self._family.name,
            stat=name,
            type=event_type.value,
            value=int(value),
        )
        return self._family.to_event({**values, "id": event_id})

    def query(self, criteria: Mapping[str, Any], name: str) -> CounterQuery:
        return CounterQuery(
            self._engine,
            self._family,
            criteria,
            name,
            clock=self._clock,
            default_period=self._default_period,
            default_range=self._default_range,
        )

    def for_tenant(self, tenant: HasId | Any | None) -> list[CounterEvent]:
        """All events stored for ``tenant`` across owners and stat names."""

        if not self._family.is_tenant_aware():
            raise CapabilityError(
                f"{self._family.name!r} is not tenant-aware and has no tenant scope"
            )
        table = self._family.table
        stmt = (
            sa.select(table)
            .where(
                *equality_conditions(
                    table, {self._family.tenant_key: resolve_key(tenant)}
                )
            )
            .order_by(table.c.created_at.asc(), table.c.id.asc())
        )
        with self._engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [self._family.to_event(row) for row in rows]


__all__ = ["CounterRepository"]
