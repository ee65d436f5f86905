"""Value objects for stored events and aggregation results.

Events mirror the two persisted table shapes (counter events and timing
events). Aggregation results are immutable snapshots: one
:class:`TimeDataPoint` per timing bucket and one :class:`CounterDataPoint` per
counter bucket.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Mapping

_MS_PER_SECOND = 1_000
_MS_PER_MINUTE = 60_000


class CounterEventType(str, Enum):
    """Kinds of counter mutations."""

    CHANGE = "change"
    SET = "set"


class TimingEventType(str, Enum):
    """Kinds of timing rows.

    ``start`` rows stay open until a matching ``end`` stamps their
    ``ended_at``; ``completed`` rows carry the measured duration.
    """

    START = "start"
    COMPLETED = "completed"


def round_half_up(value: float, places: int = 2) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


@dataclass(slots=True, frozen=True)
class CounterEvent:
    """Single append-only counter mutation."""

    id: int
    owner_id: Any
    name: str
    type: CounterEventType
    value: int
    created_at: datetime
    tenant_id: Any = None

    @classmethod
    def from_row(
        cls,
        row: Mapping[str, Any],
        *,
        owner_key: str,
        tenant_key: str | None = None,
    ) -> "CounterEvent":
        return cls(
            id=row["id"],
            owner_id=row[owner_key],
            name=row["name"],
            type=CounterEventType(row["type"]),
            value=int(row["value"]),
            created_at=row["created_at"],
            tenant_id=row.get(tenant_key) if tenant_key else None,
        )


@dataclass(slots=True, frozen=True)
class TimingEvent:
    """Single timing row: an open/closed start marker or a completed duration."""

    id: int
    type: TimingEventType
    identifier: str | None
    started_at: datetime
    ended_at: datetime | None
    duration_ms: int | None
    context: dict[str, Any] | None
    scope: dict[str, Any] = field(default_factory=dict)

    @property
    def is_open(self) -> bool:
        return self.type is TimingEventType.START and self.ended_at is None


@dataclass(slots=True, frozen=True)
class TimeDataPoint:
    """Timing statistics for one bucket ``[start, end)``."""

    start: datetime
    end: datetime
    count: int
    total_duration_ms: int
    average_duration_ms: int
    min_duration_ms: int
    max_duration_ms: int
    average_seconds: float
    average_minutes: float

    @classmethod
    def empty(cls, start: datetime, end: datetime) -> "TimeDataPoint":
        return cls(
            start=start,
            end=end,
            count=0,
            total_duration_ms=0,
            average_duration_ms=0,
            min_duration_ms=0,
            max_duration_ms=0,
            average_seconds=0.0,
            average_minutes=0.0,
        )

    @classmethod
    def from_aggregate(
        cls, start: datetime, end: datetime, row: Mapping[str, Any]
    ) -> "TimeDataPoint":
        """Build a point from a ``count/sum/avg/min/max`` row.

        The average is truncated to whole milliseconds before the derived
        seconds and minutes are computed.
        """

        average_ms = int(row["avg_duration_ms"] or 0)
        return cls(
            start=start,
            end=end,
            count=int(row["count"] or 0),
            total_duration_ms=int(row["total_duration_ms"] or 0),
            average_duration_ms=average_ms,
            min_duration_ms=int(row["min_duration_ms"] or 0),
            max_duration_ms=int(row["max_duration_ms"] or 0),
            average_seconds=round_half_up(average_ms / _MS_PER_SECOND),
            average_minutes=round_half_up(average_ms / _MS_PER_MINUTE),
        )

    def average_duration_in_seconds(self) -> float:
        return round_half_up(self.average_duration_ms / _MS_PER_SECOND)

    def average_duration_in_minutes(self) -> float:
        return round_half_up(self.average_duration_ms / _MS_PER_MINUTE)

    def total_duration_in_seconds(self) -> float:
        return round_half_up(self.total_duration_ms / _MS_PER_SECOND)

    def total_duration_in_minutes(self) -> float:
        return round_half_up(self.total_duration_ms / _MS_PER_MINUTE)

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "count": self.count,
            "total_duration_ms": self.total_duration_ms,
            "average_duration_ms": self.average_duration_ms,
            "min_duration_ms": self.min_duration_ms,
            "max_duration_ms": self.max_duration_ms,
            "average_seconds": self.average_seconds,
            "average_minutes": self.average_minutes,
        }


@dataclass(slots=True, frozen=True)
class CounterDataPoint:
    """Counter movement within one bucket ``[start, end)``.

    ``value`` is the counter value once every event of the bucket has been
    applied; ``difference`` compares it with the value at the bucket start and
    therefore also reflects absolute ``set`` events.
    """

    start: datetime
    end: datetime
    value: int
    increments: int
    decrements: int
    difference: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "value": self.value,
            "increments": self.increments,
            "decrements": self.decrements,
            "difference": self.difference,
        }


__all__ = [
    "CounterDataPoint",
    "CounterEvent",
    "CounterEventType",
    "TimeDataPoint",
    "TimingEvent",
    "TimingEventType",
    "round_half_up",
]
