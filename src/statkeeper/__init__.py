"""Event-sourced counter stats and time-bucketed timing stats on SQLAlchemy."""

from .config import StatsSettings, create_engine_from_settings
from .db.schema import counter_events_table, time_stats_events, time_stats_events_table
from .domain.models import (
    CounterDataPoint,
    CounterEvent,
    CounterEventType,
    TimeDataPoint,
    TimingEvent,
    TimingEventType,
)
from .domain.periods import Period
from .exceptions import CapabilityError, StatsError, ValidationError
from .logging import configure_logging
from .stats import (
    CounterFamily,
    CounterQuery,
    CounterRepository,
    StatScope,
    TimingQuery,
    TimingStat,
    TimingWriter,
)

__all__ = [
    "CapabilityError",
    "CounterDataPoint",
    "CounterEvent",
    "CounterEventType",
    "CounterFamily",
    "CounterQuery",
    "CounterRepository",
    "Period",
    "StatScope",
    "StatsError",
    "StatsSettings",
    "TimeDataPoint",
    "TimingEvent",
    "TimingEventType",
    "TimingQuery",
    "TimingStat",
    "TimingWriter",
    "ValidationError",
    "configure_logging",
    "counter_events_table",
    "create_engine_from_settings",
    "time_stats_events",
    "time_stats_events_table",
]
