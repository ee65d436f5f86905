"""Domain types: events, aggregation results, periods and clocks."""

from .clock import Clock, as_utc, epoch_ms, utc_now
from .models import (
    CounterDataPoint,
    CounterEvent,
    CounterEventType,
    TimeDataPoint,
    TimingEvent,
    TimingEventType,
)
from .periods import Period, PeriodBucket, generate_periods

__all__ = [
    "Clock",
    "CounterDataPoint",
    "CounterEvent",
    "CounterEventType",
    "Period",
    "PeriodBucket",
    "TimeDataPoint",
    "TimingEvent",
    "TimingEventType",
    "as_utc",
    "epoch_ms",
    "generate_periods",
    "utc_now",
]
