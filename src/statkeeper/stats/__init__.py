"""Counter and timing stats: scopes, writers and queries."""

from .counter_query import CounterQuery
from .counters import CounterRepository
from .families import CounterFamily
from .scope import HasId, StatScope, resolve_key
from .timing_query import TimingQuery
from .timing_stat import TimingStat
from .timing_writer import TimingWriter

__all__ = [
    "CounterFamily",
    "CounterQuery",
    "CounterRepository",
    "HasId",
    "StatScope",
    "TimingQuery",
    "TimingStat",
    "TimingWriter",
    "resolve_key",
]
