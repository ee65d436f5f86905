"""Persistence helpers: table shapes, filters and dialect expressions."""

from .dialects import SUPPORTED_DIALECTS, period_key_expression, truncation_sql
from .filters import ensure_columns, equality_conditions
from .schema import (
    counter_events_table,
    metadata,
    time_stats_events,
    time_stats_events_table,
)

__all__ = [
    "SUPPORTED_DIALECTS",
    "counter_events_table",
    "ensure_columns",
    "equality_conditions",
    "metadata",
    "period_key_expression",
    "time_stats_events",
    "time_stats_events_table",
    "truncation_sql",
]
