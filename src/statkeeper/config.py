"""Settings for applications embedding statkeeper.

Values are read from ``STATKEEPER_*`` environment variables. The library
itself never reads settings implicitly: callers build an engine and pass the
query defaults explicitly.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import Column, MetaData, Table, create_engine
from sqlalchemy.engine import Engine

from .db.schema import DEFAULT_TIME_STATS_TABLE, time_stats_events_table
from .domain.periods import Period


class StatsSettings(BaseSettings):
    """Pydantic settings container for stats storage and queries."""

    model_config = SettingsConfigDict(env_prefix="STATKEEPER_")

    database_url: str = Field(
        default="sqlite:///statkeeper.db",
        description="SQLAlchemy URL of the store holding the event tables.",
    )
    time_stats_table_name: str = Field(
        default=DEFAULT_TIME_STATS_TABLE,
        min_length=1,
        description="Name of the timing events table.",
    )
    default_period: Period = Field(
        default=Period.DAY,
        description="Bucket width used when a query does not pick one.",
    )
    default_range_days: int = Field(
        default=7,
        ge=1,
        description="Length of the default query range ending now, in days.",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level applied by configure_logging.",
    )

    @field_validator("default_period", mode="before")
    @classmethod
    def _parse_period(cls, value: Any) -> Period:
        return Period.parse(value)

    @property
    def default_range(self) -> timedelta:
        return timedelta(days=self.default_range_days)

    def time_stats_table(self, metadata: MetaData, *scope_columns: Column) -> Table:
        """Declare the timing table under the configured name."""

        return time_stats_events_table(
            metadata, *scope_columns, name=self.time_stats_table_name
        )

    def query_defaults(self) -> dict[str, Any]:
        """Keyword arguments for repositories, queries and timing stats."""

        return {
            "default_period": self.default_period,
            "default_range": self.default_range,
        }


def create_engine_from_settings(settings: StatsSettings, **kwargs: Any) -> Engine:
    """Build the SQLAlchemy engine described by ``settings``."""

    return create_engine(settings.database_url, **kwargs)


__all__ = ["StatsSettings", "create_engine_from_settings"]
