"""SQLAlchemy table shapes for counter and timing events.

Provisioning (``metadata.create_all`` or a migration tool) is left to the
caller; the library only relies on the columns and indexes declared here.
"""

from __future__ import annotations

from sqlalchemy import (
    JSON,
    BigInteger,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import TypeEngine

from ..exceptions import ValidationError

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

TENANT_KEY = "tenant_id"
DEFAULT_TIME_STATS_TABLE = "time_stats_events"

# SQLite only autoincrements an ``INTEGER PRIMARY KEY``.
IdType = BigInteger().with_variant(Integer(), "sqlite")

ContextType = JSON(none_as_null=True).with_variant(
    JSONB(none_as_null=True), "postgresql"
)
"""Structured context column: JSONB on PostgreSQL, JSON elsewhere."""

metadata = MetaData(naming_convention=NAMING_CONVENTION)


def _timestamps() -> list[Column]:
    return [
        Column("created_at", DateTime(), nullable=False, server_default=func.now()),
        Column("updated_at", DateTime(), nullable=False, server_default=func.now()),
    ]


def counter_events_table(
    name: str,
    metadata: MetaData,
    *,
    owner_key: str,
    tenant_aware: bool = False,
    owner_type: TypeEngine | type[TypeEngine] = BigInteger,
) -> Table:
    """Declare a counter event table for one stat family.

    Tenant-aware families get a nullable ``tenant_id`` column that is part of
    the lookup index. A non tenant-aware family may still use ``tenant_id`` as
    its *owner* key; it is then an ordinary required column.
    """

    columns: list[Column] = [Column("id", IdType, primary_key=True, autoincrement=True)]
    if tenant_aware:
        if owner_key == TENANT_KEY:
            raise ValidationError(
                f"Tenant-aware table {name!r} cannot use {TENANT_KEY!r} as owner key"
            )
        columns.append(Column(TENANT_KEY, BigInteger, nullable=True))
    columns.extend(
        [
            Column(owner_key, owner_type, nullable=False),
            Column("name", String(255), nullable=False),
            Column("type", String(16), nullable=False),
            Column("value", BigInteger, nullable=False),
            *_timestamps(),
        ]
    )
    table = Table(name, metadata, *columns)
    index_columns = [owner_key, "name", "created_at"]
    if tenant_aware:
        index_columns.insert(0, TENANT_KEY)
    Index(f"ix_{name}_scope_created_at", *(table.c[col] for col in index_columns))
    return table


def time_stats_events_table(
    metadata: MetaData,
    *scope_columns: Column,
    name: str = DEFAULT_TIME_STATS_TABLE,
) -> Table:
    """Declare the timing event table.

    ``scope_columns`` are extra equality-matched attributes such as
    ``tenant_id`` or ``employee_id``; the ``name`` column scopes named timing
    stats.
    """

    table = Table(
        name,
        metadata,
        Column("id", IdType, primary_key=True, autoincrement=True),
        Column("name", String(255), nullable=True),
        *scope_columns,
        Column("type", String(16), nullable=False),
        Column("identifier", String(255), nullable=True),
        Column("started_at", DateTime(), nullable=False),
        Column("ended_at", DateTime(), nullable=True),
        Column("duration_ms", BigInteger, nullable=True),
        Column("context", ContextType, nullable=True),
        *_timestamps(),
    )
    Index(f"ix_{name}_type_identifier", table.c.type, table.c.identifier)
    Index(f"ix_{name}_started_at", table.c.started_at)
    return table


time_stats_events = time_stats_events_table(metadata)

__all__ = [
    "ContextType",
    "DEFAULT_TIME_STATS_TABLE",
    "NAMING_CONVENTION",
    "TENANT_KEY",
    "counter_events_table",
    "metadata",
    "time_stats_events",
    "time_stats_events_table",
]
