from __future__ import annotations

from datetime import datetime
from typing import Iterator

import pytest
import sqlalchemy as sa

from statkeeper.db.schema import NAMING_CONVENTION, time_stats_events_table
from statkeeper.stats import CounterFamily, CounterRepository

NOW = datetime(2020, 1, 1, 12, 0, 0)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def metadata() -> sa.MetaData:
    return sa.MetaData(naming_convention=NAMING_CONVENTION)


@pytest.fixture
def engine() -> Iterator[sa.Engine]:
    engine = sa.create_engine("sqlite:///:memory:", future=True)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def user_stats(metadata: sa.MetaData) -> CounterFamily:
    return CounterFamily.define(
        "user_stats_events", metadata, owner_key="user_id", tenant_aware=True
    )


@pytest.fixture
def tenant_stats(metadata: sa.MetaData) -> CounterFamily:
    return CounterFamily.define(
        "tenant_stats_events", metadata, owner_key="tenant_id"
    )


@pytest.fixture
def timing_table(metadata: sa.MetaData) -> sa.Table:
    return time_stats_events_table(
        metadata,
        sa.Column("tenant_id", sa.BigInteger, nullable=True),
        sa.Column("employee_id", sa.BigInteger, nullable=True),
    )


@pytest.fixture
def schema(engine: sa.Engine, metadata: sa.MetaData, user_stats, tenant_stats, timing_table):
    metadata.create_all(engine)
    return metadata


@pytest.fixture
def user_repository(engine, user_stats, schema, clock) -> CounterRepository:
    return CounterRepository(engine, user_stats, clock=clock)


@pytest.fixture
def tenant_repository(engine, tenant_stats, schema, clock) -> CounterRepository:
    return CounterRepository(engine, tenant_stats, clock=clock)
