"""Descriptors binding a counter stat family to its table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import sqlalchemy as sa
from sqlalchemy.types import TypeEngine

from ..db.schema import TENANT_KEY, counter_events_table
from ..domain.models import CounterEvent


@dataclass(slots=True, frozen=True)
class CounterFamily:
    """A stat family: one counter table keyed by an owner foreign key.

    ``tenant_aware`` is a static capability. Only tenant-aware families accept
    a tenant scope and filter on ``tenant_id``.
    """

    table: sa.Table
    owner_key: str
    tenant_aware: bool = False

    @classmethod
    def define(
        cls,
        name: str,
        metadata: sa.MetaData,
        *,
        owner_key: str,
        tenant_aware: bool = False,
        owner_type: TypeEngine | type[TypeEngine] = sa.BigInteger,
    ) -> "CounterFamily":
        """Declare the family's table on ``metadata`` and wrap it."""

        table = counter_events_table(
            name,
            metadata,
            owner_key=owner_key,
            tenant_aware=tenant_aware,
            owner_type=owner_type,
        )
        return cls(table=table, owner_key=owner_key, tenant_aware=tenant_aware)

    @property
    def name(self) -> str:
        return self.table.name

    @property
    def tenant_key(self) -> str | None:
        return TENANT_KEY if self.tenant_aware else None

    def is_tenant_aware(self) -> bool:
        return self.tenant_aware

    def to_event(self, row: Mapping[str, Any]) -> CounterEvent:
        return CounterEvent.from_row(
            row, owner_key=self.owner_key, tenant_key=self.tenant_key
        )


__all__ = ["CounterFamily"]
