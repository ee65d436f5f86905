"""Scope builder binding a counter family to an owner and optional tenant.

A :class:`StatScope` is immutable: :meth:`StatScope.on` and
:meth:`StatScope.stat` return new scopes, so one scope can be shared between
callers without leaking tenant or stat name state between them.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from ..domain.models import CounterEvent, CounterEventType
from ..exceptions import CapabilityError, ValidationError, ensure_stat_name
from .counter_query import CounterQuery
from .families import CounterFamily

if TYPE_CHECKING:
    from .counters import CounterRepository


@runtime_checkable
class HasId(Protocol):
    """Entity reference: anything exposing its primary key as ``id``."""

    id: Any


class _Unset:
    def __repr__(self) -> str:
        return "<unset>"


UNSET: Any = _Unset()


def resolve_key(subject: HasId | Any) -> Any:
    """Resolve an entity reference or a raw identifier into a key value."""

    if subject is None or isinstance(subject, (int, str, bytes)):
        return subject
    if isinstance(subject, HasId):
        return subject.id
    return subject


@dataclass(slots=True, frozen=True)
class StatScope:
    """Counter operations scoped to one owner (and tenant, when supported)."""

    repository: "CounterRepository"
    owner_id: Any
    tenant: Any = UNSET
    name: str | None = None

    @property
    def family(self) -> CounterFamily:
        return self.repository.family

    @property
    def tenant_is_set(self) -> bool:
        return self.tenant is not UNSET

    @property
    def tenant_id(self) -> Any:
        return None if self.tenant is UNSET else self.tenant

    def on(self, tenant: HasId | Any | None) -> "StatScope":
        """Scope to ``tenant``; ``None`` explicitly means "no tenant"."""

        if not self.family.is_tenant_aware():
            raise CapabilityError(
                "on() can only be called on tenant-aware stat families. "
                f"{self.family.name!r} is not tenant-aware."
            )
        return replace(self, tenant=resolve_key(tenant))

    def stat(self, name: str) -> "StatScope":
        """Remember ``name`` as the default counter for later calls."""

        return replace(self, name=ensure_stat_name(name))

    def criteria(self) -> dict[str, Any]:
        """Equality filter shared by writes and reads of this scope."""

        criteria: dict[str, Any] = {self.family.owner_key: self.owner_id}
        if self.family.tenant_aware:
            criteria[self.family.tenant_key] = self.tenant_id
        return criteria

    def resolve_name(self, name: str | None = None) -> str:
        return ensure_stat_name(name if name is not None else self.name)

    def increase(
        self, name: str | None = None, amount: int = 1, at: datetime | None = None
    ) -> CounterEvent:
        return self.repository.append(
            self.criteria(), self.resolve_name(name), CounterEventType.CHANGE, amount, at
        )

    def decrease(
        self, name: str | None = None, amount: int = 1, at: datetime | None = None
    ) -> CounterEvent:
        return self.repository.append(
            self.criteria(), self.resolve_name(name), CounterEventType.CHANGE, -amount, at
        )

    def set(
        self,
        name: str | None = None,
        value: int | None = None,
        at: datetime | None = None,
    ) -> CounterEvent:
        """Reset the counter to the absolute ``value``."""

        stat_name = self.resolve_name(name)
        if value is None:
            raise ValidationError(f"A value is required to set {stat_name!r}")
        return self.repository.append(
            self.criteria(), stat_name, CounterEventType.SET, value, at
        )

    def query(self, name: str | None = None) -> CounterQuery:
        return self.repository.query(self.criteria(), self.resolve_name(name))

    def value(self, name: str | None = None, as_of: datetime | None = None) -> int:
        """Counter value at ``as_of`` (defaults to now)."""

        return self.query(name).get_value(as_of)


__all__ = ["HasId", "StatScope", "UNSET", "resolve_key"]
