"""Library level exceptions.

Every error defined here is raised before anything is written to the store.
Failures coming from SQLAlchemy itself are not wrapped and reach the caller
unchanged.
"""

from __future__ import annotations

__all__ = [
    "StatsError",
    "CapabilityError",
    "ValidationError",
    "ensure_stat_name",
]


class StatsError(Exception):
    """Base class for statkeeper specific errors."""


class CapabilityError(StatsError):
    """Raised when the bound stat family or store lacks a capability."""


class ValidationError(StatsError, ValueError):
    """Raised when a required identifying argument is missing or invalid."""


def ensure_stat_name(name: str | None) -> str:
    """Return ``name`` or raise :class:`ValidationError` when it is missing."""

    if name is None or name == "":
        raise ValidationError("Stat name is required")
    return name
