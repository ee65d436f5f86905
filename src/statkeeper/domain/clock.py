"""Time source helpers shared by writers and queries."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]

_EPOCH = datetime(1970, 1, 1)
_ONE_MS = timedelta(milliseconds=1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalise ``value`` to naive UTC, the representation used in the store.

    Naive values are assumed to already be UTC.
    """

    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def resolve_timestamp(value: datetime | None, clock: Clock) -> datetime:
    """Return ``value`` (or the clock's current time) as naive UTC."""

    return as_utc(value if value is not None else clock())


def epoch_ms(value: datetime) -> int:
    """Milliseconds since the Unix epoch, floored like a JS ``valueOf``."""

    return (as_utc(value) - _EPOCH) // _ONE_MS


__all__ = ["Clock", "as_utc", "epoch_ms", "resolve_timestamp", "utc_now"]
