"""
Audit timestamp convention.

Every entity stored through :class:`~repokit.repository.GenericRepository`
has a ``last_time`` attribute.  Before any write the repository calls
:func:`stamp`, which fills ``last_time`` with the current time when it is
still unset.  A value set by the caller is never overwritten.

"Unset" means ``None`` or ``datetime.min`` (the zero value).

Timestamps are naive local time, which is what SQLAlchemy's portable
``DateTime`` column round-trips on every backend.  Microseconds are kept.

Tags:
    timestamps, audit, entity-contract, repokit
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Protocol, TypeVar, runtime_checkable

ZERO_TIME = datetime.min


@runtime_checkable
class Timestamped(Protocol):
    """Anything with a readable and writable ``last_time``."""

    last_time: datetime | None


T = TypeVar("T", bound=Timestamped)


def local_now() -> datetime:
    """Current naive local time."""
    return datetime.now()


def is_unset(value: datetime | None) -> bool:
    """True if *value* is the unset sentinel."""
    return value is None or value == ZERO_TIME


def stamp(model: T, now: Callable[[], datetime] = local_now) -> T:
    """Set ``model.last_time`` to *now()* if it is unset.  Returns *model*."""
    if is_unset(model.last_time):
        model.last_time = now()
    return model


def stamp_all(models: Iterable[T], now: Callable[[], datetime] = local_now) -> list[T]:
    """Stamp every model.  A single instant is used for the whole batch."""
    models = list(models)
    instant = now()
    for model in models:
        stamp(model, lambda: instant)
    return models


__all__ = [
    "ZERO_TIME",
    "Timestamped",
    "local_now",
    "is_unset",
    "stamp",
    "stamp_all",
]
