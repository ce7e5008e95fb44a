"""
Canonical entity shapes.

Entities are plain dataclasses.  The repository needs two attributes:

* ``id`` - primary key.  ``None`` (or ``0``) lets the engine assign it.
* ``last_time`` - audit timestamp, filled in on write when unset.

Subclass :class:`SimpleEntity` or :class:`FullEntity` and add fields::

    @dataclass
    class Device(SimpleEntity):
        name: str = ""
        port: int = 0

Field metadata tunes the generated column (``column``, ``type``, ``index``,
``unique``, ``nullable``)::

    serial: str = field(default="", metadata={"index": True, "unique": True})

Every subclass field needs a default because the base fields have one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class SimpleEntity:
    """Id + last operation time."""

    id: int | None = None
    last_time: datetime | None = field(default=None, metadata={"index": True})


@dataclass
class FullEntity(SimpleEntity):
    """Id + last operation time + summary and free-form extended content."""

    summary: str = ""
    full_info: str = ""


__all__ = [
    "SimpleEntity",
    "FullEntity",
]
