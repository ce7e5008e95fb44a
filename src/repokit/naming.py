"""
Naming strategy: entity class/attribute names → table/column names.

Tables are singular and named after the entity class.  By default both
table and column names are folded to lower-case ``snake_case``::

    DeviceLog      → device_log
    HTTPEndpoint   → http_endpoint
    lastTime       → last_time

With ``preserve_case=True`` (``noLowerCase: true`` in the config section)
names are used verbatim: ``DeviceLog`` stays ``DeviceLog`` and ``last_time``
stays ``last_time``.

An entity class can pin its table name with a ``__tablename__`` attribute;
that name is never folded.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def to_snake_case(name: str) -> str:
    """``DeviceLog`` → ``device_log``; already-snake names pass through lower-cased."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


@dataclass(frozen=True)
class NamingStrategy:
    """Singular table names, optional case folding."""

    preserve_case: bool = False

    def table_name(self, entity_cls: type) -> str:
        explicit = getattr(entity_cls, "__tablename__", None)
        if isinstance(explicit, str) and explicit:
            return explicit
        name = entity_cls.__name__
        return name if self.preserve_case else to_snake_case(name)

    def column_name(self, attribute: str) -> str:
        return attribute if self.preserve_case else to_snake_case(attribute)


__all__ = [
    "NamingStrategy",
    "to_snake_case",
]
