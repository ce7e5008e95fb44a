"""Database adapter registry and factory.

Consumers never hard-code adapter class names.  The registry maps each
:class:`DatabaseType` to its adapter class, and :func:`get_adapter` builds
the adapter for a parsed :class:`ConnectionSpec`.

Tags:
    repokit, database, registry, factory
"""

from __future__ import annotations

from repokit.config.settings import EngineOptions
from repokit.errors import ConfigError

from .base import DatabaseAdapter
from .mysql import MySQLAdapter
from .postgresql import PostgreSQLAdapter
from .sqlite import SQLiteAdapter
from .sqlserver import SQLServerAdapter
from .types import ConnectionSpec, DatabaseType


class AdapterRegistry:
    """
    Registry of adapter classes keyed by database kind.

    Pre-registered adapters:
    - ``sqlite`` — :class:`SQLiteAdapter`
    - ``sqlserver`` — :class:`SQLServerAdapter`
    - ``mysql`` — :class:`MySQLAdapter`
    - ``postgres`` — :class:`PostgreSQLAdapter`
    """

    def __init__(self):
        self._factories: dict[DatabaseType, type[DatabaseAdapter]] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        self._factories[DatabaseType.SQLITE] = SQLiteAdapter
        self._factories[DatabaseType.SQLSERVER] = SQLServerAdapter
        self._factories[DatabaseType.MYSQL] = MySQLAdapter
        self._factories[DatabaseType.POSTGRES] = PostgreSQLAdapter

    def register(self, db_type: DatabaseType, adapter_class: type[DatabaseAdapter]) -> None:
        """Register (or replace) the adapter for a database kind."""
        self._factories[db_type] = adapter_class

    def create(self, spec: ConnectionSpec, options: EngineOptions | None = None) -> DatabaseAdapter:
        """Create the adapter for *spec*."""
        if spec.kind not in self._factories:
            raise ConfigError(f"No adapter registered for database kind: {spec.kind.value}")
        return self._factories[spec.kind](spec, options)

    def list_adapters(self) -> list[str]:
        """List registered database kinds."""
        return sorted(t.value for t in self._factories)


# Global registry
adapter_registry = AdapterRegistry()


def get_adapter(spec: ConnectionSpec, options: EngineOptions | None = None) -> DatabaseAdapter:
    """
    Get the adapter for a parsed connection spec.

    Usage:
        adapter = get_adapter(parse_connection_spec("sqlite|./db/data.db&WAL"))
        engine = adapter.create_engine()
    """
    return adapter_registry.create(spec, options)


__all__ = [
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
]
