"""Connection factory — database settings to a live SQLAlchemy engine.

This is the single place where a connection spec becomes an engine::

    from repokit.config import DatabaseSettings
    from repokit.engine import create_repo_engine

    engine = create_repo_engine(DatabaseSettings(connect="sqlite|./db/app.db&WAL"))

Every failure (malformed spec, unknown kind, missing driver, directory
creation, connectivity probe) raises a :class:`~repokit.errors.SetupError`
subclass.  The engine and its pool are shared by all repositories and
threads; pooling itself is left to SQLAlchemy and the driver.
"""

from __future__ import annotations

from sqlalchemy.engine import Engine

from repokit.adapters import ConnectionSpec, get_adapter, parse_connection_spec
from repokit.config.settings import DatabaseSettings, EngineOptions
from repokit.naming import NamingStrategy


def open_engine(spec: ConnectionSpec, options: EngineOptions | None = None) -> Engine:
    """Open an engine for an already-parsed spec."""
    return get_adapter(spec, options).create_engine()


def create_repo_engine(settings: DatabaseSettings) -> Engine:
    """Parse ``settings.connect`` and open the engine with ``settings.config``."""
    spec = parse_connection_spec(settings.connect)
    return open_engine(spec, settings.config)


def naming_strategy(options: EngineOptions) -> NamingStrategy:
    """The naming strategy implied by the engine options."""
    return NamingStrategy(preserve_case=options.preserve_field_case)


__all__ = [
    "open_engine",
    "create_repo_engine",
    "naming_strategy",
]
