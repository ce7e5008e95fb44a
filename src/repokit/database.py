"""
Explicit initialization step: config section → engine → repositories.

Hosts call :func:`init_database` once at startup and pass the returned
:class:`Database` (or the repositories built from it) to the code that needs
it.  There is no process-wide singleton::

    db = init_database("Main", ModuleInfo("gateway"))
    devices = db.repository(Device)
    ...
    db.dispose()

Every failure raises a :class:`~repokit.errors.SetupError` subclass: an
unreadable config section, a malformed connection spec, a missing driver, an
unreachable database, or a table that cannot be created.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

from sqlalchemy.engine import Engine

from repokit.adapters import ConnectionSpec, parse_connection_spec
from repokit.config import DatabaseSettings, ModuleIdentity, get_settings, load_database_settings
from repokit.engine import naming_strategy, open_engine
from repokit.logging import get_logger
from repokit.naming import NamingStrategy
from repokit.repository import GenericRepository
from repokit.schema import SchemaManager

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class Database:
    """An opened database: shared engine plus the settings it came from."""

    engine: Engine
    settings: DatabaseSettings
    spec: ConnectionSpec
    section: str = ""
    _schema: SchemaManager = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._schema = SchemaManager(self.engine, naming_strategy(self.settings.config))

    @property
    def naming(self) -> NamingStrategy:
        return self._schema.naming

    def repository(self, entity_cls: type[T]) -> GenericRepository[T]:
        """Build a repository for *entity_cls*, creating its table if absent."""
        return GenericRepository(
            self.engine,
            entity_cls,
            options=self.settings.config,
            schema=self._schema,
        )

    def dispose(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()
        logger.debug("engine_disposed", backend=self.spec.kind.value, section=self.section)

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.dispose()


def open_database(settings: DatabaseSettings, *, section: str = "") -> Database:
    """Open a :class:`Database` from already-resolved settings."""
    spec = parse_connection_spec(settings.connect)
    engine = open_engine(spec, settings.config)
    return Database(engine=engine, settings=settings, spec=spec, section=section)


def init_database(
    section: str | None = None,
    identity: ModuleIdentity | None = None,
    *,
    config_path: str | Path | None = None,
    write_default: bool = True,
) -> Database:
    """Load *section* from the config file and open the database it names.

    Args:
        section: Config section, defaults to ``REPOKIT_DEFAULT_SECTION`` ("Main")
        identity: Host module; ``<name>.<section>`` is tried first
        config_path: YAML file, defaults to ``REPOKIT_CONFIG_PATH``
        write_default: Append the commented default block when the section is missing
    """
    section = section or get_settings().default_section
    settings = load_database_settings(
        section,
        identity,
        config_path=config_path,
        write_default=write_default,
    )
    db = open_database(settings, section=section)
    logger.info("database_initialized", section=section, backend=db.spec.kind.value)
    return db


__all__ = [
    "Database",
    "open_database",
    "init_database",
]
