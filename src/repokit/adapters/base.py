"""Database adapter base class.

Manifesto:
    Every backend goes through the same lifecycle: prepare local resources,
    build a SQLAlchemy URL, create the engine, install connection hooks and
    probe connectivity.  Only the URL building and the hooks differ per
    backend, so that is all a concrete adapter implements.

Features:
    - Abstract ``build_url()``; optional ``prepare()``, ``engine_kwargs()``,
      ``install_listeners()`` hooks
    - Import-guarded drivers: a missing driver surfaces as ``ConfigError``
      at ``create_engine()`` time, not at import time
    - Eager connectivity probe (``SELECT 1``)

Tags:
    repokit, database, abstract-base, adapter-pattern
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from sqlalchemy import create_engine as sa_create_engine
from sqlalchemy import text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from repokit.config.settings import EngineOptions
from repokit.errors import ConfigError, DatabaseConnectionError
from repokit.logging import get_logger

from .types import ConnectionSpec, DatabaseType

logger = get_logger(__name__)


class DatabaseAdapter(ABC):
    """
    Turns a :class:`ConnectionSpec` into a live SQLAlchemy engine.

    Subclasses set ``db_type`` and ``driver_package`` (the pip name shown when
    the driver is missing) and implement :meth:`build_url`.
    """

    db_type: DatabaseType
    driver_package: str = ""

    def __init__(self, spec: ConnectionSpec, options: EngineOptions | None = None):
        if spec.kind is not self.db_type:
            raise ConfigError(
                f"{type(self).__name__} cannot open a {spec.kind.value} connection spec"
            )
        self._spec = spec
        self._options = options or EngineOptions()

    @property
    def spec(self) -> ConnectionSpec:
        return self._spec

    @property
    def options(self) -> EngineOptions:
        return self._options

    # -- Hooks -------------------------------------------------------------

    def prepare(self) -> None:
        """Prepare local resources before the engine is created."""

    @abstractmethod
    def build_url(self) -> URL | str:
        """SQLAlchemy URL for this backend."""
        ...

    def engine_kwargs(self) -> dict[str, Any]:
        """Extra keyword arguments for ``sqlalchemy.create_engine``."""
        return {}

    def install_listeners(self, engine: Engine) -> None:
        """Attach connection event listeners to a freshly created engine."""

    # -- Lifecycle ---------------------------------------------------------

    def create_engine(self) -> Engine:
        """Create the engine and verify the database answers.

        Raises:
            ConfigError: driver not installed or URL rejected by SQLAlchemy
            StorageError: database directory could not be created (sqlite)
            DatabaseConnectionError: the connectivity probe failed
        """
        self.prepare()
        url = self.build_url()

        try:
            engine = sa_create_engine(url, echo=self._options.open_log, **self.engine_kwargs())
        except ImportError as e:
            raise ConfigError(
                f"The {self.db_type.value} driver is not installed. "
                f"Install with: pip install {self.driver_package}",
                cause=e,
            ).with_context(backend=self.db_type.value) from e
        except ArgumentError as e:
            raise ConfigError(
                f"Invalid {self.db_type.value} connection parameters: {e}",
                cause=e,
            ).with_context(backend=self.db_type.value) from e

        self.install_listeners(engine)
        self.probe(engine)

        logger.info(
            "engine_opened",
            backend=self.db_type.value,
            url=engine.url.render_as_string(hide_password=True),
            skip_default_transaction=self._options.skip_default_transaction,
        )
        return engine

    def probe(self, engine: Engine) -> None:
        """Open one connection and run ``SELECT 1``; dispose the engine on failure."""
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            engine.dispose()
            raise DatabaseConnectionError(
                f"Failed to connect to {self.db_type.value}: {e}",
                cause=e,
            ).with_context(
                backend=self.db_type.value,
                url=engine.url.render_as_string(hide_password=True),
            ) from e


__all__ = [
    "DatabaseAdapter",
]
