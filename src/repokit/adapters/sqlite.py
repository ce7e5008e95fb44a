"""SQLite database adapter.

Uses the stdlib ``sqlite3`` driver through SQLAlchemy's ``pysqlite`` dialect.

* The file path is resolved to an absolute path and its parent directories
  are created before the engine is opened; the file itself is created by
  SQLite on first connect.
* A non-empty journal mode is issued as ``PRAGMA journal_mode = <mode>`` on
  every new DB-API connection, so all pooled connections agree.  ``WAL`` is
  persistent in the file; the other modes are per connection.
* ``:memory:`` opens a private in-memory database shared through a single
  connection (``StaticPool``).  Intended for tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import URL, Engine
from sqlalchemy.pool import StaticPool

from repokit.logging import get_logger
from repokit.paths import ensure_parent_dir

from .base import DatabaseAdapter
from .types import DatabaseType

logger = get_logger(__name__)

MEMORY_PATH = ":memory:"


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter.

    Suitable for:
    - Single-process applications and embedded deployments
    - Development and testing (``:memory:``)
    """

    db_type = DatabaseType.SQLITE

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._path: Path | None = None

    @property
    def is_memory(self) -> bool:
        return self._spec.primary_param == MEMORY_PATH

    @property
    def path(self) -> Path | None:
        """Resolved database file, available after :meth:`prepare`."""
        return self._path

    def prepare(self) -> None:
        """Resolve the file path and create missing parent directories."""
        if self.is_memory:
            return
        self._path = ensure_parent_dir(self._spec.primary_param)

    def build_url(self) -> URL:
        database = MEMORY_PATH if self.is_memory else str(self._path)
        return URL.create("sqlite+pysqlite", database=database)

    def engine_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if self.is_memory:
            kwargs["poolclass"] = StaticPool
        return kwargs

    def install_listeners(self, engine: Engine) -> None:
        mode = self._spec.journal_mode
        if mode is None:
            return

        @event.listens_for(engine, "connect")
        def _set_journal_mode(dbapi_connection: Any, _rec: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute(f"PRAGMA journal_mode = {mode.value}")
            active = cursor.fetchone()
            cursor.close()
            logger.debug(
                "journal_mode_set",
                requested=mode.value,
                active=active[0] if active else None,
            )


__all__ = [
    "MEMORY_PATH",
    "SQLiteAdapter",
]
