"""Database kinds and the parsed connection spec."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class DatabaseType(str, Enum):
    """Supported database kinds (the token before ``|``)."""

    SQLITE = "sqlite"
    SQLSERVER = "sqlserver"
    MYSQL = "mysql"
    POSTGRES = "postgres"


class JournalMode(str, Enum):
    """SQLite journal modes accepted in ``sqlite|<path>&<mode>``.

    DELETE: delete the journal file after each commit
    MEMORY: keep the journal in memory, never on disk
    WAL:    write-ahead log file
    OFF:    no journal at all
    """

    DELETE = "DELETE"
    MEMORY = "MEMORY"
    WAL = "WAL"
    OFF = "OFF"


@dataclass(frozen=True)
class ConnectionSpec:
    """
    A validated ``<kind>|<params>`` connection string.

    ``primary_param`` is the file path for sqlite and the DSN / connection
    parameters for the client/server kinds.  ``options`` holds the remaining
    ``&``-separated sqlite segments (currently only the journal mode).
    """

    kind: DatabaseType
    primary_param: str
    options: tuple[str, ...] = field(default_factory=tuple)

    @property
    def journal_mode(self) -> JournalMode | None:
        """The sqlite journal mode, or None to leave the engine default."""
        if self.kind is not DatabaseType.SQLITE or not self.options or not self.options[0]:
            return None
        return JournalMode(self.options[0])

    def __str__(self) -> str:
        params = "&".join((self.primary_param, *self.options))
        return f"{self.kind.value}|{params}"


__all__ = [
    "DatabaseType",
    "JournalMode",
    "ConnectionSpec",
]
