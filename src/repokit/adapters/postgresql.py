"""PostgreSQL database adapter.

Uses ``psycopg2`` through SQLAlchemy's ``postgresql+psycopg2`` dialect.

Both libpq DSN forms are accepted and handed to the driver unchanged::

    postgres|postgres://app:pw@localhost:5432/app?sslmode=disable
    postgres|host=localhost user=app password=pw dbname=app port=5432 sslmode=disable

URL DSNs get the ``postgresql+psycopg2`` scheme (a DSN that already names a
driver, e.g. ``postgresql+psycopg2://``, is used as-is).  Keyword DSNs are
passed to ``psycopg2.connect`` through a connection creator.

Install the driver::

    pip install psycopg2-binary
    # or:  pip install repokit[postgres]
"""

from __future__ import annotations

from typing import Any

from .base import DatabaseAdapter
from .types import DatabaseType

SCHEME = "postgresql+psycopg2://"


def is_url_dsn(dsn: str) -> bool:
    return "://" in dsn


class PostgreSQLAdapter(DatabaseAdapter):
    """PostgreSQL database adapter."""

    db_type = DatabaseType.POSTGRES
    driver_package = "psycopg2-binary"

    def build_url(self) -> str:
        dsn = self._spec.primary_param
        if not is_url_dsn(dsn):
            return SCHEME
        scheme, _, rest = dsn.partition("://")
        if "+" in scheme:
            return dsn
        return SCHEME + rest

    def engine_kwargs(self) -> dict[str, Any]:
        if is_url_dsn(self._spec.primary_param):
            return {}
        return {"creator": self._connect_keyword_dsn}

    def _connect_keyword_dsn(self) -> Any:
        import psycopg2

        return psycopg2.connect(self._spec.primary_param)


__all__ = [
    "PostgreSQLAdapter",
]
