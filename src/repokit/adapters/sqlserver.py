"""SQL Server database adapter.

Uses ``pymssql`` through SQLAlchemy's ``mssql+pymssql`` dialect.  The
connection parameters ``<user>:<password>@<host>?<query>`` are appended
verbatim to the ``mssql+pymssql://`` scheme; query keys are passed on to
``pymssql.connect`` (``database``, ``charset``, ``login_timeout``, ...)::

    sqlserver|sa:secret@db.internal:1433?database=inventory

Install the driver::

    pip install pymssql
    # or:  pip install repokit[sqlserver]
"""

from __future__ import annotations

from .base import DatabaseAdapter
from .types import DatabaseType

SCHEME = "mssql+pymssql://"


class SQLServerAdapter(DatabaseAdapter):
    """Microsoft SQL Server adapter."""

    db_type = DatabaseType.SQLSERVER
    driver_package = "pymssql"

    def build_url(self) -> str:
        return f"{SCHEME}{self._spec.primary_param}"


__all__ = [
    "SQLServerAdapter",
]
