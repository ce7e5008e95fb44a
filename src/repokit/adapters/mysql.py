"""MySQL database adapter.

Uses ``mysql.connector`` from the ``mysql-connector-python`` package through
SQLAlchemy's ``mysql+mysqlconnector`` dialect.

Accepted DSN forms::

    mysql|user:pw@127.0.0.1:3306/app?charset=utf8mb4
    mysql|user:pw@tcp(127.0.0.1:3306)/app?charset=utf8mb4&parseTime=True&loc=Local
    mysql|mysql+pymysql://user:pw@127.0.0.1/app          (full URL, used as-is)

The ``tcp(host:port)`` address form is unwrapped, and the ``parseTime`` and
``loc`` query keys are dropped because ``mysql.connector`` rejects unknown
arguments (DATETIME columns are always parsed).

Install the driver::

    pip install mysql-connector-python
    # or:  pip install repokit[mysql]
"""

from __future__ import annotations

import re

from .base import DatabaseAdapter
from .types import DatabaseType

SCHEME = "mysql+mysqlconnector://"

_TCP_ADDRESS = re.compile(r"@tcp\((?P<address>[^)]*)\)")
_UNSUPPORTED_KEYS = frozenset({"parseTime", "loc"})


def normalize_mysql_dsn(dsn: str) -> str:
    """Turn a configured MySQL DSN into a SQLAlchemy URL string."""
    if dsn.startswith("mysql://"):
        return SCHEME + dsn[len("mysql://"):]
    if "://" in dsn:
        return dsn

    dsn = _TCP_ADDRESS.sub(lambda m: "@" + m.group("address"), dsn)
    base, _, query = dsn.partition("?")
    pairs = [
        pair
        for pair in query.split("&")
        if pair and pair.split("=", 1)[0] not in _UNSUPPORTED_KEYS
    ]
    if pairs:
        return f"{SCHEME}{base}?{'&'.join(pairs)}"
    return f"{SCHEME}{base}"


class MySQLAdapter(DatabaseAdapter):
    """MySQL / MariaDB database adapter."""

    db_type = DatabaseType.MYSQL
    driver_package = "mysql-connector-python"

    def build_url(self) -> str:
        return normalize_mysql_dsn(self._spec.primary_param)


__all__ = [
    "MySQLAdapter",
    "normalize_mysql_dsn",
]
