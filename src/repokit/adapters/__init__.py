"""Database adapters -- one connection string, four backends.

Manifesto:
    Application code should not care whether its entities live in an
    embedded SQLite file or on a database server.  The backend is picked by
    a single configuration string, ``<kind>|<parameters>``, and each adapter
    turns that into a ready SQLAlchemy engine.

    Each adapter is **import-guarded**: the database driver is only required
    when the engine is created, not at import time.  Install the matching
    extra::

        pip install repokit[postgres]    # psycopg2-binary
        pip install repokit[mysql]       # mysql-connector-python
        pip install repokit[sqlserver]   # pymssql

Architecture::

    parse_connection_spec (parser.py)  "<kind>|<params>" -> ConnectionSpec
    DatabaseAdapter (base.py)          prepare / build_url / probe
        |-- SQLiteAdapter              stdlib sqlite3 (always available)
        |-- SQLServerAdapter           pymssql (optional)
        |-- MySQLAdapter               mysql.connector (optional)
        |-- PostgreSQLAdapter          psycopg2 (optional)
    AdapterRegistry (registry.py)      DatabaseType -> adapter class

Tags:
    repokit, database, adapters, multi-backend, import-guarded
"""

from .base import DatabaseAdapter
from .mysql import MySQLAdapter
from .parser import parse_connection_spec
from .postgresql import PostgreSQLAdapter
from .registry import AdapterRegistry, adapter_registry, get_adapter
from .sqlite import SQLiteAdapter
from .sqlserver import SQLServerAdapter
from .types import ConnectionSpec, DatabaseType, JournalMode

__all__ = [
    # Types
    "DatabaseType",
    "JournalMode",
    "ConnectionSpec",
    # Parsing
    "parse_connection_spec",
    # Base class
    "DatabaseAdapter",
    # Implementations
    "SQLiteAdapter",
    "SQLServerAdapter",
    "MySQLAdapter",
    "PostgreSQLAdapter",
    # Registry
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
]
