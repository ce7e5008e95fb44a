"""
repokit — a configuration-driven repository layer over SQLAlchemy.

One connection string picks the backend (``sqlite``, ``sqlserver``,
``mysql``, ``postgres``); entity dataclasses get their tables on first use
and a typed :class:`GenericRepository` for CRUD, paging, filtering and
counting::

    from dataclasses import dataclass
    from repokit import FullEntity, ModuleInfo, init_database

    @dataclass
    class Device(FullEntity):
        name: str = ""

    db = init_database("Main", ModuleInfo("gateway"))
    devices = db.repository(Device)
    devices.create(Device(name="edge-01"))
    devices.get_conditions("name LIKE ?", "edge-%")

Modules
-------
adapters    connection spec parsing and per-backend engine creation
config      YAML database sections, REPOKIT_* settings, module identity
database    init_database / Database (explicit startup step)
repository  GenericRepository[T]
schema      entity dataclass → table, created if absent
naming      table/column naming strategy
predicates  ``?`` placeholder predicates
timestamps  last_time stamping
errors      RepokitError hierarchy
logging     structlog configuration
"""

from repokit.adapters import ConnectionSpec, DatabaseType, JournalMode, parse_connection_spec
from repokit.config import (
    DatabaseSettings,
    EngineOptions,
    ModuleIdentity,
    ModuleInfo,
    load_database_settings,
)
from repokit.database import Database, init_database, open_database
from repokit.engine import create_repo_engine
from repokit.errors import (
    DatabaseError,
    RecordNotFoundError,
    RepokitError,
    SetupError,
)
from repokit.models import FullEntity, SimpleEntity
from repokit.naming import NamingStrategy
from repokit.repository import GenericRepository
from repokit.schema import SchemaManager
from repokit.timestamps import Timestamped

__version__ = "0.1.0"

__all__ = [
    # Startup
    "init_database",
    "open_database",
    "create_repo_engine",
    "Database",
    # Config
    "DatabaseSettings",
    "EngineOptions",
    "ModuleIdentity",
    "ModuleInfo",
    "load_database_settings",
    # Connection spec
    "ConnectionSpec",
    "DatabaseType",
    "JournalMode",
    "parse_connection_spec",
    # Entities & repositories
    "SimpleEntity",
    "FullEntity",
    "Timestamped",
    "GenericRepository",
    "SchemaManager",
    "NamingStrategy",
    # Errors
    "RepokitError",
    "SetupError",
    "DatabaseError",
    "RecordNotFoundError",
]
