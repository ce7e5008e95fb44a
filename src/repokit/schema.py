"""
Schema provisioning: entity dataclass → table, created if absent.

Manifesto:
    Entities declare their shape once, as a dataclass.  The table is derived
    from it on first use and created only if it does not exist yet.  An
    existing table is never altered: this is not a migration engine.

Column derivation:
    ==================  ==========================================
    Field               Column
    ==================  ==========================================
    ``id``              primary key, auto-increment BIGINT
                        (INTEGER on SQLite so ROWID aliasing works)
    ``last_time``       DATETIME, indexed
    ``int``             BIGINT
    ``str``             TEXT (VARCHAR(255) when indexed/unique)
    ``float``           FLOAT
    ``bool``            BOOLEAN
    ``datetime``        DATETIME
    ``date`` / ``time`` DATE / TIME
    ``Decimal``         NUMERIC
    ``bytes``           BLOB
    ``dict`` / ``list`` JSON
    ``X | None``        same as ``X``
    ==================  ==========================================

    Field metadata overrides: ``column`` (name), ``type`` (SQLAlchemy type),
    ``index``, ``unique``, ``nullable``.

Tags:
    repokit, schema, ddl, sqlalchemy, dataclasses
"""

from __future__ import annotations

import dataclasses
import threading
import types
import typing
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Generic, TypeVar

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Index,
    Integer,
    LargeBinary,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    Time,
    inspect,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.types import TypeEngine

from repokit.errors import SchemaError
from repokit.logging import get_logger
from repokit.naming import NamingStrategy

logger = get_logger(__name__)

T = TypeVar("T")

ID_FIELD = "id"
TIMESTAMP_FIELD = "last_time"

_TYPE_MAP: dict[type, type[TypeEngine]] = {
    bool: Boolean,
    int: BigInteger,
    str: Text,
    float: Float,
    datetime: DateTime,
    date: Date,
    time: Time,
    Decimal: Numeric,
    bytes: LargeBinary,
    dict: JSON,
    list: JSON,
}


def _unwrap_optional(hint: Any) -> tuple[Any, bool]:
    """``X | None`` → ``(X, True)``; anything else → ``(hint, False)``."""
    origin = typing.get_origin(hint)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return args[0], True
    return hint, False


def _column_type(entity_cls: type, name: str, hint: Any, indexed: bool) -> TypeEngine:
    base, _ = _unwrap_optional(hint)
    base = typing.get_origin(base) or base
    # bool before int: bool is an int subclass
    for python_type, sa_type in _TYPE_MAP.items():
        if isinstance(base, type) and issubclass(base, python_type):
            if sa_type is Text and indexed:
                return String(255)
            return sa_type()
    raise SchemaError(
        f"Unsupported type {hint!r} for field {entity_cls.__name__}.{name}"
    ).with_context(entity=entity_cls.__name__)


@dataclass(frozen=True)
class EntityMapping(Generic[T]):
    """How one entity class maps onto its table."""

    entity_cls: type[T]
    table: Table
    columns: Mapping[str, str]
    """attribute name → column name, in field order."""

    @property
    def table_name(self) -> str:
        return self.table.name

    @property
    def id_column(self) -> Column:
        return self.table.c[self.columns[ID_FIELD]]

    def to_row(self, model: T, *, include_id: bool = True) -> dict[str, Any]:
        """Column-keyed values of *model*."""
        return {
            column: getattr(model, attribute)
            for attribute, column in self.columns.items()
            if include_id or attribute != ID_FIELD
        }

    def from_row(self, row: Mapping[str, Any]) -> T:
        """Build an entity from a column-keyed row mapping."""
        return self.entity_cls(
            **{attribute: row[column] for attribute, column in self.columns.items()}
        )


def build_mapping(entity_cls: type[T], naming: NamingStrategy) -> EntityMapping[T]:
    """Derive the table for *entity_cls*.  Raises :class:`SchemaError`."""
    if not (isinstance(entity_cls, type) and dataclasses.is_dataclass(entity_cls)):
        raise SchemaError(f"{entity_cls!r} is not a dataclass")

    fields = [f for f in dataclasses.fields(entity_cls) if f.init]
    names = {f.name for f in fields}
    for required in (ID_FIELD, TIMESTAMP_FIELD):
        if required not in names:
            raise SchemaError(
                f"{entity_cls.__name__} has no {required!r} field"
            ).with_context(entity=entity_cls.__name__)

    try:
        hints = typing.get_type_hints(entity_cls)
    except (NameError, TypeError) as e:
        raise SchemaError(
            f"Cannot resolve type hints of {entity_cls.__name__}: {e}", cause=e
        ).with_context(entity=entity_cls.__name__) from e

    table_name = naming.table_name(entity_cls)
    columns: dict[str, str] = {}
    sa_columns: list[Column] = []
    indexes: list[str] = []

    for f in fields:
        meta = f.metadata
        column_name = meta.get("column") or naming.column_name(f.name)
        hint = hints.get(f.name, Any)

        if f.name == ID_FIELD:
            base, _ = _unwrap_optional(hint)
            if not (isinstance(base, type) and issubclass(base, int)):
                raise SchemaError(
                    f"{entity_cls.__name__}.id must be an int, got {hint!r}"
                ).with_context(entity=entity_cls.__name__)
            column = Column(
                column_name,
                BigInteger().with_variant(Integer, "sqlite"),
                primary_key=True,
                autoincrement=True,
            )
        else:
            indexed = bool(meta.get("index")) or f.name == TIMESTAMP_FIELD
            unique = bool(meta.get("unique"))
            sa_type = meta.get("type")
            if sa_type is None:
                sa_type = _column_type(entity_cls, f.name, hint, indexed or unique)
            column = Column(
                column_name,
                sa_type,
                nullable=meta.get("nullable", True),
                unique=unique,
            )
            if indexed and not unique:
                indexes.append(column_name)

        columns[f.name] = column_name
        sa_columns.append(column)

    table = Table(table_name, MetaData(), *sa_columns)
    for column_name in indexes:
        Index(f"idx_{table_name}_{column_name}", table.c[column_name])

    return EntityMapping(entity_cls=entity_cls, table=table, columns=columns)


_mapping_cache: dict[tuple[type, NamingStrategy], EntityMapping[Any]] = {}
_mapping_lock = threading.Lock()
_provision_lock = threading.Lock()


def get_mapping(entity_cls: type[T], naming: NamingStrategy) -> EntityMapping[T]:
    """Cached :func:`build_mapping` (one derivation per class and strategy per process)."""
    key = (entity_cls, naming)
    with _mapping_lock:
        mapping = _mapping_cache.get(key)
        if mapping is None:
            mapping = build_mapping(entity_cls, naming)
            _mapping_cache[key] = mapping
        return mapping


class SchemaManager:
    """Ensures entity tables exist on one engine."""

    def __init__(self, engine: Engine, naming: NamingStrategy | None = None):
        self._engine = engine
        self._naming = naming or NamingStrategy()

    @property
    def naming(self) -> NamingStrategy:
        return self._naming

    def ensure(self, entity_cls: type[T]) -> EntityMapping[T]:
        """Create the table for *entity_cls* if it is absent; return its mapping.

        Pre-existing tables are left exactly as they are.
        """
        mapping = get_mapping(entity_cls, self._naming)
        table = mapping.table

        with _provision_lock:
            try:
                if inspect(self._engine).has_table(table.name):
                    logger.debug("table_exists", table=table.name, entity=entity_cls.__name__)
                    return mapping
                table.create(self._engine, checkfirst=True)
            except SQLAlchemyError as e:
                raise SchemaError(
                    f"Cannot create table {table.name!r} for {entity_cls.__name__}: {e}",
                    cause=e,
                ).with_context(entity=entity_cls.__name__, table=table.name) from e

        logger.info("table_created", table=table.name, entity=entity_cls.__name__)
        return mapping


__all__ = [
    "ID_FIELD",
    "TIMESTAMP_FIELD",
    "EntityMapping",
    "build_mapping",
    "get_mapping",
    "SchemaManager",
]
