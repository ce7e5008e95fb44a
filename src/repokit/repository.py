"""
Generic repository: typed CRUD over one entity table.

Manifesto:
    One repository instance serves one entity type on one shared engine.
    It holds no mutable state, so a single instance is safe to share
    across threads; every call checks a connection out of the pool and
    returns it before the call returns.

    Writes stamp ``last_time`` when it is unset.  Single writes run in their
    own transaction (or in autocommit mode with
    ``skip_default_transaction``); batch writes always run in exactly one
    transaction, so a batch is all or nothing.

    Reads never raise for "not found": single reads return ``None`` and
    list reads return ``[]``.  Updating a missing row raises
    :class:`~repokit.errors.RecordNotFoundError`.

Architecture:
    ::

        GenericRepository[T]
          ├── SchemaManager.ensure(T)   table created on construction
          ├── writes   create / update / save (+ _list variants), delete
          ├── reads    get_model / check_exist / get_list / get_all
          ├── filters  get_condition* / get_conditions* / get_count
          └── _translate_errors()       SQLAlchemy → DatabaseError family

Examples:
    >>> repo = GenericRepository(engine, Device)
    >>> device = repo.create(Device(name="gateway"))
    >>> device.id, device.last_time is not None
    (1, True)
    >>> repo.get_conditions("name = ?", "gateway")
    [Device(id=1, ...)]

Tags:
    repokit, repository, crud, sqlalchemy-core, generic
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import Table, delete, func, insert, select, update
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.sql import Select

from repokit.config.settings import EngineOptions
from repokit.errors import (
    DatabaseError,
    IntegrityError,
    QueryError,
    RecordNotFoundError,
    RepokitError,
)
from repokit.logging import get_logger
from repokit.naming import NamingStrategy
from repokit.predicates import bind_predicate, order_clause
from repokit.schema import EntityMapping, SchemaManager
from repokit.timestamps import stamp, stamp_all

logger = get_logger(__name__)

T = TypeVar("T")


def _id_unset(value: Any) -> bool:
    return value is None or value == 0


class GenericRepository(Generic[T]):
    """
    CRUD repository for one entity dataclass.

    Construction ensures the table exists and raises
    :class:`~repokit.errors.SchemaError` when it cannot.
    """

    def __init__(
        self,
        engine: Engine,
        entity_cls: type[T],
        *,
        options: EngineOptions | None = None,
        schema: SchemaManager | None = None,
    ):
        self._engine = engine
        self._entity_cls = entity_cls
        self._options = options or EngineOptions()
        if schema is None:
            schema = SchemaManager(engine, NamingStrategy(preserve_case=self._options.preserve_field_case))
        self._mapping: EntityMapping[T] = schema.ensure(entity_cls)

        if self._options.skip_default_transaction:
            self._single_engine = engine.execution_options(isolation_level="AUTOCOMMIT")
        else:
            self._single_engine = engine

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def engine(self) -> Engine:
        """The shared engine this repository runs on."""
        return self._engine

    @property
    def table(self) -> Table:
        return self._mapping.table

    @property
    def entity_type(self) -> type[T]:
        return self._entity_cls

    # =========================================================================
    # Connection handling
    # =========================================================================

    @contextmanager
    def _translate_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except RepokitError:
            raise
        except sa_exc.IntegrityError as e:
            raise IntegrityError(
                f"{operation} violated a constraint on {self.table.name}: {e.orig}", cause=e
            ).with_context(entity=self._entity_cls.__name__, table=self.table.name) from e
        except (sa_exc.DBAPIError, sa_exc.StatementError) as e:
            raise QueryError(
                f"{operation} failed on {self.table.name}: {e}", cause=e
            ).with_context(entity=self._entity_cls.__name__, table=self.table.name) from e
        except sa_exc.SQLAlchemyError as e:
            raise DatabaseError(
                f"{operation} failed on {self.table.name}: {e}", cause=e
            ).with_context(entity=self._entity_cls.__name__, table=self.table.name) from e

    @contextmanager
    def _single_write(self, operation: str) -> Iterator[Connection]:
        """One write: its own transaction, or autocommit when configured."""
        with self._translate_errors(operation), self._single_engine.begin() as conn:
            yield conn

    @contextmanager
    def _batch(self, operation: str, size: int) -> Iterator[Connection]:
        """One transaction for a whole batch; any failure rolls it all back."""
        try:
            with self._translate_errors(operation), self._engine.begin() as conn:
                yield conn
        except RepokitError as e:
            logger.warning(
                "batch_failed",
                operation=operation,
                table=self.table.name,
                size=size,
                error=e.message,
            )
            raise

    @contextmanager
    def _read(self, operation: str) -> Iterator[Connection]:
        with self._translate_errors(operation), self._engine.connect() as conn:
            yield conn

    # =========================================================================
    # Statement helpers
    # =========================================================================

    def _insert(self, conn: Connection, model: T) -> None:
        assign_id = _id_unset(model.id)
        values = self._mapping.to_row(model, include_id=not assign_id)
        result = conn.execute(insert(self.table).values(values))
        if assign_id:
            key = result.inserted_primary_key
            if key is not None and key[0] is not None:
                model.id = key[0]

    def _update(self, conn: Connection, model: T) -> int:
        if _id_unset(model.id):
            return 0
        values = self._mapping.to_row(model, include_id=False)
        stmt = update(self.table).where(self._mapping.id_column == model.id).values(values)
        return conn.execute(stmt).rowcount

    def _update_existing(self, conn: Connection, model: T) -> None:
        if self._update(conn, model) == 0:
            raise RecordNotFoundError(entity_id=model.id).with_context(
                entity=self._entity_cls.__name__, table=self.table.name
            )

    def _save(self, conn: Connection, model: T) -> None:
        if self._update(conn, model) == 0:
            self._insert(conn, model)

    @contextmanager
    def _restore_ids_on_failure(self, models: list[T]) -> Iterator[None]:
        """Undo ids assigned inside a batch that was rolled back."""
        unset = [(model, model.id) for model in models if _id_unset(model.id)]
        try:
            yield
        except RepokitError:
            for model, original in unset:
                model.id = original
            raise

    def _select(self) -> Select:
        return select(self.table)

    def _filtered(self, predicate: str, args: Sequence[Any]) -> Select:
        return self._select().where(bind_predicate(predicate, args))

    def _fetch_all(self, stmt: Select, operation: str) -> list[T]:
        with self._read(operation) as conn:
            rows = conn.execute(stmt).mappings().all()
        return [self._mapping.from_row(row) for row in rows]

    def _fetch_first(self, stmt: Select, operation: str) -> T | None:
        with self._read(operation) as conn:
            row = conn.execute(stmt.limit(1)).mappings().first()
        return self._mapping.from_row(row) if row is not None else None

    # =========================================================================
    # Writes
    # =========================================================================

    def create(self, model: T) -> T:
        """Insert *model*; the generated id is assigned back when it was unset."""
        stamp(model)
        with self._single_write("create") as conn:
            self._insert(conn, model)
        return model

    def create_list(self, models: Iterable[T]) -> list[T]:
        """Insert every model in one transaction.  An empty batch is a no-op."""
        models = list(models)
        if not models:
            return models
        stamp_all(models)
        with self._restore_ids_on_failure(models), self._batch("create_list", len(models)) as conn:
            for model in models:
                self._insert(conn, model)
        return models

    def update(self, model: T) -> T:
        """Overwrite the stored row with every field of *model*.

        Raises:
            RecordNotFoundError: no row has ``model.id``
        """
        stamp(model)
        with self._single_write("update") as conn:
            self._update_existing(conn, model)
        return model

    def update_list(self, models: Iterable[T]) -> list[T]:
        """Update every model in one transaction; a missing row aborts the batch."""
        models = list(models)
        if not models:
            return models
        stamp_all(models)
        with self._batch("update_list", len(models)) as conn:
            for model in models:
                self._update_existing(conn, model)
        return models

    def save(self, model: T) -> T:
        """Update the row with ``model.id``, or insert when there is none."""
        stamp(model)
        with self._single_write("save") as conn:
            self._save(conn, model)
        return model

    def save_list(self, models: Iterable[T]) -> list[T]:
        models = list(models)
        if not models:
            return models
        stamp_all(models)
        with self._restore_ids_on_failure(models), self._batch("save_list", len(models)) as conn:
            for model in models:
                self._save(conn, model)
        return models

    def delete(self, id: int) -> int:
        """Delete the row with *id*.  Returns the number of rows removed (0 or 1)."""
        stmt = delete(self.table).where(self._mapping.id_column == id)
        with self._single_write("delete") as conn:
            return conn.execute(stmt).rowcount

    def delete_condition(self, predicate: str, *args: Any) -> int:
        """Delete every row matching *predicate*.  Returns the number removed."""
        stmt = delete(self.table).where(bind_predicate(predicate, args))
        with self._single_write("delete_condition") as conn:
            return conn.execute(stmt).rowcount

    # =========================================================================
    # Reads
    # =========================================================================

    def get_model(self, id: int) -> T | None:
        """The row with *id*, or ``None``."""
        return self._fetch_first(
            self._select().where(self._mapping.id_column == id), "get_model"
        )

    def check_exist(self, id: int) -> bool:
        """True if a row with *id* exists.

        Best effort: a failed query is logged and reported as ``False``.
        """
        stmt = select(self._mapping.id_column).where(self._mapping.id_column == id).limit(1)
        try:
            with self._read("check_exist") as conn:
                return conn.execute(stmt).first() is not None
        except RepokitError as e:
            logger.warning("check_exist_failed", table=self.table.name, id=id, error=e.message)
            return False

    def get_list(self, start_offset: int, max_count: int) -> list[T]:
        """A page of rows ordered by id.  ``max_count <= 0`` means no limit."""
        stmt = self._select().order_by(self._mapping.id_column)
        if start_offset > 0:
            stmt = stmt.offset(start_offset)
        if max_count > 0:
            stmt = stmt.limit(max_count)
        return self._fetch_all(stmt, "get_list")

    def get_all(self) -> list[T]:
        return self._fetch_all(self._select().order_by(self._mapping.id_column), "get_all")

    def get_condition(self, predicate: str, *args: Any) -> T | None:
        """The first row matching *predicate*, or ``None``."""
        return self._fetch_first(self._filtered(predicate, args), "get_condition")

    def get_condition_order(self, order: str, predicate: str, *args: Any) -> T | None:
        """The first row matching *predicate* under *order* (e.g. ``"last_time DESC"``)."""
        stmt = self._filtered(predicate, args).order_by(order_clause(order))
        return self._fetch_first(stmt, "get_condition_order")

    def get_conditions(self, predicate: str, *args: Any) -> list[T]:
        return self._fetch_all(self._filtered(predicate, args), "get_conditions")

    def get_conditions_order(self, order: str, predicate: str, *args: Any) -> list[T]:
        stmt = self._filtered(predicate, args).order_by(order_clause(order))
        return self._fetch_all(stmt, "get_conditions_order")

    def get_conditions_limit(self, max_count: int, predicate: str, *args: Any) -> list[T]:
        """At most *max_count* matching rows.  ``max_count <= 0`` means no limit."""
        stmt = self._filtered(predicate, args)
        if max_count > 0:
            stmt = stmt.limit(max_count)
        return self._fetch_all(stmt, "get_conditions_limit")

    def get_count(self, predicate: str | None = None, *args: Any) -> int:
        """Number of rows, optionally filtered.

        Best effort: a failed query is logged and reported as ``0``.
        """
        try:
            stmt = select(func.count()).select_from(self.table)
            if predicate is not None:
                stmt = stmt.where(bind_predicate(predicate, args))
            with self._read("get_count") as conn:
                return int(conn.execute(stmt).scalar_one())
        except RepokitError as e:
            logger.warning("count_failed", table=self.table.name, predicate=predicate, error=e.message)
            return 0

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._entity_cls.__name__}, table={self.table.name!r})"


__all__ = [
    "GenericRepository",
]
