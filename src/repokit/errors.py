"""
Structured error types for repokit.

Every failure raised by this package is a :class:`RepokitError`.  Errors
carry a category, structured context and the chained underlying exception
so hosts can log them without losing detail.

Manifesto:
    A data layer has two very different ways of failing:

    - **Setup failures** (bad connection spec, unreachable server, a table
      that cannot be created).  Nothing useful can happen afterwards, so
      these are :class:`SetupError` subclasses and are meant to stop startup.
    - **Operation failures** (constraint violations, malformed predicates,
      lost connectivity).  These are :class:`DatabaseError` subclasses and
      propagate to the caller of the single operation.  Nothing is retried.

    "Not found" is *not* an error for reads.  It is an error for
    ``update``, where silently writing nothing hides bugs.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                        RepokitError                             │
        │              (category, context, cause, fatal)                  │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                 │
        │  SetupError (fatal)                DatabaseError                │
        │      │                                 │                        │
        │  ConfigError                       QueryError                   │
        │    MissingConfigError              IntegrityError               │
        │    InvalidConfigError              RecordNotFoundError          │
        │    ConnectionSpecError                                          │
        │  StorageError                                                   │
        │  DatabaseConnectionError                                        │
        │  SchemaError                                                    │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = ConnectionSpecError("unknown database kind 'oracle'")
    >>> error.category
    <ErrorCategory.CONFIG: 'CONFIG'>
    >>> is_fatal(error)
    True

    >>> error = RecordNotFoundError("update record does not exist").with_context(
    ...     entity="Device", entity_id=7
    ... )
    >>> error.to_dict()["context"]
    {'entity': 'Device', 'entity_id': 7}

Guardrails:
    ❌ DON'T: Return ``None`` from an initialization step on failure
    ✅ DO: Raise the matching SetupError subclass

    ❌ DON'T: Swallow the original driver exception
    ✅ DO: Pass it as ``cause=`` for error chaining

Tags:
    error-handling, exception-hierarchy, error-context, repokit
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    CONFIG = "CONFIG"             # Connection spec, config file contents
    STORAGE = "STORAGE"           # Directories, file system
    DATABASE = "DATABASE"         # Connectivity, statement execution
    SCHEMA = "SCHEMA"             # Table provisioning, entity shape
    VALIDATION = "VALIDATION"     # Constraint violations
    NOT_FOUND = "NOT_FOUND"       # Update of a missing record
    INTERNAL = "INTERNAL"         # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"           # Uncategorized errors


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        entity: Entity class name the operation targeted
        table: Table name the operation targeted
        backend: Database kind (sqlite, mysql, ...)
        section: Configuration section being resolved
        metadata: Additional key-value pairs
    """

    entity: str | None = None
    table: str | None = None
    backend: str | None = None
    section: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["entity", "table", "backend", "section"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class RepokitError(Exception):
    """
    Base exception for all repokit errors.

    Subclasses set ``default_category`` and ``fatal``.  A fatal error means
    the data layer could not be brought up and the host should not keep
    serving requests that need it.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    fatal: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> RepokitError:
        """
        Add context to this error (fluent API).

        Usage:
            raise SchemaError("create failed").with_context(table="device")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "fatal": self.fatal,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# SETUP ERRORS (fatal)
# =============================================================================


class SetupError(RepokitError):
    """
    The data layer could not be initialized.

    Raised by the explicit initialization step and by repository
    construction.  There is no degraded mode.
    """

    fatal = True


class ConfigError(SetupError):
    """Configuration error.  The configuration must be fixed."""

    default_category = ErrorCategory.CONFIG


class MissingConfigError(ConfigError):
    """Required configuration is missing."""

    def __init__(self, key: str, message: str | None = None, **kwargs: Any):
        self.key = key
        super().__init__(message or f"Missing required configuration: {key}", **kwargs)


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None, **kwargs: Any):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}", **kwargs)


class ConnectionSpecError(ConfigError):
    """The ``<kind>|<params>`` connection string is malformed or names an unknown kind."""

    def __init__(self, spec: str, message: str, **kwargs: Any):
        self.spec = spec
        super().__init__(message, **kwargs)


class StorageError(SetupError):
    """File system error (database directory could not be created)."""

    default_category = ErrorCategory.STORAGE


class DatabaseConnectionError(SetupError):
    """The database could not be opened or did not answer the startup probe."""

    default_category = ErrorCategory.DATABASE


class SchemaError(SetupError):
    """Entity shape is unusable or its table could not be created."""

    default_category = ErrorCategory.SCHEMA


# =============================================================================
# OPERATION ERRORS
# =============================================================================


class DatabaseError(RepokitError):
    """Database query or transaction error raised by a repository operation."""

    default_category = ErrorCategory.DATABASE


class QueryError(DatabaseError):
    """Statement could not be built or executed (malformed predicate, bad column, ...)."""

    pass


class IntegrityError(DatabaseError):
    """Database integrity constraint violation."""

    default_category = ErrorCategory.VALIDATION


class RecordNotFoundError(DatabaseError):
    """An update matched no row."""

    default_category = ErrorCategory.NOT_FOUND

    def __init__(self, message: str = "update record does not exist", *, entity_id: Any = None, **kwargs: Any):
        self.entity_id = entity_id
        super().__init__(message, **kwargs)


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_fatal(error: Exception) -> bool:
    """Check whether an error means the data layer is unusable."""
    if isinstance(error, RepokitError):
        return error.fatal
    return False


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, RepokitError):
        return error.category
    if isinstance(error, OSError):
        return ErrorCategory.STORAGE
    if isinstance(error, ValueError):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    # Category enum
    "ErrorCategory",
    # Context
    "ErrorContext",
    # Base
    "RepokitError",
    # Setup
    "SetupError",
    "ConfigError",
    "MissingConfigError",
    "InvalidConfigError",
    "ConnectionSpecError",
    "StorageError",
    "DatabaseConnectionError",
    "SchemaError",
    # Operation
    "DatabaseError",
    "QueryError",
    "IntegrityError",
    "RecordNotFoundError",
    # Utilities
    "is_fatal",
    "categorize_error",
]
