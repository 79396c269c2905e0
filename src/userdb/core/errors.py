"""
Structured error types for userdb.

Every failure that crosses a public boundary of the package is raised as a
:class:`UserDBError` subclass.  Instead of a bare driver exception, each error
carries:

- **Category:** What kind of failure (connection, migration, query, ...)
- **Context:** Structured metadata (table, record id, path, migration name)
- **Cause:** The chained underlying exception for root cause analysis

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                        UserDBError                           │
        │              (category, context, cause, to_dict)             │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  DatabaseError            ConfigError   ValidationError      │
        │       │                                                      │
        │  ConnectionFailedError   MigrationFailedError                │
        │  QueryFailedError        DataNotFoundError                   │
        │       │                                                      │
        │  ConstraintViolationError                                    │
        └─────────────────────────────────────────────────────────────┘

Propagation policy:
    Every boundary translates.  ``DatabaseManager`` raises
    ``ConnectionFailedError`` / ``MigrationFailedError``; the
    ``DatabaseQueue`` read and write scopes turn any SQLAlchemy error into
    ``QueryFailedError`` (or ``ConstraintViolationError`` for integrity
    failures).  Lookups that find nothing return ``None`` rather than raising
    ``DataNotFoundError``; only updates of a missing row raise it.

Examples:
    >>> err = DataNotFoundError("No user with id 42").with_context(table="users", record_id=42)
    >>> err.category.value
    'NOT_FOUND'
    >>> err.to_dict()["context"]
    {'table': 'users', 'record_id': 42}

Tags:
    error-handling, exception-hierarchy, error-context, userdb

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and reporting."""

    CONNECTION = "CONNECTION"     # Directory resolution, open, handle missing
    MIGRATION = "MIGRATION"       # Schema application
    QUERY = "QUERY"               # Read/write statement failures
    CONSTRAINT = "CONSTRAINT"     # Unique, foreign-key, not-null violations
    NOT_FOUND = "NOT_FOUND"       # Target row does not exist
    VALIDATION = "VALIDATION"     # Caller-supplied field values rejected
    CONFIG = "CONFIG"             # Invalid settings
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only the fields that are set end up in :meth:`to_dict`; anything that
    does not fit a typed field goes into ``metadata``.

    Attributes:
        table: Table the failing statement targeted
        record_id: Primary key involved, if any
        path: Filesystem path of the database, if relevant
        migration: Name of the migration being applied
        metadata: Additional key-value pairs
    """

    table: str | None = None
    record_id: int | None = None
    path: str | None = None
    migration: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["table", "record_id", "path", "migration"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class UserDBError(Exception):
    """
    Base exception for all userdb errors.

    Subclasses set ``default_category`` so callers rarely need to pass one.

    Args:
        message: Human-readable description
        category: Overrides ``default_category``
        context: Structured metadata
        cause: Underlying exception, chained as ``__cause__``
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> UserDBError:
        """
        Add context to this error (fluent API).

        Usage:
            raise QueryFailedError("Insert failed").with_context(table="users")
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
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
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(UserDBError):
    """Configuration error. Must be fixed by the operator."""

    default_category = ErrorCategory.CONFIG


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(UserDBError):
    """A field value supplied by the caller was rejected before any write."""

    default_category = ErrorCategory.VALIDATION

    def __init__(self, message: str, *, field: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(UserDBError):
    """Base for everything that goes wrong talking to the database."""

    default_category = ErrorCategory.QUERY


class ConnectionFailedError(DatabaseError):
    """Storage directory unusable, open failed, or handle requested before open."""

    default_category = ErrorCategory.CONNECTION


class MigrationFailedError(DatabaseError):
    """A registered migration could not be applied; the whole run was rolled back."""

    default_category = ErrorCategory.MIGRATION

    def __init__(self, migration: str, message: str | None = None, **kwargs: Any):
        self.migration = migration
        super().__init__(message or f"Migration failed: {migration}", **kwargs)
        self.context.migration = migration


class QueryFailedError(DatabaseError):
    """A read or write statement failed."""

    default_category = ErrorCategory.QUERY


class ConstraintViolationError(QueryFailedError):
    """Integrity constraint violation (unique, foreign key, not null)."""

    default_category = ErrorCategory.CONSTRAINT


class DataNotFoundError(DatabaseError):
    """The row an operation targets does not exist."""

    default_category = ErrorCategory.NOT_FOUND


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "UserDBError",
    "ConfigError",
    "ValidationError",
    "DatabaseError",
    "ConnectionFailedError",
    "MigrationFailedError",
    "QueryFailedError",
    "ConstraintViolationError",
    "DataNotFoundError",
]
