"""userdb — a small ORM data-access layer over a local SQLite database."""

from userdb.core import (
    ConnectionFailedError,
    ConstraintViolationError,
    DatabaseManager,
    DatabaseQueue,
    DataNotFoundError,
    MigrationFailedError,
    Profile,
    QueryFailedError,
    User,
    UserDao,
    UserDBError,
    UserDBSettings,
    UserWithProfile,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    "DatabaseManager",
    "DatabaseQueue",
    "UserDao",
    "UserDBSettings",
    "User",
    "Profile",
    "UserWithProfile",
    "UserDBError",
    "ConnectionFailedError",
    "ConstraintViolationError",
    "DataNotFoundError",
    "MigrationFailedError",
    "QueryFailedError",
    "ValidationError",
]
