"""
userdb core — connection management, migrations, ORM records and the DAO.

Modules
-------
errors      Typed error hierarchy (UserDBError and subclasses)
logging     structlog configuration and get_logger()
settings    UserDBSettings (pydantic-settings, USERDB_ prefix)
migrations  MigrationRegistry / MigrationRunner and the schema history
orm         Declarative base, User/Profile records, DatabaseQueue
database    DatabaseManager (open, migrate, get_queue, close)
dao         UserDao (CRUD and the users ⟕ profiles join)
"""

from userdb.core.dao import UserDao
from userdb.core.database import DatabaseManager
from userdb.core.errors import (
    ConnectionFailedError,
    ConstraintViolationError,
    DataNotFoundError,
    MigrationFailedError,
    QueryFailedError,
    UserDBError,
    ValidationError,
)
from userdb.core.orm import DatabaseQueue, Profile, User, UserWithProfile
from userdb.core.settings import UserDBSettings

__all__ = [
    "UserDao",
    "DatabaseManager",
    "DatabaseQueue",
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
