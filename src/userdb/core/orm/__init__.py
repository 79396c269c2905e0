"""SQLAlchemy 2.0 ORM layer for userdb.

Modules
-------
base        UserDBBase (declarative base)
session     Engine factory, session factory, DatabaseQueue
tables      User, Profile and the UserWithProfile composite

Tags:
    userdb, orm, sqlalchemy, declarative
"""

from __future__ import annotations

from userdb.core.orm.base import UserDBBase
from userdb.core.orm.session import (
    DatabaseQueue,
    create_userdb_engine,
    translate_errors,
    userdb_session_factory,
)
from userdb.core.orm.tables import Profile, User, UserWithProfile

__all__ = [
    "UserDBBase",
    "DatabaseQueue",
    "create_userdb_engine",
    "translate_errors",
    "userdb_session_factory",
    "User",
    "Profile",
    "UserWithProfile",
]
