"""Declarative base and type-map for the userdb ORM models.

Uses SQLAlchemy 2.0 ``DeclarativeBase`` with a ``type_annotation_map``
that maps Python built-in types to SQLite-friendly column types.
"""

from __future__ import annotations

import datetime

from sqlalchemy import DateTime, Integer, Text
from sqlalchemy.orm import DeclarativeBase


class UserDBBase(DeclarativeBase):
    """Shared declarative base for every userdb table.

    * ``str``   → ``Text``
    * ``int``   → ``Integer``
    * ``datetime.datetime`` → ``DateTime``

    The tables themselves are created by the migration registry, not by
    ``metadata.create_all``; the mapping only has to agree with that DDL.
    """

    type_annotation_map = {
        str: Text,
        int: Integer,
        datetime.datetime: DateTime,
    }
