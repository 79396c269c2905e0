"""SQLAlchemy engine factory, session factory, and the serialised database queue.

This module provides:

* ``create_userdb_engine``    -- Create a SQLite engine with pragmas applied on connect.
* ``userdb_session_factory``  -- ``sessionmaker`` with ``expire_on_commit=False``.
* ``translate_errors``        -- Re-raise SQLAlchemy errors as ``QueryFailedError``.
* ``DatabaseQueue``           -- The single long-lived handle: one writer at a
  time, concurrent readers.

Transactions:
    pysqlite's own transaction handling does not wrap DDL and delays
    ``BEGIN`` until the first DML statement.  The engine disables it and
    emits ``BEGIN`` itself, so migrations and composed writes are atomic.

Tags:
    userdb, orm, sqlalchemy, session, engine, queue
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from userdb.core.errors import ConstraintViolationError, QueryFailedError
from userdb.core.logging import get_logger

logger = get_logger(__name__)


def create_userdb_engine(
    path: str | Path,
    *,
    echo: bool = False,
    busy_timeout: float = 5.0,
    **kwargs: Any,
) -> Engine:
    """Create a read-write SQLite engine for *path*.

    Parameters
    ----------
    path:
        Filesystem path of the database file; created if missing.
    echo:
        If ``True``, log all SQL through the ``sqlalchemy.engine`` logger.
    busy_timeout:
        Seconds to wait for a lock held by another connection.
    **kwargs:
        Extra arguments forwarded to ``sqlalchemy.create_engine``.
    """
    connect_args = kwargs.pop("connect_args", {})
    connect_args.setdefault("check_same_thread", False)
    connect_args.setdefault("timeout", busy_timeout)

    engine = create_engine(f"sqlite:///{path}", echo=echo, connect_args=connect_args, **kwargs)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
        # Hand transaction control to the "begin" listener below
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _do_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")

    return engine


def userdb_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a ``sessionmaker`` bound to *engine*.

    Records stay readable after their session ends, so ``expire_on_commit``
    is off.
    """
    return sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def translate_errors() -> Iterator[None]:
    """Re-raise any SQLAlchemy failure in the userdb error taxonomy."""
    try:
        yield
    except sa_exc.IntegrityError as exc:
        raise ConstraintViolationError(str(exc.orig), cause=exc) from exc
    except sa_exc.SQLAlchemyError as exc:
        raise QueryFailedError(str(exc), cause=exc) from exc


class DatabaseQueue:
    """The process-wide database handle.

    Writes are serialised through one lock and each runs in its own
    transaction.  Reads take no lock; WAL mode gives them a snapshot that
    never sees another writer's uncommitted rows.

    Example::

        queue = DatabaseQueue(create_userdb_engine("app.sqlite"))
        with queue.write() as session:
            session.add(User(name="Jane", email="jane@example.com"))
        with queue.read() as session:
            users = session.scalars(select(User)).all()
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = userdb_session_factory(engine)
        self._write_lock = threading.Lock()

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def write(self) -> Iterator[Session]:
        """Yield a session inside a write transaction.

        Commits when the block exits cleanly and rolls back on any exception.
        """
        with self._write_lock, translate_errors():
            with self._session_factory() as session, session.begin():
                yield session

    @contextmanager
    def read(self) -> Iterator[Session]:
        """Yield a session for queries; nothing is committed."""
        with translate_errors():
            with self._session_factory() as session:
                yield session

    def dispose(self) -> None:
        """Close every pooled connection."""
        self._engine.dispose()
        logger.debug("database.disposed", url=str(self._engine.url))

    def __repr__(self) -> str:
        return f"DatabaseQueue({self._engine.url!s})"
