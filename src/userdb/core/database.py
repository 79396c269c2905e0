"""
userdb connection manager - owns the database handle and its lifecycle.

``DatabaseManager`` is constructed explicitly and handed to whoever needs
it; there is no process-global instance.  It resolves the storage
directory, opens the SQLite file with foreign keys enforced, applies the
migration registry, and exposes the resulting :class:`DatabaseQueue`.

Lifecycle:
    ::

        manager = DatabaseManager(settings)     # nothing touched yet
        queue = manager.open()                  # mkdir, connect, migrate
        dao = UserDao(manager.get_queue())      # any number of callers
        manager.close()                         # dispose the engine

Failure mapping:
    - directory cannot be created / open fails  → ``ConnectionFailedError``
    - a migration fails                         → ``MigrationFailedError``
    - ``get_queue()`` before a successful open  → ``ConnectionFailedError``

Tags:
    userdb, database, connection, lifecycle, migrations
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import exc as sa_exc

from userdb.core.errors import ConnectionFailedError, MigrationFailedError, UserDBError
from userdb.core.logging import get_logger
from userdb.core.migrations import MigrationRegistry, MigrationResult, MigrationRunner
from userdb.core.migrations import default_registry
from userdb.core.orm.session import DatabaseQueue, create_userdb_engine
from userdb.core.settings import UserDBSettings

logger = get_logger("userdb.core.database")


class DatabaseManager:
    """Opens, migrates and hands out the single database handle.

    Parameters:
        settings: Where the file lives and how the engine behaves.
            Defaults to ``UserDBSettings()`` (environment-driven).
        path: Explicit database file; overrides ``settings.database_path``.
        registry: Migrations to apply on open.  Defaults to the package's
            registered schema history.
    """

    def __init__(
        self,
        settings: UserDBSettings | None = None,
        *,
        path: str | Path | None = None,
        registry: MigrationRegistry | None = None,
    ) -> None:
        self.settings = settings or UserDBSettings()
        self._path = Path(path) if path is not None else self.settings.database_path
        self._registry = registry if registry is not None else default_registry
        self._queue: DatabaseQueue | None = None
        self.last_migration: MigrationResult | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._queue is not None

    @property
    def registry(self) -> MigrationRegistry:
        return self._registry

    def open(self) -> DatabaseQueue:
        """Open the database file and bring its schema up to date.

        Calling ``open()`` on an already-open manager returns the existing
        queue.
        """
        if self._queue is not None:
            return self._queue

        directory = self._resolve_directory()
        db_path = directory / self._path.name

        try:
            engine = create_userdb_engine(
                db_path,
                echo=self.settings.echo_sql,
                busy_timeout=self.settings.busy_timeout,
            )
        except sa_exc.SQLAlchemyError as exc:
            logger.error("database.open_failed", path=str(db_path), error=str(exc))
            raise ConnectionFailedError(
                f"Failed to open database: {exc}", cause=exc
            ).with_context(path=str(db_path)) from exc

        queue = DatabaseQueue(engine)
        try:
            with queue.write() as session:
                self.last_migration = MigrationRunner(self._registry).migrate(
                    session.connection()
                )
        except MigrationFailedError:
            queue.dispose()
            raise
        except UserDBError as exc:
            # The file could not be connected to or read
            queue.dispose()
            logger.error("database.open_failed", path=str(db_path), error=str(exc))
            raise ConnectionFailedError(
                f"Failed to open database: {exc.message}", cause=exc
            ).with_context(path=str(db_path)) from exc

        self._path = db_path
        self._queue = queue
        logger.info(
            "database.opened",
            path=str(db_path),
            applied=self.last_migration.applied,
        )
        return queue

    def get_queue(self) -> DatabaseQueue:
        """Return the open queue, or raise if ``open()`` has not succeeded."""
        if self._queue is None:
            logger.error("database.not_connected", path=str(self._path))
            raise ConnectionFailedError("Database not connected").with_context(
                path=str(self._path)
            )
        return self._queue

    def close(self) -> None:
        """Dispose the engine.  The manager may be opened again afterwards."""
        if self._queue is None:
            return
        self._queue.dispose()
        self._queue = None
        logger.info("database.closed", path=str(self._path))

    def migration_status(self) -> dict[str, list[str]]:
        """Return ``{"applied": [...], "pending": [...]}`` for the open database."""
        runner = MigrationRunner(self._registry)
        with self.get_queue().read() as session:
            conn = session.connection()
            return {
                "applied": [r.name for r in runner.get_applied(conn)],
                "pending": runner.get_pending(conn),
            }

    def _resolve_directory(self) -> Path:
        directory = self._path.expanduser().parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            return directory.resolve()
        except OSError as exc:
            logger.error(
                "database.directory_unavailable", directory=str(directory), error=str(exc)
            )
            raise ConnectionFailedError(
                f"Failed to get storage directory: {directory}", cause=exc
            ).with_context(path=str(directory)) from exc

    def __enter__(self) -> DatabaseManager:
        self.open()
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"DatabaseManager(path={str(self._path)!r}, {state})"
