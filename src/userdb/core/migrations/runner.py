"""Migration registry and runner.

Migrations are named Python callables registered in order.  The runner
tracks applied names in the ``_migrations`` table and applies pending ones
in registration order, all inside the caller's transaction.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

from sqlalchemy import Connection, text

from userdb.core.errors import MigrationFailedError
from userdb.core.logging import get_logger

logger = get_logger(__name__)

MigrationFunc = Callable[[Connection], None]


@dataclass(frozen=True)
class Migration:
    """A named schema step."""

    name: str
    apply: MigrationFunc


@dataclass
class MigrationRecord:
    """Record of a single applied migration."""

    id: int
    name: str
    applied_at: str


@dataclass
class MigrationResult:
    """Result of a migration run."""

    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.applied)


class MigrationRegistry:
    """Ordered collection of named migrations.

    Example::

        registry = MigrationRegistry()

        @registry.register("createTables")
        def create_tables(conn):
            conn.exec_driver_sql("CREATE TABLE ...")
    """

    def __init__(self) -> None:
        self._migrations: dict[str, Migration] = {}

    def register(self, name: str, func: MigrationFunc | None = None):
        """Register *func* under *name*; usable as a decorator."""
        if name in self._migrations:
            raise ValueError(f"Migration already registered: {name}")

        def decorator(f: MigrationFunc) -> MigrationFunc:
            self._migrations[name] = Migration(name=name, apply=f)
            return f

        if func is not None:
            return decorator(func)
        return decorator

    @property
    def names(self) -> list[str]:
        return list(self._migrations)

    def __iter__(self) -> Iterator[Migration]:
        return iter(self._migrations.values())

    def __len__(self) -> int:
        return len(self._migrations)

    def __contains__(self, name: object) -> bool:
        return name in self._migrations


class MigrationRunner:
    """Applies a registry's pending migrations on a connection.

    Parameters
    ----------
    registry
        The ordered migrations to apply.

    The runner never commits: the caller owns the transaction, so a failure
    anywhere leaves the database exactly as it was.

    Example::

        with engine.begin() as conn:
            result = MigrationRunner(registry).migrate(conn)
    """

    def __init__(self, registry: MigrationRegistry) -> None:
        self._registry = registry

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def migrate(self, conn: Connection) -> MigrationResult:
        """Apply all pending migrations in registration order.

        Raises ``MigrationFailedError`` on the first failure; the caller's
        transaction must then be rolled back.
        """
        result = MigrationResult()
        self._ensure_migrations_table(conn)
        applied = {r.name for r in self.get_applied(conn)}

        for migration in self._registry:
            if migration.name in applied:
                result.skipped.append(migration.name)
                continue

            try:
                migration.apply(conn)
                self._record_migration(conn, migration.name)
            except Exception as exc:
                logger.error(
                    "migration.failed", migration=migration.name, error=str(exc)
                )
                raise MigrationFailedError(migration.name, cause=exc) from exc

            result.applied.append(migration.name)
            logger.info("migration.applied", migration=migration.name)

        return result

    def get_applied(self, conn: Connection) -> list[MigrationRecord]:
        """Return already-applied migrations, oldest first."""
        if not self._has_migrations_table(conn):
            return []
        rows = conn.execute(
            text("SELECT id, name, applied_at FROM _migrations ORDER BY id")
        ).all()
        return [
            MigrationRecord(id=row[0], name=row[1], applied_at=str(row[2]))
            for row in rows
        ]

    def get_pending(self, conn: Connection) -> list[str]:
        """Return names of registered migrations not yet applied."""
        applied = {r.name for r in self.get_applied(conn)}
        return [name for name in self._registry.names if name not in applied]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _has_migrations_table(self, conn: Connection) -> bool:
        row = conn.execute(
            text("SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = '_migrations'")
        ).first()
        return row is not None

    def _ensure_migrations_table(self, conn: Connection) -> None:
        """Create the ``_migrations`` table if it doesn't exist."""
        conn.exec_driver_sql(
            """
            CREATE TABLE IF NOT EXISTS _migrations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL UNIQUE,
                applied_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
            """
        )

    def _record_migration(self, conn: Connection, name: str) -> None:
        conn.execute(
            text("INSERT INTO _migrations (name) VALUES (:name)"),
            {"name": name},
        )
