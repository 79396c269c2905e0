"""The registered schema history of the userdb database.

Migrations run in the order they are registered here.  Never edit or
reorder a migration that has shipped; add a new one instead.
"""

from __future__ import annotations

from sqlalchemy import Connection

from userdb.core.migrations.runner import MigrationRegistry

registry = MigrationRegistry()


@registry.register("createTables")
def create_tables(conn: Connection) -> None:
    conn.exec_driver_sql(
        """
        CREATE TABLE users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            email TEXT NOT NULL UNIQUE,
            created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
        """
    )
    conn.exec_driver_sql(
        """
        CREATE TABLE profiles (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            bio TEXT,
            avatar_url TEXT
        )
        """
    )
