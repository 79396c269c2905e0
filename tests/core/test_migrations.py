"""Tests for the migration registry and runner."""

from __future__ import annotations

import pytest
from sqlalchemy import Connection, inspect, text

from userdb.core.errors import MigrationFailedError
from userdb.core.migrations import (
    MigrationRegistry,
    MigrationResult,
    MigrationRunner,
    default_registry,
)
from userdb.core.orm.session import create_userdb_engine


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture()
def engine(tmp_path):
    eng = create_userdb_engine(tmp_path / "migrations.sqlite")
    yield eng
    eng.dispose()


@pytest.fixture()
def registry() -> MigrationRegistry:
    reg = MigrationRegistry()

    @reg.register("createWidgets")
    def _widgets(conn: Connection) -> None:
        conn.exec_driver_sql("CREATE TABLE widgets (id INTEGER PRIMARY KEY, name TEXT)")

    @reg.register("createGadgets")
    def _gadgets(conn: Connection) -> None:
        conn.exec_driver_sql("CREATE TABLE gadgets (id INTEGER PRIMARY KEY)")

    return reg


def _tables(engine) -> set[str]:
    return set(inspect(engine).get_table_names())


# ── MigrationResult ───────────────────────────────────────────────────


class TestMigrationResult:
    def test_empty_result_unchanged(self):
        r = MigrationResult()
        assert r.applied == []
        assert r.skipped == []
        assert r.changed is False

    def test_changed_when_applied(self):
        assert MigrationResult(applied=["a"]).changed is True


# ── MigrationRegistry ─────────────────────────────────────────────────


class TestMigrationRegistry:
    def test_registration_order_is_kept(self, registry):
        assert registry.names == ["createWidgets", "createGadgets"]
        assert len(registry) == 2
        assert "createGadgets" in registry

    def test_duplicate_name_rejected(self, registry):
        with pytest.raises(ValueError, match="already registered"):
            registry.register("createWidgets", lambda conn: None)

    def test_register_without_decorator(self):
        reg = MigrationRegistry()
        func = lambda conn: None  # noqa: E731
        assert reg.register("noop", func) is func
        assert [m.name for m in reg] == ["noop"]


# ── MigrationRunner ───────────────────────────────────────────────────


class TestMigrationRunner:
    def test_applies_in_order(self, engine, registry):
        with engine.begin() as conn:
            result = MigrationRunner(registry).migrate(conn)

        assert result.applied == ["createWidgets", "createGadgets"]
        assert result.skipped == []
        assert {"widgets", "gadgets", "_migrations"} <= _tables(engine)

    def test_second_run_skips_everything(self, engine, registry):
        runner = MigrationRunner(registry)
        with engine.begin() as conn:
            runner.migrate(conn)
        with engine.begin() as conn:
            result = runner.migrate(conn)

        assert result.applied == []
        assert result.skipped == ["createWidgets", "createGadgets"]

    def test_records_applied_names(self, engine, registry):
        runner = MigrationRunner(registry)
        with engine.begin() as conn:
            runner.migrate(conn)
        with engine.connect() as conn:
            records = runner.get_applied(conn)
            assert [r.name for r in records] == ["createWidgets", "createGadgets"]
            assert all(r.applied_at for r in records)
            assert runner.get_pending(conn) == []

    def test_pending_before_first_run(self, engine, registry):
        with engine.connect() as conn:
            runner = MigrationRunner(registry)
            assert runner.get_applied(conn) == []
            assert runner.get_pending(conn) == ["createWidgets", "createGadgets"]

    def test_new_migration_applied_later(self, engine, registry):
        runner = MigrationRunner(registry)
        with engine.begin() as conn:
            runner.migrate(conn)

        @registry.register("addWidgetColour")
        def _colour(conn: Connection) -> None:
            conn.exec_driver_sql("ALTER TABLE widgets ADD COLUMN colour TEXT")

        with engine.begin() as conn:
            result = runner.migrate(conn)
        assert result.applied == ["addWidgetColour"]
        columns = {c["name"] for c in inspect(engine).get_columns("widgets")}
        assert "colour" in columns

    def test_failure_rolls_back_whole_run(self, engine, registry):
        @registry.register("broken")
        def _broken(conn: Connection) -> None:
            conn.exec_driver_sql("CREATE TABLE widgets (id INTEGER)")  # already exists

        with pytest.raises(MigrationFailedError) as exc_info:
            with engine.begin() as conn:
                MigrationRunner(registry).migrate(conn)

        assert exc_info.value.migration == "broken"
        assert exc_info.value.__cause__ is not None
        assert not {"widgets", "gadgets", "_migrations"} & _tables(engine)

    def test_python_errors_are_wrapped(self, engine):
        reg = MigrationRegistry()

        @reg.register("explode")
        def _explode(conn: Connection) -> None:
            raise RuntimeError("boom")

        with pytest.raises(MigrationFailedError, match="explode"):
            with engine.begin() as conn:
                MigrationRunner(reg).migrate(conn)


# ── Default schema history ────────────────────────────────────────────


class TestDefaultRegistry:
    def test_single_create_tables_migration(self):
        assert default_registry.names == ["createTables"]

    def test_schema(self, engine):
        with engine.begin() as conn:
            MigrationRunner(default_registry).migrate(conn)

        insp = inspect(engine)
        users = {c["name"]: c for c in insp.get_columns("users")}
        assert list(users) == ["id", "name", "email", "created_at"]
        assert users["name"]["nullable"] is False
        assert users["email"]["nullable"] is False
        assert users["created_at"]["nullable"] is False
        assert "CURRENT_TIMESTAMP" in str(users["created_at"]["default"]).upper()

        profiles = {c["name"]: c for c in insp.get_columns("profiles")}
        assert list(profiles) == ["id", "user_id", "bio", "avatar_url"]
        assert profiles["user_id"]["nullable"] is False
        assert profiles["bio"]["nullable"] is True
        assert profiles["avatar_url"]["nullable"] is True

        (fk,) = insp.get_foreign_keys("profiles")
        assert fk["referred_table"] == "users"
        assert fk["constrained_columns"] == ["user_id"]

        with engine.connect() as conn:
            (row,) = conn.exec_driver_sql("PRAGMA foreign_key_list(profiles)").mappings()
        assert (row["table"], row["from"], row["to"]) == ("users", "user_id", "id")
        assert row["on_delete"] == "CASCADE"

    def test_email_unique_and_autoincrement(self, engine):
        with engine.begin() as conn:
            MigrationRunner(default_registry).migrate(conn)
        with engine.connect() as conn:
            users_sql = conn.execute(
                text("SELECT sql FROM sqlite_master WHERE name = 'users'")
            ).scalar_one()
        assert "AUTOINCREMENT" in users_sql
        assert "email TEXT NOT NULL UNIQUE" in users_sql
