"""Tests for the example driver."""

from __future__ import annotations

from userdb.core.dao import UserDao
from userdb.core.database import DatabaseManager
from userdb.core.settings import UserDBSettings
from userdb.example import example_usage


def _run(manager: DatabaseManager) -> tuple[int, list[str]]:
    lines: list[str] = []
    code = example_usage(manager, echo=lines.append)
    return code, lines


class TestExampleUsage:
    def test_first_run(self, settings):
        manager = DatabaseManager(settings)
        try:
            code, lines = _run(manager)
            assert code == 0
            assert lines == [
                "Created user John Doe with id 1",
                "Found 1 users",
                "Found 1 users with profile",
                "Created user Jane Smith with profile 1",
            ]

            rows = UserDao(manager.get_queue()).fetch_users_with_profile()
            assert [(r.user.name, r.has_profile) for r in rows] == [
                ("Jane Smith", True),
                ("John Doe", False),
            ]
        finally:
            manager.close()

    def test_second_run_reports_existing(self, settings):
        with DatabaseManager(settings) as manager:
            assert _run(manager)[0] == 0

        with DatabaseManager(settings) as manager:
            code, lines = _run(manager)
            assert code == 0
            assert "User john@example.com already exists" in lines
            assert "Found 2 users" in lines
            assert "User jane@example.com already exists" in lines
            assert UserDao(manager.get_queue()).count_users() == 2

    def test_open_failure_returns_error_code(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("in the way")
        manager = DatabaseManager(UserDBSettings(data_dir=blocker / "data", _env_file=None))

        code, lines = _run(manager)

        assert code == 1
        assert len(lines) == 1
        assert lines[0].startswith("Error: ")
        assert not manager.is_open
