"""
Shared pytest fixtures for userdb tests.

This module provides:
- Environment isolation (no ``USERDB_*`` variables leak into tests)
- Settings pointing at a per-test temporary directory
- An opened ``DatabaseManager`` and a ``UserDao`` bound to it
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest

from userdb.core.dao import UserDao
from userdb.core.database import DatabaseManager
from userdb.core.settings import UserDBSettings


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark tests without an explicit marker as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop any USERDB_* variables from the developer's shell."""
    for key in list(os.environ):
        if key.startswith("USERDB_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def settings(tmp_path: Path) -> UserDBSettings:
    return UserDBSettings(data_dir=tmp_path / "data", _env_file=None)


@pytest.fixture
def manager(settings: UserDBSettings) -> Iterator[DatabaseManager]:
    """An opened manager; closed after the test."""
    mgr = DatabaseManager(settings)
    mgr.open()
    yield mgr
    mgr.close()


@pytest.fixture
def dao(manager: DatabaseManager) -> UserDao:
    return UserDao(manager.get_queue())


