"""Environment-driven settings for userdb.

``UserDBSettings`` resolves where the SQLite file lives and how logging and
the engine behave.  Values come from ``USERDB_*`` environment variables or a
``.env`` file; everything has a default that works out of the box.

Examples:
    >>> from userdb.core.settings import UserDBSettings
    >>> s = UserDBSettings(data_dir="/tmp/userdb")
    >>> s.database_path
    PosixPath('/tmp/userdb/mydatabase.sqlite')

Tags:
    settings, configuration, pydantic, environment, userdb
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DB_FILENAME = "mydatabase.sqlite"


class UserDBSettings(BaseSettings):
    """Settings for the connection manager, engine and logging.

    Fields
    ──────
    data_dir      : Directory holding the database file (created on open)
    db_filename   : Fixed database file name inside ``data_dir``
    log_level     : Structlog log level
    json_logs     : JSON output; ``None`` auto-detects from the terminal
    echo_sql      : Log every SQL statement SQLAlchemy emits
    busy_timeout  : Seconds SQLite waits on a locked database
    """

    model_config = SettingsConfigDict(
        env_prefix="USERDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Storage ──────────────────────────────────────────────────
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".userdb",
        description="Directory holding the database file",
    )
    db_filename: str = DEFAULT_DB_FILENAME

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None
    echo_sql: bool = False

    # ── Engine ───────────────────────────────────────────────────
    busy_timeout: float = Field(default=5.0, ge=0)

    @field_validator("db_filename")
    @classmethod
    def _plain_filename(cls, value: str) -> str:
        if not value or Path(value).name != value:
            raise ValueError("db_filename must be a bare file name")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level

    @property
    def database_path(self) -> Path:
        """Full path of the SQLite file."""
        return self.data_dir.expanduser() / self.db_filename
