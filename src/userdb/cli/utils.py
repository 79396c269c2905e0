"""
CLI utility helpers — output formatting and database management.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from userdb.core.database import DatabaseManager
from userdb.core.errors import UserDBError
from userdb.core.logging import configure_logging
from userdb.core.orm.tables import Profile, User, UserWithProfile
from userdb.core.settings import UserDBSettings

console = Console()
err_console = Console(stderr=True)


# ── Database helper ──────────────────────────────────────────────────────


def make_manager(database: str | None = None) -> DatabaseManager:
    """Build a manager from settings, with ``--database`` overriding the path."""
    settings = UserDBSettings()
    configure_logging(level=settings.log_level, json_format=settings.json_logs)
    return DatabaseManager(settings, path=database)


@contextmanager
def opened(database: str | None = None) -> Iterator[DatabaseManager]:
    """Open the database for one command; report ``UserDBError`` and exit 1."""
    manager = make_manager(database)
    try:
        manager.open()
        yield manager
    except UserDBError as exc:
        fail(exc)
    finally:
        manager.close()


def fail(exc: UserDBError) -> NoReturn:
    err_console.print(f"[bold red]Error[/bold red] ({exc.category.value}): {exc.message}")
    raise typer.Exit(code=1)


# ── Output helpers ───────────────────────────────────────────────────────


def user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "created_at": user.created_at,
    }


def profile_to_dict(profile: Profile | None) -> dict[str, Any] | None:
    if profile is None:
        return None
    return {
        "id": profile.id,
        "user_id": profile.user_id,
        "bio": profile.bio,
        "avatar_url": profile.avatar_url,
    }


def joined_to_dict(row: UserWithProfile) -> dict[str, Any]:
    return {**user_to_dict(row.user), "profile": profile_to_dict(row.profile)}


def output_rows(rows: list[dict[str, Any]], *, as_json: bool = False, title: str = "") -> None:
    """Render a list of dicts as JSON or a Rich table."""
    if as_json:
        console.print_json(json.dumps(rows, default=str))
        return
    if not rows:
        console.print("[dim]No items.[/dim]")
        return
    _print_table(rows, title=title)


def output_dict(data: dict[str, Any], *, as_json: bool = False, title: str = "") -> None:
    if as_json:
        console.print_json(json.dumps(data, default=str))
        return
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")


def _print_table(items: list[dict[str, Any]], *, title: str = "") -> None:
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in items[0]:
        table.add_column(col, overflow="fold")
    for item in items:
        table.add_row(*("" if v is None else str(v) for v in item.values()))
    console.print(table)
