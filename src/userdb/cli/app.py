"""
Root Typer application for the userdb CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from userdb.cli.db import app as db_app
from userdb.cli.users import app as users_app
from userdb.cli.utils import console, make_manager

app = Typer(
    name="userdb",
    help="userdb — users and profiles in a local SQLite database.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("userdb")
        except PackageNotFoundError:
            v = "0.1.0"
        typer.echo(f"userdb {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """userdb CLI — manage the database, users and profiles."""


@app.command()
def demo(
    database: str | None = typer.Option(None, "--database", "-d", help="Database path"),
) -> None:
    """Run the example driver against the database."""
    from userdb.example import example_usage

    manager = make_manager(database)
    try:
        code = example_usage(manager, echo=console.print)
    finally:
        manager.close()
    if code:
        raise typer.Exit(code=code)


app.add_typer(db_app, name="db", help="Database operations.")
app.add_typer(users_app, name="users", help="User and profile management.")
