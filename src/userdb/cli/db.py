"""
CLI: ``userdb db`` — database management commands.
"""

from __future__ import annotations

import typer

from userdb.cli.utils import console, opened, output_dict

app = typer.Typer(no_args_is_help=True)


@app.command()
def init(
    database: str | None = typer.Option(None, "--database", "-d", help="Database path"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Create the database file and apply pending migrations."""
    with opened(database) as manager:
        result = manager.last_migration
        output_dict(
            {
                "path": str(manager.path),
                "applied": result.applied if result else [],
                "skipped": result.skipped if result else [],
            },
            as_json=json_out,
            title="Database Init",
        )


@app.command()
def migrations(
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show applied and pending migrations."""
    with opened(database) as manager:
        status = manager.migration_status()
        if json_out:
            output_dict(status, as_json=True)
            return
        for name in status["applied"]:
            console.print(f"  [green]applied[/green]  {name}")
        for name in status["pending"]:
            console.print(f"  [yellow]pending[/yellow]  {name}")
