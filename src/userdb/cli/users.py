"""
CLI: ``userdb users`` — create, list, show and delete users.
"""

from __future__ import annotations

import typer

from userdb.cli.utils import (
    console,
    fail,
    joined_to_dict,
    opened,
    output_dict,
    output_rows,
    profile_to_dict,
    user_to_dict,
)
from userdb.core.dao import UserDao
from userdb.core.errors import DataNotFoundError, ValidationError
from userdb.core.orm.tables import Profile, User

app = typer.Typer(no_args_is_help=True)


@app.command("list")
def list_users(
    example_only: bool = typer.Option(
        False, "--example-only", help="Only @example.com users, joined with their profile"
    ),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List users."""
    with opened(database) as manager:
        dao = UserDao(manager.get_queue())
        if example_only:
            rows = [joined_to_dict(r) for r in dao.fetch_users_with_profile()]
            if not json_out:
                rows = [
                    {**r, "profile": (r["profile"] or {}).get("bio")} for r in rows
                ]
        else:
            rows = [user_to_dict(u) for u in dao.fetch_users()]
        output_rows(rows, as_json=json_out, title="Users")


@app.command()
def add(
    name: str = typer.Argument(..., help="Display name"),
    email: str = typer.Argument(..., help="Unique email address"),
    bio: str | None = typer.Option(None, "--bio", help="Create a profile with this bio"),
    avatar_url: str | None = typer.Option(None, "--avatar-url"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Create a user, with a profile when --bio or --avatar-url is given."""
    for field, value in (("name", name), ("email", email)):
        if not value.strip():
            fail(ValidationError(f"{field} must not be empty", field=field))

    with opened(database) as manager:
        dao = UserDao(manager.get_queue())
        user = User(name=name, email=email)
        if bio is not None or avatar_url is not None:
            created = dao.create_user_with_profile(
                user, Profile(bio=bio, avatar_url=avatar_url)
            )
            data = joined_to_dict(created)
        else:
            data = user_to_dict(dao.create_user(user))
        output_dict(data, as_json=json_out, title="Created")


@app.command()
def show(
    user_id: int = typer.Argument(..., help="User id"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show one user and its profile."""
    with opened(database) as manager:
        dao = UserDao(manager.get_queue())
        user = dao.get_user_by_id(user_id)
        if user is None:
            raise DataNotFoundError(f"No user with id {user_id}").with_context(
                table=User.__tablename__, record_id=user_id
            )
        data = {
            **user_to_dict(user),
            "profile": profile_to_dict(dao.get_profile_for_user(user_id)),
        }
        output_dict(data, as_json=json_out, title=f"User {user_id}")


@app.command()
def delete(
    user_id: int = typer.Argument(..., help="User id"),
    database: str | None = typer.Option(None, "--database", "-d"),
) -> None:
    """Delete a user and its profile."""
    with opened(database) as manager:
        removed = UserDao(manager.get_queue()).delete_user(user_id)
    if removed:
        console.print(f"Deleted user {user_id}")
    else:
        console.print(f"[dim]No user with id {user_id}[/dim]")
