"""Example driver: open the database, then exercise the DAO end to end.

Run it with ``userdb demo`` or ``python -m userdb.example``.
"""

from __future__ import annotations

from typing import Callable

from userdb.core.dao import UserDao
from userdb.core.database import DatabaseManager
from userdb.core.errors import ConstraintViolationError, UserDBError
from userdb.core.logging import configure_logging, get_logger
from userdb.core.orm.tables import Profile, User
from userdb.core.settings import UserDBSettings

logger = get_logger(__name__)


def example_usage(manager: DatabaseManager, echo: Callable[[str], None] = print) -> int:
    """Walk through create, fetch, join and the composed transaction.

    Returns a process exit code.  Every ``UserDBError`` is reported through
    *echo* and turns into exit code 1.
    """
    try:
        manager.open()
        dao = UserDao(manager.get_queue())

        try:
            saved = dao.create_user(User(name="John Doe", email="john@example.com"))
            echo(f"Created user {saved.name} with id {saved.id}")
        except ConstraintViolationError:
            echo("User john@example.com already exists")

        users = dao.fetch_users()
        echo(f"Found {len(users)} users")

        with_profile = dao.fetch_users_with_profile()
        echo(f"Found {len(with_profile)} users with profile")

        try:
            created = dao.create_user_with_profile(
                User(name="Jane Smith", email="jane@example.com"),
                Profile(bio="Developer", avatar_url="https://example.com/avatar.jpg"),
            )
            echo(f"Created user {created.user.name} with profile {created.profile.id}")
        except ConstraintViolationError:
            echo("User jane@example.com already exists")

    except UserDBError as exc:
        logger.error("example.failed", **exc.to_dict())
        echo(f"Error: {exc}")
        return 1

    return 0


def main() -> int:
    settings = UserDBSettings()
    configure_logging(level=settings.log_level, json_format=settings.json_logs)
    manager = DatabaseManager(settings)
    try:
        return example_usage(manager)
    finally:
        manager.close()


if __name__ == "__main__":
    raise SystemExit(main())
