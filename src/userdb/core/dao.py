"""Data access object for users and their profiles.

:class:`UserDao` wraps a :class:`~userdb.core.orm.session.DatabaseQueue`.
Every mutating method runs in its own write transaction;
:meth:`UserDao.create_user_with_profile` is the single composed case.

Architecture::

    ┌────────────────────────────────────────────────────────────────────┐
    │                            UserDao                                 │
    │                                                                    │
    │   queue: DatabaseQueue   ← write() serialised, read() concurrent   │
    │                                                                    │
    │   create_user(user)                       → User                   │
    │   create_user_with_profile(user, profile) → UserWithProfile        │
    │   fetch_users()                           → list[User]             │
    │   fetch_users_with_profile()              → list[UserWithProfile]  │
    │   get_user_by_id(id)                      → User | None            │
    │   update_user(user)                       → None                   │
    │   delete_user(id)                         → bool                   │
    └────────────────────────────────────────────────────────────────────┘

Errors:
    SQLAlchemy failures surface as ``QueryFailedError`` /
    ``ConstraintViolationError`` (translated by the queue).  Lookups return
    ``None`` for missing rows; ``update_user`` raises ``DataNotFoundError``.

Tags:
    dao, repository, users, profiles, join
"""

from __future__ import annotations

from sqlalchemy import delete, func, select, update

from userdb.core.errors import DataNotFoundError
from userdb.core.logging import get_logger
from userdb.core.orm.session import DatabaseQueue
from userdb.core.orm.tables import Profile, User, UserWithProfile

logger = get_logger(__name__)

EXAMPLE_EMAIL_PATTERN = "%@example.com"


class UserDao:
    """CRUD and join queries over ``users`` and ``profiles``."""

    def __init__(self, queue: DatabaseQueue) -> None:
        self.queue = queue

    # -- Create ------------------------------------------------------------

    def create_user(self, user: User) -> User:
        """Insert *user* and assign its ``id``.  Returns the same object."""
        with self.queue.write() as session:
            session.add(user)
            session.flush()
            logger.info("user.created", name=user.name, user_id=user.id)
        return user

    def create_user_with_profile(self, user: User, profile: Profile) -> UserWithProfile:
        """Insert *user* and *profile* atomically, linking the profile to the user.

        If either insert fails nothing is persisted, and *user* and *profile*
        get back the identity fields they were passed in with.
        """
        unsaved = (user.id, user.created_at, profile.id, profile.user_id)
        try:
            with self.queue.write() as session:
                session.add(user)
                session.flush()
                if user.id is None:
                    raise AssertionError("user id missing after insert")

                profile.user_id = user.id
                session.add(profile)
                session.flush()
                logger.info(
                    "user_with_profile.created",
                    name=user.name,
                    user_id=user.id,
                    profile_id=profile.id,
                )
        except Exception:
            user.id, user.created_at, profile.id, profile.user_id = unsaved
            raise
        return UserWithProfile(user=user, profile=profile)

    # -- Read --------------------------------------------------------------

    def fetch_users(self) -> list[User]:
        with self.queue.read() as session:
            return list(session.scalars(select(User).order_by(User.id)))

    def fetch_users_with_profile(self) -> list[UserWithProfile]:
        """Users with an ``@example.com`` address and their profile, by name.

        Users without a profile are included with ``profile=None``.
        """
        stmt = (
            select(User, Profile)
            .outerjoin(Profile, Profile.user_id == User.id)
            .where(User.email.like(EXAMPLE_EMAIL_PATTERN))
            .order_by(User.name, User.id, Profile.id)
        )
        with self.queue.read() as session:
            return [
                UserWithProfile(user=user, profile=profile)
                for user, profile in session.execute(stmt)
            ]

    def get_user_by_id(self, user_id: int) -> User | None:
        with self.queue.read() as session:
            return session.get(User, user_id)

    def get_profile_by_id(self, profile_id: int) -> Profile | None:
        with self.queue.read() as session:
            return session.get(Profile, profile_id)

    def get_profile_for_user(self, user_id: int) -> Profile | None:
        """Return the user's profile (the oldest one, if several exist)."""
        stmt = (
            select(Profile)
            .where(Profile.user_id == user_id)
            .order_by(Profile.id)
            .limit(1)
        )
        with self.queue.read() as session:
            return session.scalars(stmt).first()

    def count_users(self) -> int:
        with self.queue.read() as session:
            return session.scalar(select(func.count()).select_from(User)) or 0

    # -- Update / delete ---------------------------------------------------

    def update_user(self, user: User) -> None:
        """Write every column of *user* to the row with the same ``id``.

        A ``created_at`` of ``None`` leaves the stored timestamp unchanged.
        Raises ``DataNotFoundError`` if *user* has no id or no such row exists.
        """
        if user.id is None:
            raise DataNotFoundError("Cannot update a user that was never saved").with_context(
                table=User.__tablename__
            )

        values = {"name": user.name, "email": user.email}
        if user.created_at is not None:
            values["created_at"] = user.created_at

        stmt = (
            update(User)
            .where(User.id == user.id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        with self.queue.write() as session:
            result = session.execute(stmt)
            if result.rowcount == 0:
                raise DataNotFoundError(f"No user with id {user.id}").with_context(
                    table=User.__tablename__, record_id=user.id
                )
            logger.info("user.updated", name=user.name, user_id=user.id)

    def delete_user(self, user_id: int) -> bool:
        """Delete the user (and, by cascade, its profiles).

        Returns ``True`` if a row was removed, ``False`` if none existed.
        """
        stmt = (
            delete(User)
            .where(User.id == user_id)
            .execution_options(synchronize_session=False)
        )
        with self.queue.write() as session:
            removed = session.execute(stmt).rowcount > 0
            logger.info("user.deleted", user_id=user_id, removed=removed)
        return removed
