"""Record types — ``User``, ``Profile`` and the ``UserWithProfile`` composite.

The classes carry column metadata only.  There is deliberately no
``relationship()`` between them: the DAO builds the users ⟕ profiles join
explicitly.

Tags:
    userdb, orm, sqlalchemy, tables
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass

from sqlalchemy import DateTime, ForeignKey, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from userdb.core.orm.base import UserDBBase

_NOW = text("CURRENT_TIMESTAMP")


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


class User(UserDBBase):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        "created_at", DateTime, nullable=False, default=_utcnow, server_default=_NOW
    )

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, name={self.name!r}, email={self.email!r})"


class Profile(UserDBBase):
    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # No unique constraint: one profile per user is a convention only.
    user_id: Mapped[int] = mapped_column(
        "user_id",
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    bio: Mapped[str | None] = mapped_column(Text)
    avatar_url: Mapped[str | None] = mapped_column("avatar_url", Text)

    def __repr__(self) -> str:
        return f"Profile(id={self.id!r}, user_id={self.user_id!r}, bio={self.bio!r})"


@dataclass(frozen=True)
class UserWithProfile:
    """A user and its profile, as produced by the left join.

    ``profile`` is ``None`` when the user has no profile row.
    """

    user: User
    profile: Profile | None = None

    @property
    def has_profile(self) -> bool:
        return self.profile is not None


__all__ = ["User", "Profile", "UserWithProfile"]
