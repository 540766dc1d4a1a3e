"""
AppBackend — User and UserEnd Models
=====================================

What:  The `users` table (accounts) and the `userends` table (one row per
       enrolled client instance, the target key of per-device mirroring).

Lifecycle:
    User:    created once by POST /user; the stored password is a passlib hash.
    UserEnd: created by POST /userend for an authenticated user; its id is
             embedded in the device credential and keys every mirror row.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from appbackend.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    An account.

    The nickname is unique by application check only (see the user
    pre-checks); there is deliberately no unique constraint at this layer.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Case-sensitive exact match is what the uniqueness pre-check compares
    nickname: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # passlib hash string, never the clear password
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, nickname='{self.nickname}')>"


class UserEnd(Base):
    """One authenticated client instance ("device") bound to exactly one user."""

    __tablename__ = "userends"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<UserEnd(id={self.id}, user_id={self.user_id})>"
