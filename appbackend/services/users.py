"""
AppBackend — User Account Service
==================================

What:  The pre-checks of POST /user and the login flow of POST /login.

Uniqueness:
    `unique_nickname` counts users with the same nickname (exact,
    case-sensitive) before the insert. Two concurrent sign-ups can both pass
    the count: there is no unique constraint or transaction at this layer.
"""

import logging
from datetime import timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from appbackend.exceptions import AuthenticationError, ConflictError
from appbackend.models import User
from appbackend.security import CredentialSigner, hash_password, verify_password

logger = logging.getLogger(__name__)


async def unique_nickname(ctx) -> None:
    """Pre-check: no existing user may carry the requested nickname."""
    nickname = ctx.obj.nickname
    result = await ctx.db.execute(
        select(func.count()).select_from(User).where(User.nickname == nickname)
    )
    if result.scalar():
        raise ConflictError(message="User already exists", context={"nickname": nickname})


async def hash_user_password(ctx) -> None:
    """Pre-check: replaces the clear password with its hash before the write."""
    ctx.obj.password = hash_password(ctx.obj.password)


async def authenticate(db: AsyncSession, handle: str, password: str) -> User:
    """
    Returns the user matching `handle` and `password`.

    Raises:
        AuthenticationError: unknown handle, wrong password or a stored hash
            passlib cannot read (same message for all).
    """
    result = await db.execute(select(User).where(User.nickname == handle))
    user = result.scalars().first()
    try:
        verified = user is not None and verify_password(password, user.password)
    except ValueError as e:
        # passlib.exc.UnknownHashError and malformed hashes
        logger.warning("Unreadable password hash for user %s: %s", user.id, type(e).__name__)
        verified = False
    if not verified:
        logger.info("Failed login for handle %s", handle)
        raise AuthenticationError(message="Invalid credentials")
    return user


def issue_user_token(signer: CredentialSigner, user: User, ttl_hours: int) -> str:
    return signer.sign({"userID": str(user.id)}, expires_in=timedelta(hours=ttl_hours))
