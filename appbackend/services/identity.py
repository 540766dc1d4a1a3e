"""
AppBackend — Identity Context
==============================

What:  Resolves who is acting on a request and stamps that identity onto the
       resource under construction.
How:   The bearer credential is verified with the injected CredentialSigner.
       Its `userID` claim must name an existing user; a `userEndID` claim
       (present on device credentials) must name a UserEnd of that same user.
Who:   `resolve_identity` is called by the route dependency; `stamp_identity`
       runs as step 2 of every insert pipeline.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

import jwt
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from appbackend.exceptions import AuthenticationError
from appbackend.models import User, UserEnd
from appbackend.security import CredentialSigner

if TYPE_CHECKING:
    from appbackend.services.pipeline import InsertContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """The acting user, and the device when a device credential was presented."""

    user_id: uuid.UUID
    userend_id: Optional[uuid.UUID] = None


def _claim_uuid(claims: Dict[str, Any], name: str) -> Optional[uuid.UUID]:
    value = claims.get(name)
    if value is None:
        return None
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise AuthenticationError(message="Invalid token payload", context={"claim": name})


async def resolve_identity(db: AsyncSession, signer: CredentialSigner, token: str) -> Identity:
    """
    Verifies a bearer credential and returns the identity it carries.

    Raises:
        AuthenticationError: bad signature, expired, missing `userID`, unknown
            user, or a `userEndID` that is unknown or belongs to another user.
    """
    try:
        claims = signer.decode(token)
    except jwt.PyJWTError as e:
        logger.info("Rejected credential: %s", type(e).__name__)
        raise AuthenticationError(message="Invalid token")

    user_id = _claim_uuid(claims, "userID")
    if user_id is None:
        raise AuthenticationError(message="Invalid token payload", context={"claim": "userID"})

    n = (await db.execute(select(func.count()).select_from(User).where(User.id == user_id))).scalar()
    if not n:
        raise AuthenticationError(message="User not found")

    userend_id = _claim_uuid(claims, "userEndID")
    if userend_id is not None:
        n = (
            await db.execute(
                select(func.count())
                .select_from(UserEnd)
                .where(UserEnd.id == userend_id, UserEnd.user_id == user_id)
            )
        ).scalar()
        if not n:
            raise AuthenticationError(message="Unknown device credential")

    return Identity(user_id=user_id, userend_id=userend_id)


def stamp_identity(ctx: "InsertContext") -> None:
    """
    Overwrites the new row's `user_id` with the acting user.

    Whatever `userID` the client sent is discarded. Kinds that are not owned
    (users) are left untouched and may be created anonymously.
    """
    if not ctx.descriptor.owned:
        return
    if ctx.identity is None:
        raise AuthenticationError(
            message=f"Creating {ctx.descriptor.collection} requires authentication"
        )
    ctx.obj.user_id = ctx.identity.user_id
