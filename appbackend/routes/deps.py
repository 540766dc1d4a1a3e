"""
AppBackend — Shared Route Dependencies
=======================================

What:  The credential signer and the optional identity dependency used by the
       write endpoints.
How:   `Authorization: Bearer <token>` is read with FastAPI's HTTPBearer
       (auto_error off). A missing header yields no identity; the insert
       pipeline then decides whether the kind needs one. A header that is
       present but invalid is rejected immediately.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from appbackend.config import settings
from appbackend.database import get_db_session
from appbackend.security import CredentialSigner
from appbackend.services.identity import Identity, resolve_identity

bearer_scheme = HTTPBearer(auto_error=False)

signer = CredentialSigner(settings.jwt_secret)


async def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[Identity]:
    if credentials is None:
        return None
    return await resolve_identity(db, signer, credentials.credentials)
