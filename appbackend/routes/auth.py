"""
AppBackend — Login Route
=========================

What:  POST /login, exchanging a nickname and password for a user credential.
How:   The credential travels in the `x-sgl-token` response header, the body
       only reports `{"status": "OK"}`.
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from appbackend.config import settings
from appbackend.database import get_db_session
from appbackend.routes.deps import signer
from appbackend.schemas.responses import ErrorResponse, LoginRequest, StatusResponse
from appbackend.security import TOKEN_HEADER
from appbackend.services.users import authenticate, issue_user_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/login",
    response_model=StatusResponse,
    responses={
        401: {"description": "Unknown handle or wrong password", "model": ErrorResponse},
        500: {"description": "Signing not configured", "model": ErrorResponse},
    },
    summary="Log in and receive a user credential",
)
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> StatusResponse:
    user = await authenticate(db, body.handle, body.password)
    response.headers[TOKEN_HEADER] = issue_user_token(
        signer, user, settings.user_token_ttl_hours
    )
    logger.info("User %s logged in", user.id)
    return StatusResponse()
