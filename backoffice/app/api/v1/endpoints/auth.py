"""
Authentication API endpoints.

Provides login, logout and session verification. The session token is
carried in an httpOnly cookie; an ``Authorization: Bearer`` header is
accepted as a fallback.
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from backoffice.app.core.config import settings
from backoffice.app.core.dependencies import Clock, extract_token, get_clock, get_current_user, security
from backoffice.app.core.exceptions import AccountDisabledError, InvalidCredentialsError, RateLimitedError
from backoffice.app.core.jwt import create_access_token, decode_access_token, seconds_until_expiry
from backoffice.app.core.redis_client import get_redis
from backoffice.app.core.security import DUMMY_PASSWORD_HASH, verify_password
from backoffice.app.core.token_revocation import revoke_token
from backoffice.app.db.session import get_db
from backoffice.app.models.user import User
from backoffice.app.schemas.auth import LoginResponse, UserLogin, UserPublic, VerifyResponse
from backoffice.app.schemas.common import MessageResponse
from backoffice.app.services.login_attempts import is_locked_out, register_failed_attempt, reset_attempts

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

COOKIE_MAX_AGE_SECONDS = 4 * 3600


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "strict",
        "path": "/",
    }


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: UserLogin,
    response: Response,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Login user, set the session cookie and return the token.

    Every outcome takes at least the configured login delay, and an
    unknown email is checked against a dummy hash, so unknown emails and
    wrong passwords cannot be told apart by timing.
    """
    started = time.monotonic()
    try:
        return await _authenticate(credentials, response, db, clock())
    finally:
        remaining = settings.login_delay_seconds - (time.monotonic() - started)
        if remaining > 0:
            await asyncio.sleep(remaining)


async def _authenticate(credentials: UserLogin, response: Response, db: AsyncSession, now: datetime) -> LoginResponse:
    result = await db.execute(select(User).where(User.email == credentials.email))
    user = result.scalar_one_or_none()
    if user is None:
        await run_in_threadpool(verify_password, credentials.password, DUMMY_PASSWORD_HASH)
        raise InvalidCredentialsError()

    if is_locked_out(user, now):
        logger.warning("Login refused for locked user %s", user.id)
        raise RateLimitedError(settings.login_lockout_minutes)

    if not await run_in_threadpool(verify_password, credentials.password, user.hashed_password):
        await register_failed_attempt(db, user.id, now)
        await db.commit()
        raise InvalidCredentialsError()

    if not user.is_active:
        raise AccountDisabledError()

    reset_attempts(user)
    await db.commit()

    token = create_access_token(data={
        "sub": user.id,
        "user_id": user.id,
        "role": user.role.value,
    })
    response.set_cookie(settings.cookie_name, token, max_age=COOKIE_MAX_AGE_SECONDS, **_cookie_options())

    logger.info("User %s logged in", user.id)
    return LoginResponse(token=token, user=UserPublic.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    redis_client=Depends(get_redis),
):
    """Clear the session cookie. Always succeeds; a valid token is also revoked."""
    token = extract_token(request, credentials)
    if token:
        payload = decode_access_token(token)
        if payload is not None:
            await revoke_token(
                redis_client,
                token,
                payload.get("user_id") or payload.get("sub"),
                seconds_until_expiry(payload),
            )

    response.delete_cookie(settings.cookie_name, **_cookie_options())
    return MessageResponse(message="Logged out")


@router.get("/verify", response_model=VerifyResponse)
async def verify(current_user: User = Depends(get_current_user)):
    """Return the user behind the current session token."""
    return VerifyResponse(user=UserPublic.model_validate(current_user))
