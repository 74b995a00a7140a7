"""
FastAPI dependencies.

This module provides dependencies for protecting routes with session-token
authentication, plus the shared clock, outbound HTTP client and upstream
service clients.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

import httpx
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.app.core.config import settings
from backoffice.app.core.exceptions import AccountDisabledError, AuthenticationError
from backoffice.app.core.jwt import decode_access_token
from backoffice.app.core.redis_client import get_redis
from backoffice.app.core.token_revocation import is_token_revoked
from backoffice.app.db.session import get_db
from backoffice.app.models.user import User
from backoffice.app.services.external_service import ExternalServiceClient

# Bearer header is optional; the session cookie is tried first.
security = HTTPBearer(auto_error=False)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def get_clock() -> Clock:
    """Current-time source; overridden in tests to move through lockout windows."""
    return utc_now


def extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    token = request.cookies.get(settings.cookie_name)
    if token:
        return token
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
    redis_client=Depends(get_redis),
) -> User:
    """
    FastAPI dependency for session-token authentication.

    Checks, in order:
    1. A token is present (cookie, then bearer header)
    2. Signature and expiry are valid
    3. The token has not been revoked by a logout
    4. The user still exists and is active (real-time check)

    Every token problem yields the same generic 401 so callers cannot
    tell which part of the token was rejected.

    Raises:
        AuthenticationError: 401 for any token or user lookup failure
        AccountDisabledError: 403 when the user is deactivated
    """
    token = extract_token(request, credentials)
    if not token:
        raise AuthenticationError()

    payload = decode_access_token(token)
    if payload is None:
        raise AuthenticationError()

    user_id = payload.get("user_id") or payload.get("sub")
    if not user_id:
        raise AuthenticationError()

    if await is_token_revoked(redis_client, token):
        raise AuthenticationError()

    result = await db.execute(select(User).where(User.id == str(user_id)))
    user = result.scalar_one_or_none()
    if user is None:
        raise AuthenticationError()

    if not user.is_active:
        raise AccountDisabledError()

    return user


# Outbound HTTP

async def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http


async def get_plan_client(http_client: httpx.AsyncClient = Depends(get_http_client)) -> ExternalServiceClient:
    return ExternalServiceClient(
        "plan service",
        settings.plan_external_service_url,
        http_client,
        bearer_token=settings.bearer_token,
    )


async def get_route_group_client(http_client: httpx.AsyncClient = Depends(get_http_client)) -> ExternalServiceClient:
    return ExternalServiceClient(
        "route group service",
        settings.route_groups_external_service_url,
        http_client,
        bearer_token=settings.bearer_token,
    )


async def get_delivery_route_client(http_client: httpx.AsyncClient = Depends(get_http_client)) -> ExternalServiceClient:
    return ExternalServiceClient(
        "delivery route service",
        settings.external_service_url,
        http_client,
        bearer_token=settings.bearer_token,
    )
