"""
Redis client initialization and connection management.

The client is built by the application lifespan and kept on ``app.state``;
it backs the session-token revocation list.
"""

import redis.asyncio as redis
from redis.exceptions import RedisError
from fastapi import Request

from backoffice.app.core.config import Settings


def create_redis_client(settings: Settings) -> redis.Redis:
    """Create an async Redis client from settings (connects lazily)."""
    return redis.from_url(
        settings.redis_url,
        decode_responses=settings.redis_decode_responses,
    )


async def get_redis(request: Request):
    """
    Get Redis client instance.

    Used as a FastAPI dependency.
    """
    return request.app.state.redis


async def ping_redis(client) -> bool:
    """
    Test Redis connection.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        return bool(await client.ping())
    except RedisError:
        return False
