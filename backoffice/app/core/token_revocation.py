"""
Token Revocation using Redis.

A logged-out session token is blacklisted until it would have expired
anyway, so a copied cookie cannot be replayed after logout.
"""

import logging

from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

# Redis key prefix for blacklisted tokens
TOKEN_BLACKLIST_PREFIX = "blacklist:token:"


async def revoke_token(redis_client, token: str, user_id: str, ttl_seconds: int) -> bool:
    """
    Revoke a specific JWT token by adding it to the blacklist.

    Args:
        redis_client: Async Redis client
        token: The JWT token string to revoke
        user_id: User ID who owns the token
        ttl_seconds: Remaining lifetime of the token

    Returns:
        True if successfully revoked, False otherwise
    """
    if ttl_seconds <= 0:
        return True
    try:
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        await redis_client.setex(key, ttl_seconds, str(user_id))
        return True
    except RedisError as e:
        logger.warning("Error revoking token for user %s: %s", user_id, e)
        return False


async def is_token_revoked(redis_client, token: str) -> bool:
    """
    Check if a token has been revoked.

    Returns:
        True if token is revoked, False otherwise
    """
    try:
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        exists = await redis_client.exists(key)
        return exists > 0
    except RedisError as e:
        # Fail open when Redis is unavailable.
        logger.warning("Error checking token revocation: %s", e)
        return False
