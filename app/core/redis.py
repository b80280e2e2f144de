# app/core/redis.py
"""
Redis connection utilities.
Redis is used for:
- Read caching of appointment / patient / doctor lists
- Analytics dashboard caching

The app should boot even if Redis is unavailable (degraded mode).
"""

import logging
from typing import Optional

import redis

from app.core.config import get_settings

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None
_redis_checked: bool = False


def get_redis_client() -> Optional[redis.Redis]:
    """
    Get Redis client instance.
    Returns None if Redis is not configured or unavailable.
    The connection is attempted once per process.
    """
    global _redis_client, _redis_checked

    if _redis_checked:
        return _redis_client

    _redis_checked = True
    settings = get_settings()

    if not settings.redis_url:
        logger.warning("REDIS_URL not set. Caching will be disabled.")
        return None

    try:
        client = redis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        # Test connection
        client.ping()
    except redis.RedisError as e:
        logger.warning(
            f"Failed to connect to Redis: {e}. Running in degraded mode (no caching)."
        )
        return None

    logger.info("Redis connection established successfully.")
    _redis_client = client
    return _redis_client


def is_redis_available() -> bool:
    """Check if Redis is available."""
    client = get_redis_client()
    if not client:
        return False
    try:
        client.ping()
        return True
    except redis.RedisError:
        return False
