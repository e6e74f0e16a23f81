"""
Redis connection and cache management.

This module provides the Redis connection setup and the JSON cache
operations the shared group cache is built on.
"""

import json
import logging
from typing import Optional, Any, Iterator

import redis

from group_directory.config.settings import settings

logger = logging.getLogger(__name__)


class RedisManager:
    """
    Redis connection manager with caching utilities.

    Redis is never authoritative for the directory: every failure is
    logged and reported as a miss so reads fall through to the store.
    """

    def __init__(self, redis_url: str = None, client: Any = None):
        """Initialize Redis connection pool, or wrap an existing client."""
        self.redis_client = client if client is not None else redis.from_url(
            redis_url or settings.redis_url,
            decode_responses=True,  # Automatically decode responses to strings
            socket_connect_timeout=5,
            socket_timeout=5
        )

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from Redis cache.

        Args:
            key: Cache key to retrieve

        Returns:
            Cached value if found, None if not found or expired
        """
        try:
            value = self.redis_client.get(key)
        except redis.RedisError as e:
            logger.warning(f"Redis GET failed for {key}: {e}")
            return None
        if value is None:
            return None
        # Try to deserialize JSON, fallback to string if not JSON
        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """
        Set value in Redis cache.

        Args:
            key: Cache key
            value: Value to cache (will be JSON serialized if not string)
            ttl: Time to live in seconds, None for no expiry

        Returns:
            True if successful, False otherwise
        """
        try:
            if not isinstance(value, str):
                value = json.dumps(value, default=str)
            return bool(self.redis_client.set(key, value, ex=ttl))
        except (redis.RedisError, TypeError) as e:
            logger.warning(f"Redis SET failed for {key}: {e}")
            return False


    def delete(self, key: str, raise_errors: bool = False) -> bool:
        """
        Delete key from Redis cache.

        Args:
            key: Cache key to delete
            raise_errors: Re-raise RedisError instead of reporting False

        Returns:
            True if key was deleted, False otherwise
        """
        try:
            return bool(self.redis_client.delete(key))
        except redis.RedisError as e:
            logger.warning(f"Redis DELETE failed for {key}: {e}")
            if raise_errors:
                raise
            return False

    def exists(self, key: str) -> bool:
        """Check if key exists in Redis."""
        try:
            return bool(self.redis_client.exists(key))
        except redis.RedisError as e:
            logger.warning(f"Redis EXISTS failed for {key}: {e}")
            return False

    def keys(self, prefix: str, raise_errors: bool = False) -> Iterator[str]:
        """Iterate over keys starting with prefix."""
        try:
            yield from self.redis_client.scan_iter(match=f"{prefix}*")
        except redis.RedisError as e:
            logger.warning(f"Redis SCAN failed for {prefix}*: {e}")
            if raise_errors:
                raise
