"""
Redis Session Cache

Associates each signed-in user with the most recently issued credential.

Cache Key Pattern:
    session:{user_id} -> credential   (TTL = credential lifetime)

Redis errors are not swallowed here: sign-in and sign-out surface them
as server errors, and a failed read during cache-aware authentication
denies the request. Only health_check() degrades to False.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from fastapi import Request

logger = logging.getLogger(__name__)

KEY_PREFIX = "session"


def session_key(user_id: str) -> str:
    return f"{KEY_PREFIX}:{user_id}"


class SessionCache:
    """
    Session store backed by Redis.

    The client is created lazily on first use and released by close().

    Attributes:
        redis: Async Redis client (None until first use)
    """

    def __init__(self, redis_url: str):
        self.redis_url = redis_url
        self.redis: Optional[redis.Redis] = None

    def _client(self) -> redis.Redis:
        if self.redis is None:
            self.redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self.redis

    async def store(self, user_id: str, credential: str, ttl_seconds: int) -> None:
        """Record credential as the user's current session, replacing any previous one."""
        await self._client().set(session_key(user_id), credential, ex=ttl_seconds)

    async def get(self, user_id: str) -> Optional[str]:
        return await self._client().get(session_key(user_id))

    async def delete(self, user_id: str) -> bool:
        """
        Drop the user's session entry.

        Returns:
            True if an entry existed
        """
        deleted = await self._client().delete(session_key(user_id))
        return deleted > 0

    async def health_check(self) -> bool:
        try:
            await self._client().ping()
            return True
        except Exception as e:
            logger.warning(f"Redis health check failed: {e}")
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None


def get_session_cache(request: Request) -> SessionCache:
    return request.app.state.session_cache
