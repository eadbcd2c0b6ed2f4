"""
Tests for the Redis Session Cache

Tests cover:
- Key format
- TTL passed on store
- Delete reporting
- Health check degradation and close()
"""

import pytest
from unittest.mock import AsyncMock

from ats.services.session_cache import SessionCache, session_key


def test_session_key_format():
    assert session_key("user-123") == "session:user-123"


class TestSessionCache:
    @pytest.mark.asyncio
    async def test_store_sets_ttl(self, session_cache, mock_redis):
        await session_cache.store("user-1", "credential", 3600)

        mock_redis.set.assert_called_once_with("session:user-1", "credential", ex=3600)

    @pytest.mark.asyncio
    async def test_get_round_trip(self, session_cache):
        await session_cache.store("user-1", "credential", 3600)

        assert await session_cache.get("user-1") == "credential"
        assert await session_cache.get("user-2") is None

    @pytest.mark.asyncio
    async def test_store_replaces_previous_credential(self, session_cache):
        await session_cache.store("user-1", "first", 3600)
        await session_cache.store("user-1", "second", 3600)

        assert await session_cache.get("user-1") == "second"

    @pytest.mark.asyncio
    async def test_delete_reports_existence(self, session_cache):
        await session_cache.store("user-1", "credential", 3600)

        assert await session_cache.delete("user-1") is True
        assert await session_cache.delete("user-1") is False

    @pytest.mark.asyncio
    async def test_health_check(self, session_cache, mock_redis):
        assert await session_cache.health_check() is True

        mock_redis.ping = AsyncMock(side_effect=ConnectionError("down"))
        assert await session_cache.health_check() is False

    @pytest.mark.asyncio
    async def test_close_releases_client(self, session_cache, mock_redis):
        await session_cache.close()

        mock_redis.aclose.assert_called_once()
        assert session_cache.redis is None

    @pytest.mark.asyncio
    async def test_redis_errors_propagate(self, session_cache, mock_redis):
        mock_redis.set = AsyncMock(side_effect=ConnectionError("down"))

        with pytest.raises(ConnectionError):
            await session_cache.store("user-1", "credential", 60)

    def test_client_created_lazily(self):
        cache = SessionCache(redis_url="redis://localhost:6379/0")
        assert cache.redis is None
