"""
Tests for the rate limiter's in-memory fallback.
"""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from app.core import rate_limit
from app.core.rate_limit import RateLimitExceeded, check_rate_limit, enforce_rate_limit


@pytest.fixture(autouse=True)
def clear_memory_store():
    rate_limit._memory_store.clear()
    yield
    rate_limit._memory_store.clear()


@pytest.fixture
def no_redis():
    with patch("app.core.rate_limit.redis_module") as mock_redis:
        mock_redis.redis_client = None
        yield mock_redis


@pytest.mark.asyncio
async def test_memory_window_allows_up_to_limit(no_redis):
    results = [await check_rate_limit("rate_limit:test:1", 3, 60) for _ in range(4)]

    assert results == [True, True, True, False]


@pytest.mark.asyncio
async def test_limits_are_per_actor(no_redis):
    first, second = uuid4(), uuid4()

    await enforce_rate_limit(first, "documents_verify", 1, 60)
    await enforce_rate_limit(second, "documents_verify", 1, 60)

    with pytest.raises(RateLimitExceeded) as exc_info:
        await enforce_rate_limit(first, "documents_verify", 1, 60)

    assert exc_info.value.status_code == 429
    assert exc_info.value.headers["Retry-After"] == "60"
    assert exc_info.value.detail["error"] == "RATE_LIMIT_EXCEEDED"


@pytest.mark.asyncio
async def test_falls_back_to_memory_when_redis_fails():
    client = MagicMock()
    pipe = MagicMock()
    pipe.execute = AsyncMock(side_effect=ConnectionError("redis gone"))
    client.pipeline.return_value = pipe

    with patch("app.core.rate_limit.redis_module") as mock_redis:
        mock_redis.redis_client = client

        assert await check_rate_limit("rate_limit:test:2", 1, 60) is True
        assert await check_rate_limit("rate_limit:test:2", 1, 60) is False


@pytest.mark.asyncio
async def test_uses_redis_count():
    client = MagicMock()
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[0, 5, 1, True])
    client.pipeline.return_value = pipe

    with patch("app.core.rate_limit.redis_module") as mock_redis:
        mock_redis.redis_client = client

        assert await check_rate_limit("rate_limit:test:3", 5, 60) is False
