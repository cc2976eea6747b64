"""
Tests for the Redis client manager.

Tests verify:
- fakeredis is used in the test environment
- Singleton behaviour
- Missing URL disables storage instead of raising
- Health check
"""

import pytest


@pytest.fixture(autouse=True)
async def reset_redis():
    """Reset Redis client before each test."""
    from libs.caching.redis_client import reset_redis_client
    await reset_redis_client()
    yield
    await reset_redis_client()


@pytest.mark.asyncio
async def test_fake_client_in_test_env():
    from libs.caching.redis_client import get_redis_client

    redis = await get_redis_client()

    assert redis is not None
    assert await redis.ping() is True


@pytest.mark.asyncio
async def test_client_is_singleton():
    from libs.caching.redis_client import get_redis_client

    first = await get_redis_client(use_fake=True)
    second = await get_redis_client(use_fake=True)

    assert first is second


@pytest.mark.asyncio
async def test_missing_url_returns_none():
    from libs.caching.redis_client import get_redis_client

    redis = await get_redis_client(use_fake=False)

    assert redis is None, "Should degrade to None without TRACEWISE_REDIS_URL"


@pytest.mark.asyncio
async def test_health_check_with_fake_client():
    from libs.caching.redis_client import health_check

    assert await health_check() is True


@pytest.mark.asyncio
async def test_health_check_without_redis(monkeypatch):
    from libs.caching.redis_client import health_check
    from libs.common.settings import get_settings

    monkeypatch.setenv("TRACEWISE_APP_ENV", "development")
    get_settings.cache_clear()

    assert await health_check() is False
