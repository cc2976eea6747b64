"""
Redis client manager for Tracewise storage.

Provides:
- Async Redis client with connection pooling
- Singleton pattern shared by the semantic cache and the session store
- fakeredis in the test environment
- Graceful fallback to None when Redis is unreachable
"""

from typing import Optional

import redis.asyncio as redis
import structlog

from libs.common.settings import get_settings

logger = structlog.get_logger(__name__)

# Global Redis client instance (singleton)
_redis_client: Optional[redis.Redis] = None
_connection_failed = False  # Circuit breaker for repeated failures


def _redact(url: str) -> str:
    return url.split("@")[-1] if "@" in url else url.split("//")[-1]


async def get_redis_client(use_fake: Optional[bool] = None) -> Optional[redis.Redis]:
    """
    Get or create async Redis client with connection pooling.

    Args:
        use_fake: If True, use fakeredis. If None, auto-detect from settings.

    Returns:
        Redis client instance or None if connection fails
    """
    global _redis_client, _connection_failed

    settings = get_settings()
    if use_fake is None:
        use_fake = settings.is_test

    if use_fake:
        from fakeredis import aioredis as fakeredis

        if _redis_client is None:
            _redis_client = fakeredis.FakeRedis(decode_responses=True)
            logger.info("Using fakeredis for testing")
        return _redis_client

    # If previous connection attempt failed, don't retry immediately
    if _connection_failed:
        logger.warning("Redis connection previously failed, skipping reconnect attempt")
        return None

    if _redis_client is not None:
        try:
            await _redis_client.ping()
            return _redis_client
        except Exception as e:
            logger.warning("Existing Redis connection failed, reconnecting", error=str(e))
            _redis_client = None

    redis_url = settings.redis_url
    if not redis_url:
        logger.warning(
            "TRACEWISE_REDIS_URL not configured, storage disabled",
            hint="Set TRACEWISE_REDIS_URL to enable the semantic cache and session persistence",
        )
        _connection_failed = True
        return None

    try:
        _redis_client = redis.from_url(
            redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=20,
            socket_timeout=5,
            socket_connect_timeout=5,
        )
        await _redis_client.ping()

        logger.info("Redis client initialized", url=_redact(redis_url), max_connections=20)
        return _redis_client

    except redis.ConnectionError as e:
        logger.error(
            "Redis connection failed",
            error=str(e),
            redis_url=_redact(redis_url),
            hint="Check TRACEWISE_REDIS_URL and ensure Redis server is running",
        )
        _redis_client = None
        _connection_failed = True
        return None

    except Exception as e:
        logger.error("Unexpected error initializing Redis", error=str(e), error_type=type(e).__name__)
        _redis_client = None
        _connection_failed = True
        return None


async def close_redis_client():
    """Close Redis client connection."""
    global _redis_client

    if _redis_client is not None:
        try:
            await _redis_client.aclose()
            logger.info("Redis client closed")
        except Exception as e:
            logger.warning("Error closing Redis client", error=str(e))
        finally:
            _redis_client = None


async def reset_redis_client():
    """Reset Redis client (for testing or after connection failures)."""
    global _connection_failed

    await close_redis_client()
    _connection_failed = False

    logger.info("Redis client reset")


async def health_check() -> bool:
    """Return True if Redis answers a ping."""
    try:
        client = await get_redis_client()
        if client is None:
            return False
        return await client.ping() is True
    except Exception as e:
        logger.error("Redis health check failed", error=str(e))
        return False
