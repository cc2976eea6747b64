"""
Tests for SessionStore.

Tests verify:
- Missing keys return None
- put/get round trip as a full overwrite
- Optional TTL
- Sessions are isolated
"""

import pytest

from libs.memory import SessionStore


@pytest.mark.asyncio
async def test_get_missing_returns_none(session_store):
    assert await session_store.get("unknown") is None


@pytest.mark.asyncio
async def test_put_overwrites_whole_document(session_store):
    await session_store.put("s1", {"a": 1, "b": 2})
    await session_store.put("s1", {"a": 3})

    assert await session_store.get("s1") == {"a": 3}


@pytest.mark.asyncio
async def test_sessions_isolated(session_store):
    await session_store.put("session_A", {"name": "A"})
    await session_store.put("session_B", {"name": "B"})

    assert (await session_store.get("session_A"))["name"] == "A"
    assert (await session_store.get("session_B"))["name"] == "B"


@pytest.mark.asyncio
async def test_no_ttl_by_default(session_store, redis_client):
    await session_store.put("s1", {})

    assert await redis_client.ttl("session:s1:state") == -1


@pytest.mark.asyncio
async def test_ttl_set_when_configured(redis_client):
    store = SessionStore(redis_client, ttl_seconds=86400)

    await store.put("s1", {})

    ttl = await redis_client.ttl("session:s1:state")
    assert 86300 < ttl <= 86400, f"TTL should be ~86400s, got {ttl}s"
