"""
Pytest configuration and fixtures for Tracewise tests.

Provides shared fixtures for:
- fakeredis client
- deterministic embedding client
- fully wired pipeline components with mocked model oracles
"""

import hashlib
from unittest.mock import AsyncMock

import numpy as np
import pytest

from libs.common.settings import get_settings


class FakeEmbeddingClient:
    """
    Deterministic embeddings keyed on the normalized text.

    The same text always maps to the same unit vector; different texts map
    to unrelated random vectors whose cosine similarity is far below any
    sensible cache threshold.
    """

    def __init__(self, dim: int = 64):
        self.dim = dim
        self.calls = []

    async def embed(self, text, max_len=1000):
        self.calls.append(text)
        normalized = " ".join(text.lower().split())
        seed = int(hashlib.md5(normalized.encode("utf-8")).hexdigest()[:8], 16)
        vector = np.random.RandomState(seed).randn(self.dim)
        return (vector / np.linalg.norm(vector)).tolist()


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """Set up test environment variables."""
    monkeypatch.setenv("TRACEWISE_APP_ENV", "test")
    monkeypatch.delenv("TRACEWISE_REDIS_URL", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
async def redis_client():
    """
    Provide fakeredis client for testing.

    This avoids requiring actual Redis server during tests.
    """
    from fakeredis import aioredis as fakeredis

    client = fakeredis.FakeRedis(decode_responses=True)
    await client.flushdb()

    yield client

    await client.flushdb()
    await client.aclose()


@pytest.fixture
def embedding_client():
    return FakeEmbeddingClient()


@pytest.fixture
def semantic_cache(redis_client, embedding_client):
    from libs.caching import RedisVectorIndex, SemanticCache

    return SemanticCache(embedding_client, RedisVectorIndex(redis_client, namespace="test_memory"))


@pytest.fixture
def session_store(redis_client):
    from libs.memory import SessionStore

    return SessionStore(redis_client)


@pytest.fixture
def classification_oracle():
    """Tool-calling oracle; tests set ``return_value`` or ``side_effect``."""
    oracle = AsyncMock()
    oracle.classify.return_value = None
    return oracle


@pytest.fixture
def generator():
    """Generation oracle returning a fixed answer."""
    gen = AsyncMock()
    gen.generate.return_value = "Generated answer"
    return gen


@pytest.fixture
def pipeline(semantic_cache, session_store, classification_oracle, generator):
    """Components needed to build session managers."""
    from api.composer.synthesizer import ResponseSynthesizer
    from api.orchestrators.capability_router import CapabilityRouter
    from api.orchestrators.intent_classifier import IntentClassifier

    return {
        "store": session_store,
        "cache": semantic_cache,
        "classifier": IntentClassifier(classification_oracle),
        "router": CapabilityRouter(),
        "synthesizer": ResponseSynthesizer(generator),
    }
