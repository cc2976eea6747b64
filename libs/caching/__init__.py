"""
Caching utilities for Tracewise.

This module provides:
- Redis client management
- Redis-backed vector index
- Semantic cache of answered questions
"""

from libs.caching.redis_client import get_redis_client
from libs.caching.semantic_cache import CacheMatch, CacheStats, SemanticCache
from libs.caching.vector_index import RedisVectorIndex, VectorMatch

__all__ = [
    "get_redis_client",
    "CacheMatch",
    "CacheStats",
    "SemanticCache",
    "RedisVectorIndex",
    "VectorMatch",
]
