"""
Redis-backed vector index for the semantic cache.

Each entry lives in a hash ``vector:{namespace}:{id}`` holding the JSON
encoded vector and metadata; the set ``vector_index:{namespace}`` tracks
entry ids. Queries are a brute-force cosine scan with numpy, which is
adequate for the size of a per-deployment Q&A memory.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import structlog

logger = structlog.get_logger(__name__)


@dataclass
class VectorMatch:
    """A nearest-neighbour hit."""

    id: str
    score: float
    metadata: Dict[str, Any] = field(default_factory=dict)


def cosine_similarity(vec1: np.ndarray, vec2: np.ndarray) -> float:
    """
    Cosine similarity clipped to [0, 1].

    Opposite or orthogonal vectors both score 0; rounding noise on identical
    vectors never pushes the score above 1.
    """
    norm_product = np.linalg.norm(vec1) * np.linalg.norm(vec2)
    if norm_product == 0:
        return 0.0
    score = float(np.dot(vec1, vec2) / norm_product)
    return min(max(score, 0.0), 1.0)


class RedisVectorIndex:
    """
    Vector index over an async Redis client.

    Usage:
        index = RedisVectorIndex(redis_client, namespace="semantic_memory")
        await index.insert("abc-1", [0.1, 0.2], {"question": "..."})
        matches = await index.query([0.1, 0.2], top_k=3)
    """

    def __init__(self, redis_client, namespace: str = "semantic_memory"):
        self.redis = redis_client
        self.namespace = namespace

    @property
    def index_key(self) -> str:
        return f"vector_index:{self.namespace}"

    def _entry_key(self, entry_id: str) -> str:
        return f"vector:{self.namespace}:{entry_id}"

    async def insert(
        self,
        entry_id: str,
        vector: Sequence[float],
        metadata: Dict[str, Any],
        ttl_seconds: Optional[int] = None,
    ) -> None:
        """
        Insert (or overwrite) one entry.

        Args:
            entry_id: Entry identifier, unique within the namespace
            vector: Embedding values
            metadata: JSON-serializable metadata stored alongside the vector
            ttl_seconds: Optional expiry for the entry
        """
        key = self._entry_key(entry_id)
        await self.redis.hset(
            key,
            mapping={
                "vector": json.dumps([float(v) for v in vector]),
                "metadata": json.dumps(metadata),
            },
        )
        if ttl_seconds:
            await self.redis.expire(key, ttl_seconds)
        await self.redis.sadd(self.index_key, entry_id)

    async def query(self, vector: Sequence[float], top_k: int = 3) -> List[VectorMatch]:
        """
        Return the ``top_k`` entries most similar to ``vector``, best first.

        Entries whose hash has expired or cannot be decoded are dropped from
        the id set as they are encountered.
        """
        entry_ids = await self.redis.smembers(self.index_key)
        if not entry_ids:
            return []

        query_vector = np.asarray(vector, dtype=float)
        matches: List[VectorMatch] = []
        stale: List[str] = []

        for entry_id in entry_ids:
            entry = await self.redis.hgetall(self._entry_key(entry_id))
            if not entry or "vector" not in entry:
                stale.append(entry_id)
                continue

            try:
                stored_vector = np.asarray(json.loads(entry["vector"]), dtype=float)
                metadata = json.loads(entry.get("metadata") or "{}")
                if stored_vector.ndim != 1 or not isinstance(metadata, dict):
                    raise ValueError("unexpected vector or metadata shape")
            except (ValueError, TypeError) as e:
                logger.warning("Dropping undecodable vector entry", entry_id=entry_id, error=str(e))
                stale.append(entry_id)
                continue

            if stored_vector.shape != query_vector.shape:
                logger.warning(
                    "Skipping vector with mismatched dimension",
                    entry_id=entry_id,
                    expected=query_vector.shape[0],
                    actual=stored_vector.shape[0],
                )
                continue

            matches.append(
                VectorMatch(
                    id=entry_id,
                    score=cosine_similarity(query_vector, stored_vector),
                    metadata=metadata,
                )
            )

        if stale:
            await self.redis.srem(self.index_key, *stale)
            logger.debug("Pruned stale vector entries", count=len(stale), namespace=self.namespace)

        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:top_k]

    async def count(self) -> int:
        """Number of ids currently tracked in the namespace."""
        return await self.redis.scard(self.index_key)
