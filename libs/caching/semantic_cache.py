"""
Semantic cache of answered questions.

Questions are embedded and stored in a vector index together with the answer
that was returned for them. A later question whose embedding is close enough
(cosine similarity at or above the threshold) is answered from memory instead
of going through classification, routing, and synthesis again.

Caching is best-effort: embedding and index failures never propagate to the
caller. ``search`` degrades to a miss and ``store`` degrades to a no-op.
"""

import hashlib
import time
from dataclasses import dataclass
from typing import Any, List, Optional

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.85
DEFAULT_TOP_K = 3
DEFAULT_MAX_INPUT_CHARS = 1000


@dataclass
class CacheStats:
    """Cache statistics for monitoring."""

    searches: int = 0
    hits: int = 0
    misses: int = 0
    stores: int = 0
    store_failures: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate overall cache hit rate."""
        if self.searches == 0:
            return 0.0
        return self.hits / self.searches


@dataclass
class CacheMatch:
    """A cached answer accepted by ``SemanticCache.search``."""

    score: float
    question: str
    answer: str
    source_tag: str
    timestamp: int


def normalize_question(question: str) -> str:
    """Lowercase, trim, and collapse internal whitespace."""
    return " ".join(question.lower().strip().split())


class SemanticCache:
    """
    Embedding-keyed cache of question/answer pairs.

    Usage:
        cache = SemanticCache(embedding_client, RedisVectorIndex(redis_client))

        match = await cache.search(query)
        if match:
            return match.answer

        answer = await answer_query(query)
        await cache.store(query, answer, source_tag="observability")
    """

    def __init__(
        self,
        embedding_client,
        vector_index,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        top_k: int = DEFAULT_TOP_K,
        max_input_chars: int = DEFAULT_MAX_INPUT_CHARS,
        entry_ttl_seconds: Optional[int] = None,
    ):
        """
        Initialize semantic cache.

        Args:
            embedding_client: Object with ``async embed(text, max_len)``
            vector_index: Object with ``insert``, ``query`` and ``count``
            similarity_threshold: Minimum score for a match to be served (0-1)
            top_k: Neighbours requested from the index per search
            max_input_chars: Text is truncated to this length before embedding
            entry_ttl_seconds: Optional expiry for stored entries (None keeps them forever)
        """
        self.embedding_client = embedding_client
        self.vector_index = vector_index
        self.similarity_threshold = similarity_threshold
        self.top_k = top_k
        self.max_input_chars = max_input_chars
        self.entry_ttl_seconds = entry_ttl_seconds
        self._stats = CacheStats()

    async def search(self, query: str, threshold: Optional[float] = None) -> Optional[CacheMatch]:
        """
        Find a previously answered question similar to ``query``.

        Args:
            query: User question
            threshold: Override for the configured similarity threshold

        Returns:
            The best match if its score reaches the threshold, otherwise None
        """
        if threshold is None:
            threshold = self.similarity_threshold

        self._stats.searches += 1
        logger.debug("Searching semantic memory", query_preview=query[:50])

        embedding = await self._generate_embedding(query)
        if embedding is None:
            logger.warning("No embedding for query, treating as cache miss", query_preview=query[:50])
            self._stats.misses += 1
            return None

        try:
            matches = await self.vector_index.query(embedding, top_k=self.top_k)
        except Exception as e:
            logger.error("Vector index query failed", error=str(e))
            self._stats.misses += 1
            return None

        logger.debug("Potential matches found", count=len(matches))

        if matches and matches[0].score >= threshold:
            best = matches[0]
            metadata = best.metadata or {}
            self._stats.hits += 1
            logger.info(
                "Cache hit: semantic similarity",
                similarity=round(best.score, 4),
                query_preview=query[:50],
                original_query=str(metadata.get("question", ""))[:50],
            )
            return CacheMatch(
                score=best.score,
                question=metadata.get("question", ""),
                answer=metadata.get("answer", ""),
                source_tag=metadata.get("source_tag", "none"),
                timestamp=int(metadata.get("timestamp", 0)),
            )

        self._stats.misses += 1
        logger.info(
            "Cache miss",
            query_preview=query[:50],
            best_score=round(matches[0].score, 4) if matches else None,
        )
        return None

    async def store(self, question: str, answer: str, source_tag: str) -> None:
        """
        Remember ``answer`` as the reply to ``question``.

        Never raises; a failed store is logged and counted.

        Args:
            question: User question
            answer: Answer that was returned to the user
            source_tag: Capability that produced the data, or "none"
        """
        try:
            embedding = await self._generate_embedding(question)
            if embedding is None:
                logger.warning("No embedding for question, skipping store", query_preview=question[:50])
                self._stats.store_failures += 1
                return

            entry_id = self._generate_id(question)
            await self.vector_index.insert(
                entry_id,
                embedding,
                {
                    "question": question,
                    "answer": answer,
                    "source_tag": source_tag,
                    "timestamp": int(time.time() * 1000),
                },
                ttl_seconds=self.entry_ttl_seconds,
            )
            self._stats.stores += 1
            logger.info(
                "Answer stored in semantic memory",
                entry_id=entry_id,
                source_tag=source_tag,
                query_preview=question[:50],
            )
        except Exception as e:
            self._stats.store_failures += 1
            logger.error("Failed to store answer in semantic memory", error=str(e))

    async def entry_count(self) -> int:
        """Number of entries currently held by the index (0 if it is unreachable)."""
        try:
            return await self.vector_index.count()
        except Exception as e:
            logger.warning("Could not count semantic memory entries", error=str(e))
            return 0

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        return self._stats

    async def _generate_embedding(self, text: str) -> Optional[List[float]]:
        truncated = text[: self.max_input_chars]
        try:
            embedding = await self.embedding_client.embed(truncated, max_len=self.max_input_chars)
        except Exception as e:
            logger.error("Embedding generation failed", error=str(e))
            return None

        if not _is_vector(embedding):
            if embedding is not None:
                logger.warning("Unexpected embedding format", value_type=type(embedding).__name__)
            return None
        return [float(v) for v in embedding]

    def _generate_id(self, question: str) -> str:
        """
        Entry id from the normalized question plus the current time.

        Repeats of the same question produce distinct ids, so every answered
        query adds a new entry.
        """
        digest = hashlib.md5(normalize_question(question).encode("utf-8")).hexdigest()[:16]
        return f"{digest}-{time.time_ns()}"


def _is_vector(value: Any) -> bool:
    if not isinstance(value, (list, tuple)) or not value:
        return False
    return all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in value)
