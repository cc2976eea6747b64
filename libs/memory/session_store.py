"""
Keyed durable storage for session state.

Values are JSON documents stored under ``session:{key}:state`` in Redis.
Writes are full overwrites; there are no partial updates.
"""

import json
from typing import Any, Dict, Optional

import structlog

logger = structlog.get_logger(__name__)


class SessionStore:
    """
    Get/put store for per-session state documents.

    Usage:
        store = SessionStore(redis_client)
        await store.put(session_id, state.model_dump(mode="json"))
        data = await store.get(session_id)
    """

    def __init__(self, redis_client, ttl_seconds: Optional[int] = None):
        """
        Initialize session store.

        Args:
            redis_client: Async Redis client
            ttl_seconds: Optional expiry refreshed on every write (None keeps state forever)
        """
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def _key(key: str) -> str:
        return f"session:{key}:state"

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the stored document for ``key`` or None."""
        raw = await self.redis.get(self._key(key))
        if raw is None:
            return None
        return json.loads(raw)

    async def put(self, key: str, value: Dict[str, Any]) -> None:
        """Overwrite the document for ``key``."""
        payload = json.dumps(value)
        if self.ttl_seconds:
            await self.redis.setex(self._key(key), self.ttl_seconds, payload)
        else:
            await self.redis.set(self._key(key), payload)

        logger.debug("Session state saved", session_id=key, size=len(payload))
