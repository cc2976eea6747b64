"""Per-session query orchestration for the Tracewise agent.

A ``SessionConversationManager`` owns the state of one session and runs each
query through the pipeline:

    semantic cache -> intent classifier -> capability router -> synthesizer

then stores the answer in the cache, appends the exchange to the bounded
history, and persists the state. A manager assumes it is the only writer for
its session and does no locking of its own; ``SessionRegistry`` provides that
guarantee by serializing calls per session id.
"""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional

import structlog

from api.schemas.routing import Capability
from api.schemas.session_state import Message, SessionMetadata, SessionState
from libs.common.settings import Settings, get_settings

logger = structlog.get_logger(__name__)

NO_SOURCE_TAG = "none"

ERROR_RESPONSE = (
    "I apologize, but I encountered an error processing your request.\n\n"
    "Please try:\n"
    "- Rephrasing your question\n"
    "- Asking a more specific question\n"
    "- Checking if your account has the necessary permissions"
)


def format_cached_answer(source_tag: str, answer: str, score: float) -> str:
    """Annotate an answer served from semantic memory."""
    return (
        f"[Cached Answer - {source_tag}]\n\n{answer}\n\n"
        f"_This answer was retrieved from memory (similarity: {score * 100:.1f}%)_"
    )


class SessionConversationManager:
    """
    Conversation state and query pipeline for one session.

    Usage:
        manager = await SessionConversationManager.load(
            session_id, store, cache, classifier, router, synthesizer
        )
        answer = await manager.handle_query("Show me error logs from the last hour")
    """

    def __init__(
        self,
        session_id: str,
        store,
        cache,
        classifier,
        router,
        synthesizer,
        settings: Optional[Settings] = None,
        state: Optional[SessionState] = None,
    ):
        """
        Args:
            session_id: Session identifier
            store: Session store with ``get``/``put`` (None disables persistence)
            cache: ``SemanticCache`` (None disables caching)
            classifier: ``IntentClassifier``
            router: ``CapabilityRouter``
            synthesizer: ``ResponseSynthesizer``
            settings: Application settings
            state: Existing state; defaults to a fresh session
        """
        self.session_id = session_id
        self.store = store
        self.cache = cache
        self.classifier = classifier
        self.router = router
        self.synthesizer = synthesizer
        self.settings = settings or get_settings()
        self.state = state or SessionState(session_id=session_id)

    @classmethod
    async def load(cls, session_id: str, store, cache, classifier, router, synthesizer,
                   settings: Optional[Settings] = None) -> "SessionConversationManager":
        """Create a manager, restoring stored state when there is any."""
        state = None
        if store is not None:
            try:
                stored = await store.get(session_id)
                if stored:
                    state = SessionState.model_validate(stored)
                    logger.info("Loaded session state", session_id=session_id)
            except Exception as e:
                logger.error("Error loading session state", session_id=session_id, error=str(e))

        return cls(session_id, store, cache, classifier, router, synthesizer, settings=settings, state=state)

    async def handle_query(self, query: str) -> str:
        """
        Answer ``query`` for this session.

        Always returns text; unexpected failures become a fixed apology.
        """
        logger.info("Processing query", session_id=self.session_id, query_preview=query[:50])

        try:
            self.state.touch()
            self.state.metadata.total_queries += 1

            match = await self._search_cache(query)
            if match is not None:
                self.state.metadata.cache_hits += 1
                await self._save_state()
                logger.info("Returning cached answer", session_id=self.session_id, source=match.source_tag)
                return format_cached_answer(match.source_tag, match.answer, match.score)

            intent = await self.classifier.classify(query)
            logger.info(
                "Intent resolved",
                intent=intent.type.value,
                capability=intent.target_capability.value if intent.target_capability else None,
            )

            source_tag = NO_SOURCE_TAG
            if intent.target_capability is not None:
                routed = await self.router.route(intent, query)
                if routed.is_error:
                    logger.warning(
                        "Capability returned an error payload",
                        session_id=self.session_id,
                        capability=routed.source_tag,
                    )
                self.state.record_capability_call(routed.source_tag)
                source_tag = routed.source_tag
                response = await self.synthesizer.synthesize(
                    query,
                    routed.data,
                    self.get_conversation_context(),
                )
            else:
                response = await self.synthesizer.generate_direct(query)

            if self.cache is not None:
                await self.cache.store(query, response, source_tag)

            self._add_to_history("user", query)
            self._add_to_history("assistant", response)
            await self._save_state()

            return response

        except Exception as e:
            logger.error(
                "Query processing error",
                session_id=self.session_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return ERROR_RESPONSE

    async def get_history(self) -> List[Message]:
        """Most recent messages, limited to the history page size."""
        return self.state.recent_messages(self.settings.history_page_size)

    async def clear_history(self) -> None:
        self.state.conversation_history = []
        await self._save_state()
        logger.info("History cleared", session_id=self.session_id)

    async def get_stats(self) -> SessionMetadata:
        return self.state.metadata.model_copy(deep=True)

    async def connect_capabilities(self) -> Dict[str, str]:
        """Mark every capability as connected and return their endpoints."""
        logger.info("Connecting capabilities", session_id=self.session_id)

        self.state.connections = {capability.value: True for capability in Capability}
        await self._save_state()

        return {capability.value: self.router.get_endpoint(capability) for capability in Capability}

    def get_conversation_context(self) -> str:
        return self.state.conversation_context(
            self.settings.context_messages,
            self.settings.context_message_chars,
        )

    def _add_to_history(self, role: str, content: str) -> None:
        self.state.add_message(role, content, max_messages=self.settings.history_max_messages)

    async def _search_cache(self, query: str):
        if self.cache is None:
            return None
        return await self.cache.search(query)

    async def _save_state(self) -> None:
        if self.store is None:
            return
        try:
            await self.store.put(self.session_id, self.state.model_dump(mode="json"))
        except Exception as e:
            logger.error("Error saving session state", session_id=self.session_id, error=str(e))


@dataclass
class _SessionLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class SessionRegistry:
    """
    Addresses session managers by session id.

    With a session store, each call reloads the session from the store while
    holding that session's lock, so nothing per session outlives the call and
    registries in other processes sharing the store see each other's writes.
    Without a store, managers are kept in memory; the least recently used ones
    are evicted beyond ``settings.session_memory_limit``.

    Calls for the same session id run one at a time. A session's lock is
    dropped as soon as no call holds or waits on it.
    """

    def __init__(self, store, cache, classifier, router, synthesizer, settings: Optional[Settings] = None):
        self.store = store
        self.cache = cache
        self.classifier = classifier
        self.router = router
        self.synthesizer = synthesizer
        self.settings = settings or get_settings()
        self._managers: "OrderedDict[str, SessionConversationManager]" = OrderedDict()
        self._locks: Dict[str, _SessionLock] = {}

    @asynccontextmanager
    async def _session(self, session_id: str) -> AsyncIterator[SessionConversationManager]:
        entry = self._locks.get(session_id)
        if entry is None:
            entry = self._locks[session_id] = _SessionLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield await self._manager(session_id)
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[session_id]

    async def _manager(self, session_id: str) -> SessionConversationManager:
        if self.store is not None:
            return await SessionConversationManager.load(
                session_id,
                self.store,
                self.cache,
                self.classifier,
                self.router,
                self.synthesizer,
                settings=self.settings,
            )

        manager = self._managers.get(session_id)
        if manager is not None:
            self._managers.move_to_end(session_id)
            return manager

        manager = SessionConversationManager(
            session_id,
            None,
            self.cache,
            self.classifier,
            self.router,
            self.synthesizer,
            settings=self.settings,
        )
        self._managers[session_id] = manager
        while len(self._managers) > self.settings.session_memory_limit:
            evicted, _ = self._managers.popitem(last=False)
            logger.info("Evicted in-memory session", session_id=evicted)
        return manager

    async def handle_query(self, session_id: str, query: str) -> str:
        async with self._session(session_id) as manager:
            return await manager.handle_query(query)

    async def get_history(self, session_id: str) -> List[Message]:
        async with self._session(session_id) as manager:
            return await manager.get_history()

    async def clear_history(self, session_id: str) -> None:
        async with self._session(session_id) as manager:
            await manager.clear_history()

    async def get_stats(self, session_id: str) -> SessionMetadata:
        async with self._session(session_id) as manager:
            return await manager.get_stats()

    async def connect_capabilities(self, session_id: str) -> Dict[str, str]:
        async with self._session(session_id) as manager:
            return await manager.connect_capabilities()

    async def memory_stats(self) -> Optional[Dict[str, Any]]:
        """Semantic cache counters for this process and the shared entry count; None without a cache."""
        if self.cache is None:
            return None

        stats = self.cache.get_stats()
        return {
            "entry_count": await self.cache.entry_count(),
            **asdict(stats),
            "hit_rate": stats.hit_rate,
        }


_registry: Optional[SessionRegistry] = None


async def build_session_registry(settings: Optional[Settings] = None) -> SessionRegistry:
    """Wire the production components from settings."""
    from api.composer.synthesizer import ResponseSynthesizer
    from api.llm import ChatGenerator, EmbeddingClient, ToolCallingClassifier
    from api.orchestrators.capability_router import CapabilityRouter
    from api.orchestrators.intent_classifier import IntentClassifier
    from libs.caching import RedisVectorIndex, SemanticCache, get_redis_client
    from libs.memory import SessionStore

    settings = settings or get_settings()
    redis_client = await get_redis_client()

    cache = None
    store = None
    if redis_client is not None:
        cache = SemanticCache(
            EmbeddingClient(settings),
            RedisVectorIndex(redis_client, namespace=settings.cache_namespace),
            similarity_threshold=settings.cache_similarity_threshold,
            top_k=settings.cache_top_k,
            max_input_chars=settings.embedding_max_chars,
            entry_ttl_seconds=settings.cache_entry_ttl_seconds,
        )
        store = SessionStore(redis_client, ttl_seconds=settings.session_ttl_seconds)
    else:
        logger.warning("Redis unavailable, semantic cache and session persistence disabled")

    return SessionRegistry(
        store=store,
        cache=cache,
        classifier=IntentClassifier(ToolCallingClassifier(settings)),
        router=CapabilityRouter(),
        synthesizer=ResponseSynthesizer(ChatGenerator(settings)),
        settings=settings,
    )


async def get_session_registry() -> SessionRegistry:
    """Get or create the global session registry."""
    global _registry

    if _registry is None:
        _registry = await build_session_registry()
        logger.info("Session registry initialized")

    return _registry
