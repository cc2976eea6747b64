from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends, Query

from api.examples import WELCOME_MESSAGE
from api.models import (
    ChatRequest,
    ChatResponse,
    ChatStats,
    ClearResponse,
    ConnectResponse,
    HistoryResponse,
    SessionRequest,
    StatsResponse,
    WelcomeResponse,
)
from api.orchestrators.session_manager import SessionRegistry, get_session_registry
from api.schemas.routing import now_ms

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/welcome", response_model=WelcomeResponse, tags=["Chat"])
async def welcome() -> WelcomeResponse:
    """Welcome message with example questions."""
    return WelcomeResponse(message=WELCOME_MESSAGE, timestamp=now_ms())


@router.post("/chat", response_model=ChatResponse, tags=["Chat"])
async def chat(
    chat_request: ChatRequest,
    registry: SessionRegistry = Depends(get_session_registry),
) -> ChatResponse:
    """Answer a troubleshooting question.

    A request without ``session_id`` starts a new session; the id is returned
    so follow-up questions can reuse it.

    Example:
        ```bash
        curl -X POST http://localhost:8000/api/chat \\
          -H "Content-Type: application/json" \\
          -d '{"message": "Show me error logs from the last hour"}'
        ```
    """
    session_id = chat_request.session_id or uuid.uuid4().hex

    logger.info(
        "Chat request",
        session_id=session_id,
        new_session=chat_request.session_id is None,
        query_preview=chat_request.message[:50],
    )

    answer = await registry.handle_query(session_id, chat_request.message)
    stats = await registry.get_stats(session_id)

    return ChatResponse(
        response=answer,
        session_id=session_id,
        timestamp=now_ms(),
        stats=ChatStats(cache_hits=stats.cache_hits, total_queries=stats.total_queries),
    )


@router.get("/history", response_model=HistoryResponse, tags=["Chat"])
async def history(
    session_id: str = Query(..., min_length=1),
    registry: SessionRegistry = Depends(get_session_registry),
) -> HistoryResponse:
    """Most recent messages of a session."""
    return HistoryResponse(history=await registry.get_history(session_id))


@router.post("/clear", response_model=ClearResponse, tags=["Chat"])
async def clear(
    session_request: SessionRequest,
    registry: SessionRegistry = Depends(get_session_registry),
) -> ClearResponse:
    await registry.clear_history(session_request.session_id)
    return ClearResponse(success=True)


@router.get("/stats", response_model=StatsResponse, tags=["Chat"])
async def stats(
    session_id: str = Query(..., min_length=1),
    registry: SessionRegistry = Depends(get_session_registry),
) -> StatsResponse:
    """Counters of a session, plus semantic memory statistics."""
    return StatsResponse(
        stats=await registry.get_stats(session_id),
        memory=await registry.memory_stats(),
    )


@router.post("/connect", response_model=ConnectResponse, tags=["Chat"])
async def connect(
    session_request: SessionRequest,
    registry: SessionRegistry = Depends(get_session_registry),
) -> ConnectResponse:
    """Mark all capabilities as connected for a session and list their endpoints."""
    endpoints = await registry.connect_capabilities(session_request.session_id)
    return ConnectResponse(endpoints=endpoints)
