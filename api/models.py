"""Pydantic models for the Tracewise HTTP API.

Request and response bodies for the chat, history, stats, and health
endpoints.
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from api.schemas.session_state import Message, SessionMetadata


class ChatRequest(BaseModel):
    """Request model for a chat message."""

    message: str = Field(..., description="User question", examples=["Show me error logs from the last hour"])
    session_id: Optional[str] = Field(None, max_length=128, description="Existing session identifier")

    @field_validator("message")
    @classmethod
    def message_must_not_be_empty(cls, v: str) -> str:
        """Validate that the message is not empty."""
        if not v.strip():
            raise ValueError("Message is required")
        return v


class SessionRequest(BaseModel):
    """Body for endpoints that act on an existing session."""

    session_id: str = Field(..., min_length=1, max_length=128, description="Session identifier")


class ChatStats(BaseModel):
    cache_hits: int
    total_queries: int


class ChatResponse(BaseModel):
    """Answer to a chat message."""

    response: str = Field(description="Answer text")
    session_id: str = Field(description="Session the answer belongs to")
    timestamp: int = Field(description="Epoch milliseconds")
    stats: ChatStats


class HistoryResponse(BaseModel):
    history: List[Message]


class MemoryStats(BaseModel):
    """Semantic cache counters for this process plus the shared entry count."""

    entry_count: int
    searches: int
    hits: int
    misses: int
    stores: int
    store_failures: int
    hit_rate: float


class StatsResponse(BaseModel):
    stats: SessionMetadata
    memory: Optional[MemoryStats] = Field(None, description="Null when the semantic cache is disabled")


class ClearResponse(BaseModel):
    success: bool


class ConnectResponse(BaseModel):
    endpoints: Dict[str, str]


class WelcomeResponse(BaseModel):
    message: str
    timestamp: int


class HealthResponse(BaseModel):
    """Response model for health check endpoints.

    Attributes:
        status: Health status
        timestamp: Epoch milliseconds
        version: Service version
        storage: Whether Redis answered a ping
    """

    status: Literal["healthy", "degraded"] = Field(description="Health status", examples=["healthy"])
    timestamp: int
    version: str
    storage: bool = False
