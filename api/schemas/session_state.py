"""Session state schema for the Tracewise agent.

One ``SessionState`` exists per session id. It is owned by a single
``SessionConversationManager``, mutated in place on every query, and written
back to the session store as a whole document after each mutation.
"""

from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field

from api.schemas.routing import Capability, now_ms

MAX_HISTORY_MESSAGES = 20
CONTEXT_MESSAGES = 4
CONTEXT_MESSAGE_CHARS = 200


class Message(BaseModel):
    """One conversation turn. Frozen once created."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str
    timestamp: int = Field(default_factory=now_ms)


def _capability_counts() -> Dict[str, int]:
    return {capability.value: 0 for capability in Capability}


def _capability_flags() -> Dict[str, bool]:
    return {capability.value: False for capability in Capability}


class SessionMetadata(BaseModel):
    """Per-session counters."""

    total_queries: int = 0
    cache_hits: int = 0
    capability_calls: Dict[str, int] = Field(default_factory=_capability_counts)


class SessionState(BaseModel):
    """Durable conversation state for one session."""

    session_id: str
    conversation_history: List[Message] = Field(default_factory=list)
    connections: Dict[str, bool] = Field(default_factory=_capability_flags)
    last_activity: int = Field(default_factory=now_ms)
    metadata: SessionMetadata = Field(default_factory=SessionMetadata)

    def touch(self) -> None:
        self.last_activity = now_ms()

    def add_message(
        self,
        role: Literal["user", "assistant"],
        content: str,
        max_messages: int = MAX_HISTORY_MESSAGES,
    ) -> Message:
        """Append a message, dropping the oldest ones beyond ``max_messages``."""
        message = Message(role=role, content=content)
        self.conversation_history.append(message)
        if len(self.conversation_history) > max_messages:
            self.conversation_history = self.conversation_history[-max_messages:]
        return message

    def recent_messages(self, n: int) -> List[Message]:
        if n <= 0:
            return []
        return list(self.conversation_history[-n:])

    def conversation_context(
        self,
        n: int = CONTEXT_MESSAGES,
        max_chars: int = CONTEXT_MESSAGE_CHARS,
    ) -> str:
        """
        Render the last ``n`` messages as ``role: content`` lines for the LLM.

        Each message content is cut to ``max_chars`` characters. Returns an
        empty string when there is no history.
        """
        return "\n".join(f"{m.role}: {m.content[:max_chars]}" for m in self.recent_messages(n))

    def record_capability_call(self, source_tag: str) -> None:
        calls = self.metadata.capability_calls
        calls[source_tag] = calls.get(source_tag, 0) + 1
