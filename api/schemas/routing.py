"""Intent and routing schemas for the Tracewise agent.

``Intent`` is the classifier's decision for one query and ``RoutedResult`` is
what the capability router hands to the synthesizer. Both are transient and
never persisted.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class Capability(str, Enum):
    """Backend capabilities the router can call."""

    OBSERVABILITY = "observability"
    DOCUMENTATION = "documentation"
    BINDINGS = "bindings"


class IntentType(str, Enum):
    """Classified purpose of a query."""

    ERROR_LOGS = "error_logs"
    PERFORMANCE = "performance"
    HOW_TO = "how_to"
    API_REFERENCE = "api_reference"
    LIST_RESOURCES = "list_resources"
    INSPECT_CONFIG = "inspect_config"
    GENERAL = "general"


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


class Intent(BaseModel):
    """Intent classification result."""

    type: IntentType = Field(description="Classified intent type")
    confidence: float = Field(ge=0.0, le=1.0, description="Classifier confidence")
    target_capability: Optional[Capability] = Field(
        default=None, description="Capability to call, or None for a direct answer"
    )
    parameters: Dict[str, Any] = Field(default_factory=dict, description="Arguments for the capability call")

    @classmethod
    def general(cls, confidence: float) -> "Intent":
        """Intent for queries that need no capability."""
        return cls(type=IntentType.GENERAL, confidence=confidence)


class RoutedResult(BaseModel):
    """Data returned by a capability (or the structured error standing in for it)."""

    source_tag: str = Field(description="Capability that produced the data")
    data: Optional[Any] = Field(default=None, description="Capability payload")
    timestamp: int = Field(default_factory=now_ms, description="Epoch milliseconds")
    served_from_cache: bool = Field(default=False)

    @property
    def is_error(self) -> bool:
        """True when ``data`` is a degraded error payload rather than capability data."""
        return isinstance(self.data, dict) and self.data.get("error") is True
