"""
Chat model oracles built on LangChain's OpenAI integration.

Two roles share one provider:
- ``ToolCallingClassifier`` offers capability tools to a small model and
  reports which one it picked
- ``ChatGenerator`` produces free text for answer synthesis
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import structlog
from langchain_core.messages import BaseMessage
from langchain_openai import ChatOpenAI

from libs.common.settings import Settings, get_settings

logger = structlog.get_logger(__name__)


@dataclass
class ToolSelection:
    """The tool a classification model chose, with its arguments."""

    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)


class MalformedModelResponse(ValueError):
    """The model answered, but not in a shape we can use."""


class ToolCallingClassifier:
    """Classification oracle: picks at most one capability tool for a conversation."""

    def __init__(self, settings: Optional[Settings] = None, llm: Optional[Any] = None):
        self.settings = settings or get_settings()
        self._llm = llm

    def _get_llm(self):
        if self._llm is None:
            self._llm = ChatOpenAI(
                model=self.settings.classifier_model,
                temperature=0.0,
                max_tokens=256,
                timeout=self.settings.llm_timeout_seconds,
                api_key=self.settings.openai_api_key,
            )
        return self._llm

    async def classify(
        self,
        messages: Sequence[BaseMessage],
        tools: Sequence[Dict[str, Any]],
    ) -> Optional[ToolSelection]:
        """
        Ask the model to select a tool.

        Returns:
            The first tool call, or None if the model did not call a tool

        Raises:
            MalformedModelResponse: if the tool call cannot be interpreted
        """
        llm = self._get_llm().bind_tools(list(tools))
        response = await llm.ainvoke(list(messages))

        tool_calls = getattr(response, "tool_calls", None) or []
        if not tool_calls:
            return None

        first = tool_calls[0]
        name = first.get("name") if isinstance(first, dict) else getattr(first, "name", None)
        args = first.get("args") if isinstance(first, dict) else getattr(first, "args", None)

        if not isinstance(name, str) or not name:
            raise MalformedModelResponse("Tool call without a name")
        if args is None:
            args = {}
        if not isinstance(args, dict):
            raise MalformedModelResponse(f"Tool call arguments are {type(args).__name__}, expected object")

        return ToolSelection(name=name, arguments=args)


class ChatGenerator:
    """Generation oracle: free-text completion for a message list."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    async def generate(
        self,
        messages: List[BaseMessage],
        max_tokens: int,
        temperature: float,
    ) -> Any:
        """Return the model's message content (normally a string)."""
        llm = ChatOpenAI(
            model=self.settings.synthesis_model,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=self.settings.llm_timeout_seconds,
            api_key=self.settings.openai_api_key,
        )
        response = await llm.ainvoke(messages)
        return response.content
