"""
Prompt assembly and fallback texts for answer synthesis.

Message order for a synthesized answer:
1. agent system prompt
2. previous conversation context (optional)
3. capability response as indented JSON (optional)
4. the user query
"""

import json
from typing import Any, List, Optional

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from api.tools.definitions import SYSTEM_PROMPT

SYNTHESIS_MAX_TOKENS = 1024
SYNTHESIS_TEMPERATURE = 0.7
DIRECT_MAX_TOKENS = 512
DIRECT_TEMPERATURE = 0.8

RAW_DATA_APOLOGY = (
    "I found some information related to your query, but I'm having trouble formatting it. "
    "Here's the raw data:"
)
SYNTHESIS_FAILURE_MESSAGE = (
    "I apologize, but I encountered an error processing your request. "
    "Please try again or rephrase your question."
)
DIRECT_EMPTY_MESSAGE = (
    "I understand your question, but I need more specific information to help. "
    "Could you provide more details?"
)
DIRECT_FAILURE_MESSAGE = (
    "I apologize, but I encountered an error processing your request. "
    "Please try rephrasing your question."
)


def format_data(data: Any) -> str:
    """Indented JSON for capability payloads; non-JSON values fall back to ``str``."""
    return json.dumps(data, indent=2, default=str)


def build_synthesis_messages(query: str, data: Any = None, context: Optional[str] = None) -> List[BaseMessage]:
    messages: List[BaseMessage] = [SystemMessage(content=SYSTEM_PROMPT)]

    if context:
        messages.append(SystemMessage(content=f"Previous context: {context}"))

    if data is not None:
        messages.append(SystemMessage(content=f"Capability response:\n{format_data(data)}"))

    messages.append(HumanMessage(content=query))
    return messages


def build_direct_messages(query: str) -> List[BaseMessage]:
    return [SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=query)]


def raw_data_fallback(data: Any) -> str:
    return f"{RAW_DATA_APOLOGY}\n\n{format_data(data)}"
