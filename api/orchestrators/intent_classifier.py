"""Intent classification for incoming queries.

The classification model is offered the capability tools and may call one of
them. A call to a known tool becomes a routed intent; anything else becomes a
``general`` intent. Classification never raises: a failing model degrades to
``general`` with low confidence so the query can still be answered directly.
"""

from __future__ import annotations

import structlog
from langchain_core.messages import HumanMessage, SystemMessage

from api.schemas.routing import Intent
from api.tools.definitions import CAPABILITY_TOOLS, CLASSIFIER_SYSTEM_PROMPT, resolve_tool

logger = structlog.get_logger(__name__)

SELECTED_CONFIDENCE = 0.9
NO_SELECTION_CONFIDENCE = 0.5
FAILURE_CONFIDENCE = 0.3


class IntentClassifier:
    """Maps a query to an ``Intent`` using a tool-calling model."""

    def __init__(self, oracle, tools=CAPABILITY_TOOLS):
        """
        Args:
            oracle: Object with ``async classify(messages, tools) -> ToolSelection | None``
            tools: Capability descriptors offered to the model
        """
        self.oracle = oracle
        self.tools = tuple(tools)
        self._tool_schemas = [tool.to_openai_tool() for tool in self.tools]

    async def classify(self, query: str) -> Intent:
        logger.debug("Classifying intent", query_preview=query[:50])

        messages = [
            SystemMessage(content=CLASSIFIER_SYSTEM_PROMPT),
            HumanMessage(content=query),
        ]

        try:
            selection = await self.oracle.classify(messages, self._tool_schemas)
        except Exception as e:
            logger.warning("Intent classification failed, using general intent", error=str(e))
            return Intent.general(FAILURE_CONFIDENCE)

        route = resolve_tool(selection.name) if selection is not None else None
        if route is None:
            logger.info(
                "No capability selected, using general intent",
                tool=getattr(selection, "name", None),
            )
            return Intent.general(NO_SELECTION_CONFIDENCE)

        intent_type, capability = route
        intent = Intent(
            type=intent_type,
            confidence=SELECTED_CONFIDENCE,
            target_capability=capability,
            parameters=dict(selection.arguments or {}),
        )
        logger.info(
            "Intent classified",
            tool=selection.name,
            intent=intent.type.value,
            capability=capability.value,
        )
        return intent
