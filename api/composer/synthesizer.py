"""Answer synthesis with the generation model.

Both entry points always return text. When the model fails or returns
nothing usable, a fixed fallback message is returned instead; for routed
queries the fallback still shows the capability data.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog

from api.composer.prompts import (
    DIRECT_EMPTY_MESSAGE,
    DIRECT_FAILURE_MESSAGE,
    DIRECT_MAX_TOKENS,
    DIRECT_TEMPERATURE,
    SYNTHESIS_FAILURE_MESSAGE,
    SYNTHESIS_MAX_TOKENS,
    SYNTHESIS_TEMPERATURE,
    build_direct_messages,
    build_synthesis_messages,
    raw_data_fallback,
)

logger = structlog.get_logger(__name__)


def _usable_text(output: Any) -> Optional[str]:
    if isinstance(output, str) and output.strip():
        return output
    return None


class ResponseSynthesizer:
    """Turns capability data and conversation context into an answer."""

    def __init__(self, generator):
        """
        Args:
            generator: Object with ``async generate(messages, max_tokens, temperature)``
        """
        self.generator = generator

    async def synthesize(self, query: str, routed_data: Any = None, context: Optional[str] = None) -> str:
        """
        Compose an answer grounded in ``routed_data``.

        Args:
            query: Original user query
            routed_data: Payload returned by the capability router (may be an error payload)
            context: Recent conversation rendered as text

        Returns:
            Generated answer, or a fallback message
        """
        messages = build_synthesis_messages(query, routed_data, context)

        try:
            output = await self.generator.generate(
                messages,
                max_tokens=SYNTHESIS_MAX_TOKENS,
                temperature=SYNTHESIS_TEMPERATURE,
            )
        except Exception as e:
            logger.error("Synthesis failed", error=str(e))
            return self._fallback(routed_data)

        text = _usable_text(output)
        if text is None:
            logger.warning("Unexpected synthesis output", output_type=type(output).__name__)
            return self._fallback(routed_data)

        logger.debug("Synthesis complete", answer_length=len(text))
        return text

    async def generate_direct(self, query: str) -> str:
        """Answer a general query without capability data."""
        try:
            output = await self.generator.generate(
                build_direct_messages(query),
                max_tokens=DIRECT_MAX_TOKENS,
                temperature=DIRECT_TEMPERATURE,
            )
        except Exception as e:
            logger.error("Direct response generation failed", error=str(e))
            return DIRECT_FAILURE_MESSAGE

        text = _usable_text(output)
        if text is None:
            logger.warning("Empty direct response", output_type=type(output).__name__)
            return DIRECT_EMPTY_MESSAGE
        return text

    @staticmethod
    def _fallback(routed_data: Any) -> str:
        if routed_data is not None:
            return raw_data_fallback(routed_data)
        return SYNTHESIS_FAILURE_MESSAGE
