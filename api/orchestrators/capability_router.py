"""Routing of classified intents to capability providers.

``route`` never raises. Provider failures and unknown capabilities come back
as a ``RoutedResult`` whose data is an error payload, so the synthesizer can
explain the problem to the user instead of the request failing.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional

import structlog

from api.schemas.routing import Capability, Intent, RoutedResult
from api.tools.providers import CapabilityProvider, default_providers

logger = structlog.get_logger(__name__)

DEFAULT_SOURCE_TAG = Capability.DOCUMENTATION.value
ERROR_SUGGESTION = "Please try rephrasing your query or check your account permissions."


class CapabilityNotAvailable(LookupError):
    """No provider is registered for the requested capability."""


class CapabilityRouter:
    """Dispatches intents to the provider registered for their capability."""

    def __init__(self, providers: Optional[Mapping[Capability, CapabilityProvider]] = None):
        self.providers: Dict[Capability, CapabilityProvider] = dict(
            providers if providers is not None else default_providers()
        )

    async def route(self, intent: Intent, query: str) -> RoutedResult:
        target = intent.target_capability
        logger.info("Routing query", capability=getattr(target, "value", target) or "none")

        if target is None:
            return RoutedResult(source_tag=DEFAULT_SOURCE_TAG, data=None)

        source_tag = target.value if isinstance(target, Capability) else str(target)
        try:
            provider = self._provider_for(target)
            data = await provider.call(query, intent.parameters)
        except Exception as e:
            logger.error("Capability call failed", capability=source_tag, error=str(e))
            return RoutedResult(
                source_tag=source_tag,
                data={
                    "error": True,
                    "message": str(e) or type(e).__name__,
                    "suggestion": ERROR_SUGGESTION,
                },
            )

        return RoutedResult(source_tag=source_tag, data=data)

    def get_endpoint(self, capability: Capability) -> str:
        return self._provider_for(capability).endpoint

    def _provider_for(self, capability) -> CapabilityProvider:
        provider = self.providers.get(capability)
        if provider is None:
            raise CapabilityNotAvailable(f"Unknown capability: {getattr(capability, 'value', capability)}")
        return provider
