"""
Capability providers.

Each provider answers read-only queries for one backend capability. The
providers shipped here return demonstration payloads with the same shape a
live integration would return; they never modify anything.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import structlog

from api.schemas.routing import Capability

logger = structlog.get_logger(__name__)

CAPABILITY_ENDPOINTS: Dict[Capability, str] = {
    Capability.OBSERVABILITY: "https://observability.mcp.cloudflare.com/mcp",
    Capability.DOCUMENTATION: "https://docs.mcp.cloudflare.com/mcp",
    Capability.BINDINGS: "https://bindings.mcp.cloudflare.com/mcp",
}


class CapabilityProvider:
    """Base class for capability providers."""

    capability: Capability

    @property
    def endpoint(self) -> str:
        return CAPABILITY_ENDPOINTS[self.capability]

    async def call(self, query: str, parameters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        raise NotImplementedError


class ObservabilityProvider(CapabilityProvider):
    """Logs, traces, and request metrics."""

    capability = Capability.OBSERVABILITY

    async def call(self, query: str, parameters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        parameters = parameters or {}
        logger.info("Querying observability", query_preview=query[:50])

        return {
            "query": query,
            "timeRange": parameters.get("timeRange") or "1h",
            "filters": parameters.get("filters") or {},
            "results": {
                "logs": [
                    {
                        "timestamp": datetime.now(timezone.utc).isoformat(),
                        "level": "error",
                        "message": "Example error log entry",
                        "worker": "example-worker",
                    }
                ],
                "summary": {
                    "totalRequests": 1250,
                    "errorCount": 23,
                    "avgResponseTime": 45,
                },
            },
            "note": "This is a demonstration response, not live observability data.",
        }


class DocumentationProvider(CapabilityProvider):
    """Documentation search."""

    capability = Capability.DOCUMENTATION

    async def call(self, query: str, parameters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        parameters = parameters or {}
        logger.info("Searching documentation", query_preview=query[:50])

        return {
            "query": query,
            "product": parameters.get("product") or "workers",
            "results": [
                {
                    "title": "Workers Documentation",
                    "url": "https://developers.cloudflare.com/workers/",
                    "excerpt": "Build serverless applications on Workers...",
                    "relevance": 0.92,
                },
                {
                    "title": "API Reference",
                    "url": "https://developers.cloudflare.com/workers/runtime-apis/",
                    "excerpt": "Complete API reference for the Workers runtime...",
                    "relevance": 0.87,
                },
            ],
            "note": "This is a demonstration response, not a live documentation search.",
        }


class BindingsProvider(CapabilityProvider):
    """Workers resource inventory (KV, R2, D1, Durable Objects)."""

    capability = Capability.BINDINGS

    async def call(self, query: str, parameters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        parameters = parameters or {}
        logger.info("Querying bindings", query_preview=query[:50])

        return {
            "query": query,
            "resourceType": parameters.get("resourceType") or "all",
            "action": parameters.get("action") or "list",
            "resources": {
                "kv": [{"name": "CHAT_HISTORY", "id": "example-kv-id", "created": "2024-01-15"}],
                "r2": [{"name": "assets-bucket", "location": "auto", "created": "2024-02-01"}],
                "durableObjects": [
                    {"name": "OBSERVABILITY_AGENT", "className": "ObservabilityAgent", "instances": 3}
                ],
            },
            "note": "This is a demonstration response, not live binding data.",
        }


def default_providers() -> Dict[Capability, CapabilityProvider]:
    """One provider per capability."""
    return {
        Capability.OBSERVABILITY: ObservabilityProvider(),
        Capability.DOCUMENTATION: DocumentationProvider(),
        Capability.BINDINGS: BindingsProvider(),
    }
