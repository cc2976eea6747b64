"""
Capability descriptors and static routing tables.

The classifier offers ``CAPABILITY_TOOLS`` to a tool-calling model and maps
the selected tool back to an intent with ``TOOL_ROUTES``. All tables are
immutable and checked for consistency when this module is imported.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from api.schemas.routing import Capability, IntentType

SYSTEM_PROMPT = """You are an expert serverless Workers observability and troubleshooting assistant.

Your role is to help developers debug distributed applications by:
1. Querying logs, traces, and metrics from the observability service
2. Searching the platform documentation for how-to guides and API references
3. Inspecting Workers resources like KV, R2, D1, and Durable Objects

When responding:
- Be concise and actionable
- Cite specific data from capability responses
- Suggest next steps for debugging
- Link to relevant documentation when helpful

You have access to three capabilities:
- Observability: Real-time logs, traces, and analytics
- Documentation: Platform API and product documentation
- Bindings: Workers resource inspection and management"""

CLASSIFIER_SYSTEM_PROMPT = (
    "You are an intent classifier for a Workers observability agent. "
    "Determine which tool to call based on the user query."
)


@dataclass(frozen=True)
class CapabilityDescriptor:
    """A tool offered to the classification model."""

    name: str
    description: str
    parameters: Dict[str, Any] = field(default_factory=dict)

    def to_openai_tool(self) -> Dict[str, Any]:
        """Function-calling format accepted by ``bind_tools``."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


CAPABILITY_TOOLS: Tuple[CapabilityDescriptor, ...] = (
    CapabilityDescriptor(
        name="query_observability",
        description=(
            "Query logs, traces, metrics, and analytics from the observability service. "
            "Use this for debugging errors, investigating performance issues, or analyzing request patterns."
        ),
        parameters={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The observability query (e.g., 'show error logs', 'performance metrics', 'requests by status code')",
                },
                "timeRange": {
                    "type": "string",
                    "enum": ["1h", "6h", "24h", "7d"],
                    "description": "Time range for the query. Defaults to 1h (last hour)",
                },
                "filters": {
                    "type": "object",
                    "description": "Optional filters like status codes, worker names, or error types",
                    "properties": {
                        "statusCode": {"type": "string"},
                        "workerName": {"type": "string"},
                        "errorType": {"type": "string"},
                    },
                },
            },
            "required": ["query"],
        },
    ),
    CapabilityDescriptor(
        name="search_docs",
        description=(
            "Search the platform documentation for API references, how-to guides, and best practices. "
            "Use this when users ask 'how to' questions or need documentation links."
        ),
        parameters={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The documentation search query (e.g., 'how to set up KV', 'Durable Objects API')",
                },
                "product": {
                    "type": "string",
                    "enum": ["workers", "kv", "r2", "d1", "durable-objects", "vectorize", "workers-ai", "pages"],
                    "description": "Optional: specific product to search within",
                },
                "includeExamples": {
                    "type": "boolean",
                    "description": "Whether to prioritize code examples in results",
                },
            },
            "required": ["query"],
        },
    ),
    CapabilityDescriptor(
        name="query_bindings",
        description=(
            "List and inspect Workers resources like KV namespaces, R2 buckets, D1 databases, and Durable Objects. "
            "Use this to check configurations or list available resources."
        ),
        parameters={
            "type": "object",
            "properties": {
                "resourceType": {
                    "type": "string",
                    "enum": ["kv", "r2", "d1", "durable_objects", "all"],
                    "description": "Type of resource to query",
                },
                "action": {
                    "type": "string",
                    "enum": ["list", "inspect", "stats"],
                    "description": "Action to perform: list resources, inspect a specific one, or get stats",
                },
                "resourceName": {
                    "type": "string",
                    "description": "Optional: specific resource name to inspect",
                },
            },
            "required": ["resourceType", "action"],
        },
    ),
)

# Tool name -> (intent type, capability)
TOOL_ROUTES: Mapping[str, Tuple[IntentType, Capability]] = MappingProxyType({
    "query_observability": (IntentType.ERROR_LOGS, Capability.OBSERVABILITY),
    "search_docs": (IntentType.HOW_TO, Capability.DOCUMENTATION),
    "query_bindings": (IntentType.LIST_RESOURCES, Capability.BINDINGS),
})

# Intent type -> capability, for every intent that needs backend data
INTENT_CAPABILITIES: Mapping[IntentType, Capability] = MappingProxyType({
    IntentType.ERROR_LOGS: Capability.OBSERVABILITY,
    IntentType.PERFORMANCE: Capability.OBSERVABILITY,
    IntentType.HOW_TO: Capability.DOCUMENTATION,
    IntentType.API_REFERENCE: Capability.DOCUMENTATION,
    IntentType.LIST_RESOURCES: Capability.BINDINGS,
    IntentType.INSPECT_CONFIG: Capability.BINDINGS,
})


def resolve_tool(name: Optional[str]) -> Optional[Tuple[IntentType, Capability]]:
    """Intent type and capability for a tool name, or None if it is not in the table."""
    if not name:
        return None
    return TOOL_ROUTES.get(name)


def validate_tables() -> None:
    """
    Check the static tables against each other.

    Raises:
        ValueError: if a descriptor, route, or intent mapping is missing or inconsistent
    """
    descriptor_names = {tool.name for tool in CAPABILITY_TOOLS}
    if len(descriptor_names) != len(CAPABILITY_TOOLS):
        raise ValueError("Duplicate capability tool names")

    if descriptor_names != set(TOOL_ROUTES):
        raise ValueError(
            f"Tool routes {sorted(TOOL_ROUTES)} do not match descriptors {sorted(descriptor_names)}"
        )

    routed_capabilities = {capability for _, capability in TOOL_ROUTES.values()}
    missing = set(Capability) - routed_capabilities
    if missing:
        raise ValueError(f"Capabilities without a tool: {sorted(c.value for c in missing)}")

    for intent_type, capability in TOOL_ROUTES.values():
        if INTENT_CAPABILITIES.get(intent_type) is not capability:
            raise ValueError(f"Tool route {intent_type.value} -> {capability.value} disagrees with intent table")

    unmapped = set(IntentType) - set(INTENT_CAPABILITIES) - {IntentType.GENERAL}
    if unmapped:
        raise ValueError(f"Intent types without a capability: {sorted(i.value for i in unmapped)}")


validate_tables()
