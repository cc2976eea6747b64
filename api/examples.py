"""Example queries and the welcome message shown to new users."""

from dataclasses import dataclass
from typing import Tuple

from api.schemas.routing import Capability


@dataclass(frozen=True)
class ExampleQuery:
    query: str
    expected_capability: Capability
    expected_tool: str
    description: str = ""


EXAMPLE_QUERIES: Tuple[ExampleQuery, ...] = (
    # Observability
    ExampleQuery(
        "Show me error logs from the last hour",
        Capability.OBSERVABILITY, "query_observability",
        "Query recent error logs to identify issues",
    ),
    ExampleQuery(
        "Why is my worker responding slowly? Check performance metrics",
        Capability.OBSERVABILITY, "query_observability",
        "Analyze performance data to identify bottlenecks",
    ),
    ExampleQuery(
        "How many 5xx errors did I get in the last 24 hours?",
        Capability.OBSERVABILITY, "query_observability",
        "Query specific error status codes over time",
    ),
    # Documentation
    ExampleQuery(
        "How do I set up a KV namespace?",
        Capability.DOCUMENTATION, "search_docs",
        "Search documentation for setup instructions",
    ),
    ExampleQuery(
        "What's the difference between KV and Durable Objects?",
        Capability.DOCUMENTATION, "search_docs",
        "Compare different storage options",
    ),
    ExampleQuery(
        "Show me examples of using Workers AI for text generation",
        Capability.DOCUMENTATION, "search_docs",
        "Find code examples in documentation",
    ),
    # Bindings
    ExampleQuery(
        "List all my R2 buckets",
        Capability.BINDINGS, "query_bindings",
        "Query available R2 storage resources",
    ),
    ExampleQuery(
        "What KV namespaces do I have configured?",
        Capability.BINDINGS, "query_bindings",
        "List KV namespace bindings",
    ),
    ExampleQuery(
        "Show me my Durable Objects configuration",
        Capability.BINDINGS, "query_bindings",
        "Inspect Durable Objects setup",
    ),
    # Multi-step
    ExampleQuery(
        "My worker is failing with 500 errors. Help me debug this - check logs and suggest what docs I should read",
        Capability.OBSERVABILITY, "query_observability",
        "Troubleshooting that starts with observability, then documentation",
    ),
)

WELCOME_MESSAGE = """Welcome to the Tracewise observability agent!

I can help you debug and troubleshoot your Workers applications using natural language.

**What I can do:**
- Query logs, traces, and metrics from your Workers
- Search the platform documentation and examples
- Inspect your Workers resources (KV, R2, D1, Durable Objects)
- Remember past answers so repeat questions are answered instantly

**Try these example questions:**

**Observability:**
- "Show me error logs from the last hour"
- "Why is my worker responding slowly?"
- "How many 5xx errors did I get today?"

**Documentation:**
- "How do I set up a KV namespace?"
- "What's the difference between KV and Durable Objects?"
- "Show me Workers AI examples"

**Resources:**
- "List all my R2 buckets"
- "What KV namespaces do I have?"
- "Show me my Durable Objects configuration"

Ask me anything about your Workers!"""
