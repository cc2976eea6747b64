"""Tests for the static capability tables."""

import pytest

from api.examples import EXAMPLE_QUERIES
from api.schemas.routing import Capability, IntentType
from api.tools import definitions
from api.tools.definitions import CAPABILITY_TOOLS, INTENT_CAPABILITIES, TOOL_ROUTES, resolve_tool, validate_tables


def test_tables_are_consistent():
    validate_tables()  # does not raise


def test_every_capability_has_a_tool():
    assert {capability for _, capability in TOOL_ROUTES.values()} == set(Capability)


def test_resolve_tool():
    assert resolve_tool("query_observability") == (IntentType.ERROR_LOGS, Capability.OBSERVABILITY)
    assert resolve_tool("search_docs") == (IntentType.HOW_TO, Capability.DOCUMENTATION)
    assert resolve_tool("query_bindings") == (IntentType.LIST_RESOURCES, Capability.BINDINGS)
    assert resolve_tool("delete_everything") is None
    assert resolve_tool(None) is None


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        TOOL_ROUTES["new_tool"] = (IntentType.GENERAL, Capability.BINDINGS)


def test_openai_tool_format():
    tool = CAPABILITY_TOOLS[0].to_openai_tool()

    assert tool["type"] == "function"
    assert tool["function"]["name"] == "query_observability"
    assert tool["function"]["parameters"]["required"] == ["query"]


def test_validation_detects_missing_route(monkeypatch):
    broken = {k: v for k, v in TOOL_ROUTES.items() if k != "query_bindings"}
    monkeypatch.setattr(definitions, "TOOL_ROUTES", broken)

    with pytest.raises(ValueError):
        definitions.validate_tables()


def test_validation_detects_missing_intent_mapping(monkeypatch):
    broken = {k: v for k, v in INTENT_CAPABILITIES.items() if k is not IntentType.PERFORMANCE}
    monkeypatch.setattr(definitions, "INTENT_CAPABILITIES", broken)

    with pytest.raises(ValueError):
        definitions.validate_tables()


def test_example_queries_use_known_tools():
    for example in EXAMPLE_QUERIES:
        assert TOOL_ROUTES[example.expected_tool][1] is example.expected_capability
