"""
End-to-end conversation flows against fakeredis.

Only the two model oracles are mocked. Embeddings come from the
deterministic fake, so repeated questions hit the semantic cache.
"""

import pytest

from api.llm.chat import ToolSelection
from api.orchestrators.session_manager import SessionConversationManager, SessionRegistry
from api.schemas.routing import Capability


@pytest.mark.asyncio
async def test_error_log_question_then_repeat(pipeline, classification_oracle, generator):
    classification_oracle.classify.return_value = ToolSelection("query_observability", {"timeRange": "1h"})
    generator.generate.return_value = "23 errors in the last hour, mostly from example-worker."
    registry = SessionRegistry(**pipeline)

    first = await registry.handle_query("s1", "Show me error logs from the last hour")

    assert first == "23 errors in the last hour, mostly from example-worker."
    capability_message = generator.generate.await_args.args[0][-2].content
    assert capability_message.startswith("Capability response:")
    assert '"timeRange": "1h"' in capability_message

    stats = await registry.get_stats("s1")
    assert stats.total_queries == 1
    assert stats.cache_hits == 0
    assert stats.capability_calls["observability"] == 1
    assert await pipeline["cache"].entry_count() == 1

    # Same question with different spacing and case
    second = await registry.handle_query("s1", "  show me ERROR logs from the last hour ")

    assert second.startswith("[Cached Answer - observability]")
    assert "23 errors in the last hour" in second
    assert "(similarity: 100.0%)" in second
    assert classification_oracle.classify.await_count == 1
    assert generator.generate.await_count == 1

    stats = await registry.get_stats("s1")
    assert stats.total_queries == 2
    assert stats.cache_hits == 1
    assert stats.capability_calls["observability"] == 1
    assert len(await registry.get_history("s1")) == 2


@pytest.mark.asyncio
async def test_cache_is_shared_across_sessions(pipeline, classification_oracle, generator):
    classification_oracle.classify.return_value = ToolSelection("search_docs", {"product": "kv"})
    registry = SessionRegistry(**pipeline)

    await registry.handle_query("s1", "How do I set up a KV namespace?")
    answer = await registry.handle_query("s2", "How do I set up a KV namespace?")

    assert answer.startswith("[Cached Answer - documentation]")
    assert (await registry.get_stats("s2")).cache_hits == 1


@pytest.mark.asyncio
async def test_session_survives_restart(pipeline):
    registry = SessionRegistry(**pipeline)
    await registry.handle_query("s1", "Hello")

    restarted = SessionRegistry(**pipeline)

    history = await restarted.get_history("s1")
    assert [m.content for m in history] == ["Hello", "Generated answer"]
    assert (await restarted.get_stats("s1")).total_queries == 1


@pytest.mark.asyncio
async def test_capability_failure_is_explained(pipeline, classification_oracle, generator):
    classification_oracle.classify.return_value = ToolSelection("query_bindings", {"resourceType": "r2"})

    async def failing_call(query, parameters=None):
        raise PermissionError("token lacks R2 read scope")

    pipeline["router"].providers[Capability.BINDINGS].call = failing_call
    manager = SessionConversationManager(
        "s1",
        pipeline["store"],
        pipeline["cache"],
        pipeline["classifier"],
        pipeline["router"],
        pipeline["synthesizer"],
    )

    answer = await manager.handle_query("List all my R2 buckets")

    assert answer == "Generated answer"
    capability_message = generator.generate.await_args.args[0][-2].content
    assert '"error": true' in capability_message
    assert "token lacks R2 read scope" in capability_message
    assert manager.state.metadata.capability_calls["bindings"] == 1
