"""Tests for the model clients: tool-calling classifier and embeddings."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from api.llm.chat import MalformedModelResponse, ToolCallingClassifier, ToolSelection
from api.llm.embeddings import EmbeddingClient
from libs.common.settings import Settings


def fake_llm(tool_calls):
    bound = MagicMock()
    bound.ainvoke = AsyncMock(return_value=SimpleNamespace(tool_calls=tool_calls, content=""))
    llm = MagicMock()
    llm.bind_tools.return_value = bound
    return llm


class TestToolCallingClassifier:
    @pytest.mark.asyncio
    async def test_returns_first_tool_call(self):
        llm = fake_llm([
            {"name": "query_observability", "args": {"query": "errors", "timeRange": "1h"}},
            {"name": "search_docs", "args": {"query": "errors"}},
        ])
        tools = [{"type": "function", "function": {"name": "query_observability"}}]

        selection = await ToolCallingClassifier(Settings(), llm=llm).classify(["msg"], tools)

        assert selection == ToolSelection("query_observability", {"query": "errors", "timeRange": "1h"})
        llm.bind_tools.assert_called_once_with(tools)

    @pytest.mark.asyncio
    async def test_no_tool_call(self):
        selection = await ToolCallingClassifier(Settings(), llm=fake_llm([])).classify(["msg"], [])

        assert selection is None

    @pytest.mark.asyncio
    async def test_missing_args_become_empty(self):
        llm = fake_llm([{"name": "search_docs", "args": None}])

        selection = await ToolCallingClassifier(Settings(), llm=llm).classify(["msg"], [])

        assert selection.arguments == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "call",
        [{"name": "", "args": {}}, {"args": {}}, {"name": "search_docs", "args": "not-an-object"}],
    )
    async def test_malformed_tool_call(self, call):
        classifier = ToolCallingClassifier(Settings(), llm=fake_llm([call]))

        with pytest.raises(MalformedModelResponse):
            await classifier.classify(["msg"], [])


def embedding_settings(**overrides):
    values = {"openai_api_key": "sk-test", "openai_base_url": "https://llm.example/v1"}
    values.update(overrides)
    return Settings(**values)


class TestEmbeddingClient:
    @pytest.mark.asyncio
    async def test_embed_posts_truncated_input(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"data": [{"embedding": [0.1, 0.2, 0.3]}]})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = EmbeddingClient(embedding_settings(), http_client=http)
            embedding = await client.embed("x" * 1500, max_len=1000)

        assert embedding == [0.1, 0.2, 0.3]
        assert str(requests[0].url) == "https://llm.example/v1/embeddings"
        assert requests[0].headers["Authorization"] == "Bearer sk-test"
        body = httpx.Response(200, content=requests[0].content).json()
        assert len(body["input"]) == 1000
        assert body["model"] == "text-embedding-3-small"

    @pytest.mark.asyncio
    async def test_without_api_key_returns_none(self):
        client = EmbeddingClient(Settings(openai_api_key=None))

        assert await client.embed("hello") is None

    @pytest.mark.asyncio
    async def test_http_error_returns_none(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(503, text="unavailable"))

        async with httpx.AsyncClient(transport=transport) as http:
            client = EmbeddingClient(embedding_settings(), http_client=http)
            assert await client.embed("hello") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("embedding", [None, "0.1,0.2", 0.5, {"values": [0.1]}])
    async def test_non_list_embedding_returns_none(self, embedding):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"data": [{"embedding": embedding}]})
        )

        async with httpx.AsyncClient(transport=transport) as http:
            client = EmbeddingClient(embedding_settings(), http_client=http)
            assert await client.embed("hello") is None

    @pytest.mark.asyncio
    async def test_unexpected_format_returns_none(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"result": []}))

        async with httpx.AsyncClient(transport=transport) as http:
            client = EmbeddingClient(embedding_settings(), http_client=http)
            assert await client.embed("hello") is None
