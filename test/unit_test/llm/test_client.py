from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from lyriq.llm import LLMError, LLMNotConfiguredError, OpenAILLMClient


@pytest.fixture
def openai_client() -> MagicMock:
    client = MagicMock()
    client.embeddings.create = AsyncMock(
        return_value=SimpleNamespace(data=[SimpleNamespace(embedding=[0.1, 0.2, 0.3])])
    )
    client.chat.completions.create = AsyncMock(
        return_value=SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="Your bill is due on the 15th."))],
            usage=SimpleNamespace(total_tokens=42),
        )
    )
    return client


@pytest.fixture
def llm(openai_client) -> OpenAILLMClient:
    return OpenAILLMClient(None, chat_model="gpt-test", embedding_model="embed-test", client=openai_client)


def _api_error() -> openai.APIConnectionError:
    return openai.APIConnectionError(request=httpx.Request("POST", "http://mock-openai/v1/embeddings"))


class TestOpenAILLMClient:
    def test_requires_api_key_without_client(self):
        with pytest.raises(LLMNotConfiguredError):
            OpenAILLMClient(None)

    async def test_embed(self, llm, openai_client):
        vector = await llm.embed("late bill")

        assert vector == [0.1, 0.2, 0.3]
        openai_client.embeddings.create.assert_awaited_once_with(model="embed-test", input="late bill")

    async def test_complete(self, llm, openai_client):
        messages = [{"role": "user", "content": "When is my bill due?"}]

        answer = await llm.complete(messages, max_tokens=100)

        assert answer == "Your bill is due on the 15th."
        openai_client.chat.completions.create.assert_awaited_once_with(
            model="gpt-test", messages=messages, max_tokens=100, temperature=0.7
        )

    async def test_complete_with_empty_content(self, llm, openai_client):
        openai_client.chat.completions.create.return_value = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=None))], usage=None
        )

        assert await llm.complete([{"role": "user", "content": "hi"}]) == ""

    async def test_provider_errors_are_wrapped(self, llm, openai_client):
        openai_client.embeddings.create.side_effect = _api_error()
        openai_client.chat.completions.create.side_effect = _api_error()

        with pytest.raises(LLMError, match="Embedding request failed"):
            await llm.embed("x")
        with pytest.raises(LLMError, match="Chat completion failed"):
            await llm.complete([{"role": "user", "content": "x"}])
