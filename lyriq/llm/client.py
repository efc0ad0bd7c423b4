"""
OpenAI-backed language model client.

Provides the two operations the chatbot and knowledge base need: text
embeddings for retrieval and chat completions for answers.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol

import openai
from openai import AsyncOpenAI

from .errors import LLMError, LLMNotConfiguredError

ChatMessages = List[Dict[str, str]]


class LLMClient(Protocol):
    async def embed(self, text: str) -> List[float]: ...

    async def complete(
        self, messages: ChatMessages, *, max_tokens: int = 600, temperature: float = 0.7
    ) -> str: ...


class OpenAILLMClient:
    """Async OpenAI client limited to embeddings and chat completions."""

    def __init__(
        self,
        api_key: Optional[str],
        *,
        chat_model: str = "gpt-4o-mini",
        embedding_model: str = "text-embedding-ada-002",
        base_url: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        if client is None and not api_key:
            raise LLMNotConfiguredError()
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url)
        self.chat_model = chat_model
        self.embedding_model = embedding_model
        self._logger = logging.getLogger(__name__)

    async def embed(self, text: str) -> List[float]:
        try:
            response = await self._client.embeddings.create(model=self.embedding_model, input=text)
        except openai.OpenAIError as e:
            raise LLMError(f"Embedding request failed: {e}") from e
        return list(response.data[0].embedding)

    async def complete(self, messages: ChatMessages, *, max_tokens: int = 600, temperature: float = 0.7) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self.chat_model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except openai.OpenAIError as e:
            raise LLMError(f"Chat completion failed: {e}") from e
        usage = getattr(response, "usage", None)
        if usage is not None:
            self._logger.debug("OpenAILLMClient.complete: %s used %s tokens", self.chat_model, usage.total_tokens)
        return response.choices[0].message.content or ""
