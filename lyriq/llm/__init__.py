"""Language model access for chat answers and knowledge base embeddings."""

from .client import ChatMessages, LLMClient, OpenAILLMClient
from .errors import LLMError, LLMNotConfiguredError

__all__ = ["ChatMessages", "LLMClient", "LLMError", "LLMNotConfiguredError", "OpenAILLMClient"]
