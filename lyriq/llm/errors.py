"""Error types raised by the language model client."""

from __future__ import annotations


class LLMError(Exception):
    """The model provider rejected or failed a request."""


class LLMNotConfiguredError(LLMError):
    """No API key is configured for the model provider."""

    def __init__(self) -> None:
        super().__init__("OpenAI API key not configured")
