"""AI completion over the Anthropic and OpenAI SDKs."""

from pins.llm.clients import (
    AnthropicClient,
    LLMClient,
    LLMCompletionProvider,
    OpenAIClient,
    clear_llm_cache,
    get_llm,
)

__all__ = [
    "AnthropicClient",
    "LLMClient",
    "LLMCompletionProvider",
    "OpenAIClient",
    "clear_llm_cache",
    "get_llm",
]
