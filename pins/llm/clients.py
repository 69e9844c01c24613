import asyncio
import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Optional

from anthropic import Anthropic
from dotenv import find_dotenv, load_dotenv
from openai import OpenAI

from pins.config import EngineSettings, get_settings

load_dotenv(find_dotenv())

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "anthropic"
DEFAULT_MODELS = {
    "anthropic": "claude-3-5-haiku-latest",
    "openai": "gpt-4o-mini",
}

# Anthropic rejects temperatures above 1.0
MAX_TEMPERATURE = {
    "anthropic": 1.0,
    "openai": 2.0,
}

_clients: dict[tuple[str, str], "LLMClient"] = {}

Message = dict[str, str]


def completion_token_limit() -> int:
    """Upper bound on generated tokens, from LLM_MAX_TOKENS (default 1024)."""
    return int(os.getenv("LLM_MAX_TOKENS", "1024"))


def require_env(key: str) -> str:
    """Read an environment variable that must be present.

    Raises:
        ValueError: If the variable is unset or empty.
    """
    value = os.getenv(key)
    if not value:
        raise ValueError(f"Required environment variable '{key}' is not set")
    return value


class LLMClient(ABC):
    """A chat model bound to one provider and model name.

    Messages use the chat shape shared by both SDKs:
    ``[{"role": "user", "content": "..."}]``.
    """

    provider: str = ""

    def __init__(self, model: str):
        self.model = model

    def clamp(self, temperature: float) -> float:
        return max(0.0, min(temperature, MAX_TEMPERATURE[self.provider]))

    @abstractmethod
    def generate(
        self,
        messages: list[Message],
        temperature: float = 1.0,
        max_tokens: int = 1024,
        **kwargs,
    ) -> str:
        """Return the model's reply text for a conversation."""


class AnthropicClient(LLMClient):
    """Claude models via the Anthropic SDK.

    ANTHROPIC_API_KEY wins when both it and ANTHROPIC_BASE_URL are set; a
    base URL alone routes through a gateway that does its own auth.
    """

    provider = "anthropic"

    def __init__(self, model: str):
        super().__init__(model)
        key = os.getenv("ANTHROPIC_API_KEY")
        gateway = os.getenv("ANTHROPIC_BASE_URL")

        options: dict[str, Any]
        if key:
            options = {"api_key": key}
        elif gateway:
            # SDK insists on a non-empty key
            options = {"api_key": "dummy", "base_url": gateway}
            logger.debug(f"Routing Anthropic calls through {gateway}")
        else:
            raise ValueError(
                "Either ANTHROPIC_API_KEY or ANTHROPIC_BASE_URL must be set"
            )
        self.client = Anthropic(**options)

    def generate(
        self,
        messages: list[Message],
        temperature: float = 1.0,
        max_tokens: int = 1024,
        **kwargs,
    ) -> str:
        reply = self.client.messages.create(
            model=self.model,
            messages=messages,  # type: ignore[arg-type]
            temperature=self.clamp(temperature),
            max_tokens=max_tokens,
            **kwargs,
        )
        return reply.content[0].text  # type: ignore[union-attr]


class OpenAIClient(LLMClient):
    """GPT models via the OpenAI SDK. OPENAI_BASE_URL is optional."""

    provider = "openai"

    def __init__(self, model: str):
        super().__init__(model)
        self.client = OpenAI(
            api_key=require_env("OPENAI_API_KEY"),
            base_url=os.getenv("OPENAI_BASE_URL"),
        )

    def generate(
        self,
        messages: list[Message],
        temperature: float = 1.0,
        max_tokens: int = 1024,
        **kwargs,
    ) -> str:
        reply = self.client.chat.completions.create(
            model=self.model,
            messages=messages,  # type: ignore[arg-type]
            temperature=self.clamp(temperature),
            max_tokens=max_tokens,
            **kwargs,
        )
        return reply.choices[0].message.content or ""


_CLIENT_TYPES: dict[str, type[LLMClient]] = {
    "anthropic": AnthropicClient,
    "openai": OpenAIClient,
}


def get_llm(provider: str | None = None, model: str | None = None) -> LLMClient:
    """Return a client for ``provider``/``model``, building it on first use.

    Clients are kept per (provider, model) so repeated ``ai`` directives
    share one HTTP connection pool.

    Raises:
        ValueError: If the provider is unknown or its credentials are missing.
    """
    name = (provider or DEFAULT_PROVIDER).lower()
    client_type = _CLIENT_TYPES.get(name)
    if client_type is None:
        raise ValueError(
            f"Invalid provider '{name}'. Must be one of: {', '.join(_CLIENT_TYPES)}"
        )
    model = model or DEFAULT_MODELS[name]

    key = (name, model)
    if key not in _clients:
        _clients[key] = client_type(model=model)
        logger.info(f"Created {name} client for model={model}")
    return _clients[key]


def clear_llm_cache() -> None:
    """Forget every client built by get_llm."""
    _clients.clear()


class LLMCompletionProvider:
    """CompletionProvider over the synchronous Anthropic/OpenAI clients.

    Calls run in a worker thread so the event loop keeps serving other
    resolutions while a completion is in flight.

    Example:
        ```python
        provider = LLMCompletionProvider(provider="openai")
        text = await provider.complete("Write a haiku about pins", creativity=1.2)
        ```
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        settings = settings or get_settings()
        self.provider = provider or settings.llm_provider
        self.default_model = model or settings.llm_model

    async def complete(
        self,
        prompt: str,
        model: Optional[str] = None,
        creativity: float = 1.0,
    ) -> str:
        llm = get_llm(self.provider, model or self.default_model)
        return await asyncio.to_thread(
            llm.generate,
            [{"role": "user", "content": prompt}],
            temperature=creativity,
            max_tokens=completion_token_limit(),
        )
