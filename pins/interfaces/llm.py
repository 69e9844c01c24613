"""AI completion interface used by the ai directive."""

from typing import Optional, Protocol


class CompletionProvider(Protocol):
    """Single-turn text completion.

    Implementations can be:
    - Anthropic (Claude)
    - OpenAI (GPT)
    - Test doubles returning canned text

    Example usage:
        ```python
        from pins.llm import LLMCompletionProvider

        provider = LLMCompletionProvider(provider="anthropic")
        text = await provider.complete("Summarize: ...", creativity=0.5)
        ```
    """

    async def complete(
        self,
        prompt: str,
        model: Optional[str] = None,
        creativity: float = 1.0,
    ) -> str:
        """Complete a prompt.

        Args:
            prompt: The full prompt text
            model: Model override; None selects the provider default
            creativity: Sampling temperature, 0.0 (deterministic) to 2.0

        Returns:
            The completion text

        Raises:
            Exception: Any provider error; the ai directive retries
        """
        ...
