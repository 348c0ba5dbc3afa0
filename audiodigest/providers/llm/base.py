"""LLM Provider base class."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class Message:
    """A chat message."""

    role: str  # "system" | "user" | "assistant"
    content: str


@dataclass
class LLMUsage:
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None


@dataclass
class LLMCompletionResult:
    text: str
    usage: LLMUsage | None = None


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        temperature: float = 0.3,
    ) -> str:
        """Generate a completion.

        Args:
            messages: List of chat messages.
            temperature: Sampling temperature.

        Returns:
            Generated text.
        """
        ...

    async def complete_with_usage(
        self,
        messages: list[Message],
        temperature: float = 0.3,
    ) -> LLMCompletionResult:
        text = await self.complete(messages, temperature=temperature)
        return LLMCompletionResult(text=text, usage=None)

    async def close(self) -> None:
        """Close any underlying resources (optional)."""
        return None
