"""LLM Provider implementations."""

from audiodigest.providers.llm.base import LLMCompletionResult, LLMProvider, LLMUsage, Message

__all__ = ["LLMCompletionResult", "LLMProvider", "LLMUsage", "Message"]
