"""Provider abstractions for external services."""

from audiodigest.providers.registry import (
    get_asr_provider,
    get_audio_provider,
    get_llm_provider,
)

__all__ = ["get_asr_provider", "get_audio_provider", "get_llm_provider"]
