"""Speech-to-text Provider implementations."""

from audiodigest.providers.asr.base import ASRProvider
from audiodigest.providers.asr.whisper_cli import WhisperCLIProvider

__all__ = ["ASRProvider", "WhisperCLIProvider"]
