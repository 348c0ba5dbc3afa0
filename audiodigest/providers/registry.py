"""Provider factory and registry."""

from __future__ import annotations

from audiodigest.config import PipelineSettings
from audiodigest.providers.asr.base import ASRProvider
from audiodigest.providers.audio.base import AudioProvider
from audiodigest.providers.llm.base import LLMProvider


def get_audio_provider(settings: PipelineSettings) -> AudioProvider:
    """Get the audio transcoder for a settings snapshot."""
    from audiodigest.providers.audio.ffmpeg import FFmpegProvider

    return FFmpegProvider(
        ffmpeg_bin=settings.ffmpeg_path,
        timeout_s=settings.process_timeout_s,
    )


def get_asr_provider(settings: PipelineSettings) -> ASRProvider:
    """Get the speech-to-text provider for a settings snapshot."""
    from audiodigest.providers.asr.whisper_cli import WhisperCLIProvider

    return WhisperCLIProvider(
        whisper_bin=settings.whisper_cli_path,
        model_path=settings.whisper_model_path or None,
        output_format=settings.transcript_format,
        timeout_s=settings.process_timeout_s,
    )


def get_llm_provider(settings: PipelineSettings) -> LLMProvider:
    """Get the chat-completions provider for a settings snapshot."""
    from audiodigest.providers.llm.openai_compat import OpenAICompatProvider

    return OpenAICompatProvider(
        api_key=settings.ai_api_key,
        model=settings.ai_model,
        endpoint=settings.ai_endpoint,
        timeout_s=settings.ai_timeout_s,
        max_attempts=settings.ai_max_attempts,
    )
