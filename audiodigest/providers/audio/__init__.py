"""Audio processing Provider implementations."""

from audiodigest.providers.audio.base import AudioProvider
from audiodigest.providers.audio.ffmpeg import FFmpegProvider

__all__ = ["AudioProvider", "FFmpegProvider"]
