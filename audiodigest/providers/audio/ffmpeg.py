"""FFmpeg-based audio utilities."""

from __future__ import annotations

import logging

from audiodigest.exceptions import ConversionError
from audiodigest.providers.audio.base import AudioProvider
from audiodigest.utils.binaries import missing_binary_message, resolve_ffmpeg_bin
from audiodigest.utils.subprocess import run_subprocess

logger = logging.getLogger(__name__)

AUDIO_BITRATE = "128k"
AUDIO_SAMPLE_RATE = "44100"


class FFmpegProvider(AudioProvider):
    def __init__(self, ffmpeg_bin: str = "ffmpeg", *, timeout_s: float | None = None) -> None:
        self.ffmpeg_bin = resolve_ffmpeg_bin(ffmpeg_bin)
        self.timeout_s = timeout_s

    def build_args(self, input_path: str, output_path: str) -> list[str]:
        return [
            self.ffmpeg_bin,
            "-i",
            str(input_path),
            "-vn",
            "-ab",
            AUDIO_BITRATE,
            "-ar",
            AUDIO_SAMPLE_RATE,
            "-y",
            str(output_path),
        ]

    async def convert_to_mp3(self, input_path: str, output_path: str) -> str:
        """Drop video, re-encode audio to 128k / 44.1kHz MP3."""
        args = self.build_args(input_path, output_path)
        try:
            result = await run_subprocess(args, timeout_s=self.timeout_s)
        except FileNotFoundError as exc:
            raise ConversionError(
                missing_binary_message(
                    "ffmpeg",
                    self.ffmpeg_bin,
                    "ffmpegPath",
                    "Install ffmpeg on PATH (or the bundled-ffmpeg extra)",
                )
            ) from exc
        except TimeoutError as exc:
            raise ConversionError(str(exc)) from exc

        if not result.ok:
            stderr = result.stderr_text()
            raise ConversionError(
                f"ffmpeg failed (code={result.returncode}): {stderr or 'no output'}",
                returncode=result.returncode,
                stderr=stderr,
            )
        logger.debug("ffmpeg done (input=%s, output=%s)", input_path, output_path)
        return str(output_path)
