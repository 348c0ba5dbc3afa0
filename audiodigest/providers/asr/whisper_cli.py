"""whisper.cpp command line transcription."""

from __future__ import annotations

import logging
from pathlib import Path

from audiodigest.exceptions import TranscriptionError
from audiodigest.providers.asr.base import ASRProvider
from audiodigest.utils.binaries import missing_binary_message
from audiodigest.utils.subprocess import run_subprocess

logger = logging.getLogger(__name__)


class WhisperCLIProvider(ASRProvider):
    def __init__(
        self,
        whisper_bin: str = "whisper",
        *,
        model_path: str | None = None,
        output_format: str = "srt",
        timeout_s: float | None = None,
    ) -> None:
        self.whisper_bin = (whisper_bin or "whisper").strip()
        self.model_path = model_path
        self.output_format = output_format
        self.timeout_s = timeout_s

    def build_args(self, audio_path: str, output_base: str, language: str | None) -> list[str]:
        args = [self.whisper_bin]
        if language:
            args += ["-l", language]
        args += [f"-o{self.output_format}", "-of", str(output_base)]
        if self.model_path:
            args += ["-m", str(self.model_path)]
        args.append(str(audio_path))
        return args

    async def transcribe(
        self,
        audio_path: str,
        output_base: str,
        language: str | None = None,
    ) -> str:
        expected = Path(f"{output_base}.{self.output_format}")
        args = self.build_args(audio_path, output_base, language)
        try:
            result = await run_subprocess(args, timeout_s=self.timeout_s)
        except FileNotFoundError as exc:
            raise TranscriptionError(
                missing_binary_message(
                    "whisper", self.whisper_bin, "whisperCliPath", "Install whisper.cpp on PATH"
                )
            ) from exc
        except TimeoutError as exc:
            raise TranscriptionError(str(exc)) from exc

        if not result.ok:
            stderr = result.stderr_text()
            raise TranscriptionError(
                f"whisper failed (code={result.returncode}): {stderr or 'no output'}",
                returncode=result.returncode,
                stderr=stderr,
            )
        if not expected.exists():
            raise TranscriptionError(
                f"whisper exited 0 but output not found: {expected}",
                returncode=result.returncode,
                stderr=result.stderr_text(),
            )
        logger.debug("whisper done (audio=%s, output=%s)", audio_path, expected)
        return str(expected)
