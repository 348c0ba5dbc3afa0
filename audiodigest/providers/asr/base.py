"""ASR Provider base class."""

from abc import ABC, abstractmethod


class ASRProvider(ABC):
    """Abstract base class for ASR providers."""

    output_format: str = "srt"

    @abstractmethod
    async def transcribe(
        self,
        audio_path: str,
        output_base: str,
        language: str | None = None,
    ) -> str:
        """Transcribe an audio file into a subtitle file.

        Args:
            audio_path: Path to the normalized audio file.
            output_base: Output path without the format extension.
            language: Optional language hint.

        Returns:
            Path of the written transcript (`<output_base>.<format>`).
        """
        ...

    async def close(self) -> None:  # pragma: no cover
        return None
