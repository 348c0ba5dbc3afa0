"""Audio provider abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod


class AudioProvider(ABC):
    @abstractmethod
    async def convert_to_mp3(self, input_path: str, output_path: str) -> str:
        """Transcode `input_path` into an audio-only MP3 at `output_path`."""
        raise NotImplementedError

    async def close(self) -> None:  # pragma: no cover
        return None
