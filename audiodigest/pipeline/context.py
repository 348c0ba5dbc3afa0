"""Pipeline context typing.

Stages pass a context dict downstream. This module defines the known keys.
"""

from __future__ import annotations

from typing import Protocol, TypedDict

from audiodigest.models.media import MediaAsset
from audiodigest.models.pipeline import PipelineState


class ProgressReporter(Protocol):
    async def report(self, state: PipelineState, message: str) -> None: ...


class PipelineContext(TypedDict, total=False):
    asset: MediaAsset

    audio_path: str
    transcript_path: str
    transcript_text: str

    chunks: list[str]
    summary_text: str
    summary_path: str
