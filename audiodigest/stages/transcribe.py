"""Transcription stage with on-disk transcript cache."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import cast

from audiodigest.config import PipelineSettings
from audiodigest.exceptions import ConfigurationError, TranscriptionError
from audiodigest.models.media import transcript_path_for
from audiodigest.models.pipeline import PipelineState
from audiodigest.pipeline.context import PipelineContext
from audiodigest.providers import get_asr_provider
from audiodigest.stages.base import Stage
from audiodigest.storage.artifact_store import ArtifactStore

logger = logging.getLogger(__name__)


class Transcriber(Stage):
    state = PipelineState.TRANSCRIBING

    def __init__(self, settings: PipelineSettings, store: ArtifactStore) -> None:
        self.settings = settings
        self.store = store
        self.provider = get_asr_provider(settings)

    def validate_input(self, context: PipelineContext) -> bool:
        return context.get("asset") is not None and bool(context.get("audio_path"))

    async def transcribe(self, audio_path: str | Path, transcript_path: str | Path | None = None) -> str:
        """Return the transcript text, running the speech-to-text tool only on a cache miss."""
        if transcript_path is None:
            transcript_path = transcript_path_for(audio_path, self.settings.transcript_format)
        transcript_path = Path(transcript_path)
        if await self.store.exists(transcript_path):
            logger.info("reuse cached transcript (path=%s)", transcript_path)
            return await self.store.load_text(transcript_path)

        await self.store.prepare(transcript_path)
        output_base = transcript_path.with_suffix("")
        logger.info("transcribing (audio=%s, output=%s)", audio_path, transcript_path)
        try:
            written = await self.provider.transcribe(
                str(audio_path),
                str(output_base),
                language=self.settings.whisper_language,
            )
        except (TranscriptionError, asyncio.CancelledError):
            if await self.store.delete(transcript_path):
                logger.warning("removed partial transcript (path=%s)", transcript_path)
            raise

        if Path(written) != transcript_path or not await self.store.exists(transcript_path):
            raise TranscriptionError(f"transcription output not found: {transcript_path}")
        text = await self.store.load_text(transcript_path)
        logger.info("transcribed (path=%s, chars=%s)", transcript_path, len(text))
        return text

    async def execute(self, context: PipelineContext) -> PipelineContext:
        if not self.validate_input(context):
            raise ConfigurationError("asset/audio_path is required")
        asset = context["asset"]
        text = await self.transcribe(context["audio_path"], asset.transcript_path)
        if not text.strip():
            raise TranscriptionError(f"transcript is empty: {asset.transcript_path}")
        context = cast(PipelineContext, dict(context))
        context["transcript_path"] = str(asset.transcript_path)
        context["transcript_text"] = text
        return context

    async def close(self) -> None:
        await self.provider.close()
