"""Format normalization stage (webm and friends -> mp3)."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import cast

from audiodigest.config import PipelineSettings
from audiodigest.exceptions import ConfigurationError, ConversionError
from audiodigest.models.media import resolve_artifact_paths
from audiodigest.models.pipeline import PipelineState
from audiodigest.pipeline.context import PipelineContext
from audiodigest.providers import get_audio_provider
from audiodigest.stages.base import Stage
from audiodigest.storage.artifact_store import ArtifactStore

logger = logging.getLogger(__name__)


class FormatConverter(Stage):
    state = PipelineState.CONVERTING

    def __init__(self, settings: PipelineSettings, store: ArtifactStore) -> None:
        self.settings = settings
        self.store = store
        self.provider = get_audio_provider(settings)

    def validate_input(self, context: PipelineContext) -> bool:
        asset = context.get("asset")
        return asset is not None and asset.needs_normalization

    async def normalize(self, source_path: str | Path, output_path: str | Path | None = None) -> str:
        """Return the normalized audio path, transcoding only on a cache miss.

        `output_path` defaults to the path derived from `source_path`.

        Any output left behind by a failed or cancelled transcode is removed.
        """
        if output_path is None:
            output_path = resolve_artifact_paths(source_path, self.settings.normalize_extensions).audio
        if await self.store.exists(output_path):
            logger.info("reuse normalized audio (path=%s)", output_path)
            return str(output_path)

        await self.store.prepare(output_path)
        logger.info("converting (source=%s, output=%s)", source_path, output_path)
        try:
            await self.provider.convert_to_mp3(str(source_path), str(output_path))
        except (ConversionError, asyncio.CancelledError):
            if await self.store.delete(output_path):
                logger.warning("removed partial conversion output (path=%s)", output_path)
            raise

        if not await self.store.exists(output_path):
            raise ConversionError(f"ffmpeg exited 0 but output not found: {output_path}")
        logger.info("converted (output=%s)", output_path)
        return str(output_path)

    async def execute(self, context: PipelineContext) -> PipelineContext:
        if not self.validate_input(context):
            raise ConfigurationError("asset requiring normalization is required")
        asset = context["asset"]
        audio_path = await self.normalize(asset.source_path, asset.audio_path)
        context = cast(PipelineContext, dict(context))
        context["audio_path"] = audio_path
        return context

    async def close(self) -> None:
        await self.provider.close()
