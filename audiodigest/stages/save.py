"""Summary persistence stage."""

from __future__ import annotations

import logging
from typing import cast

from audiodigest.exceptions import ConfigurationError
from audiodigest.models.pipeline import PipelineState
from audiodigest.pipeline.context import PipelineContext
from audiodigest.stages.base import Stage
from audiodigest.storage.artifact_store import ArtifactStore

logger = logging.getLogger(__name__)


class SummaryWriter(Stage):
    state = PipelineState.SAVING

    def __init__(self, store: ArtifactStore) -> None:
        self.store = store

    def validate_input(self, context: PipelineContext) -> bool:
        return context.get("asset") is not None and "summary_text" in context

    async def execute(self, context: PipelineContext) -> PipelineContext:
        if not self.validate_input(context):
            raise ConfigurationError("asset/summary_text is required")
        asset = context["asset"]
        path = await self.store.save_text(asset.summary_path, context["summary_text"])
        logger.info("summary saved (path=%s)", path)
        context = cast(PipelineContext, dict(context))
        context["summary_path"] = path
        return context
