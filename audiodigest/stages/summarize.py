"""Chunked transcript summarization stage."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import cast

from audiodigest.config import PipelineSettings
from audiodigest.error_codes import ErrorCode
from audiodigest.exceptions import (
    ConfigurationError,
    MissingCredentialError,
    ProviderError,
    SummarizationError,
)
from audiodigest.models.pipeline import PipelineState
from audiodigest.pipeline.context import PipelineContext
from audiodigest.providers import get_llm_provider
from audiodigest.providers.llm.base import Message
from audiodigest.stages.base import Stage
from audiodigest.utils.chunking import split_transcript

logger = logging.getLogger(__name__)

SUMMARY_SYSTEM_PROMPT = """You summarize timestamped audio transcripts (SRT subtitles).

Output rules:
- One entry per line, in the form: hh:mm:ss --- <section title>[: content]
- hh:mm:ss is the start time of the section, taken from the transcript timestamps.
- Group related discussion into one entry instead of emitting one entry per subtitle.
- Keep entries in chronological order.
- Output only the entries, without headings, numbering or commentary."""


class Summarizer(Stage):
    state = PipelineState.SUMMARIZING

    def __init__(self, settings: PipelineSettings) -> None:
        self.settings = settings
        self.provider = get_llm_provider(settings)

    def validate_input(self, context: PipelineContext) -> bool:
        return bool(str(context.get("transcript_text") or "").strip())

    def build_messages(self, chunk: str) -> list[Message]:
        return [
            Message(role="system", content=SUMMARY_SYSTEM_PROMPT),
            Message(role="user", content=f"{self.settings.summary_prompt}{chunk}"),
        ]

    async def summarize(self, chunks: Sequence[str]) -> str:
        """Summarize `chunks` one request at a time, in order, and merge the results.

        The first failing chunk aborts the rest; nothing partial is returned.
        """
        if not str(self.settings.ai_api_key or "").strip():
            raise MissingCredentialError()

        parts: list[str] = []
        total = len(chunks)
        for index, chunk in enumerate(chunks):
            logger.info("summarizing chunk %s/%s (chars=%s)", index + 1, total, len(chunk))
            try:
                text = await self.provider.complete(
                    self.build_messages(chunk),
                    temperature=self.settings.ai_temperature,
                )
            except ProviderError as exc:
                raise SummarizationError(
                    exc.message,
                    chunk_index=index,
                    error_code=exc.error_code or ErrorCode.LLM_FAILED,
                ) from exc
            parts.append(text)
        return "\n".join(parts).strip()

    async def execute(self, context: PipelineContext) -> PipelineContext:
        if not self.validate_input(context):
            raise ConfigurationError("transcript_text is required")
        chunks = split_transcript(context["transcript_text"], self.settings.chunk_max_chars)
        logger.info(
            "transcript split (chunks=%s, max_chars=%s)", len(chunks), self.settings.chunk_max_chars
        )
        summary = await self.summarize(chunks)
        context = cast(PipelineContext, dict(context))
        context["chunks"] = chunks
        context["summary_text"] = summary
        return context

    async def close(self) -> None:
        await self.provider.close()
