"""End-to-end pipeline orchestrator (source media -> transcript -> summary)."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from pathlib import Path

from audiodigest.config import PipelineSettings
from audiodigest.error_codes import ErrorCode
from audiodigest.exceptions import (
    ConfigurationError,
    PersistenceError,
    PipelineBusyError,
    StageExecutionError,
)
from audiodigest.models.media import MediaAsset
from audiodigest.models.pipeline import PipelineOutcome, PipelineResult, PipelineState
from audiodigest.pipeline.concurrency import SourceLockRegistry
from audiodigest.pipeline.context import PipelineContext, ProgressReporter
from audiodigest.stages import FormatConverter, Summarizer, SummaryWriter, Transcriber
from audiodigest.stages.base import Stage
from audiodigest.storage.artifact_store import ArtifactStore, LocalArtifactStore

logger = logging.getLogger(__name__)

StageFactory = Callable[[], Stage]

_STATE_ERROR_CODES: dict[PipelineState, ErrorCode] = {
    PipelineState.START: ErrorCode.INVALID_MEDIA,
    PipelineState.CONVERTING: ErrorCode.CONVERSION_FAILED,
    PipelineState.TRANSCRIBING: ErrorCode.TRANSCRIPTION_FAILED,
    PipelineState.SUMMARIZING: ErrorCode.LLM_FAILED,
    PipelineState.SAVING: ErrorCode.PERSISTENCE_FAILED,
}


class LoggingProgressReporter:
    """Default reporter: state transitions go to the log."""

    async def report(self, state: PipelineState, message: str) -> None:
        level = logging.ERROR if state == PipelineState.ERROR else logging.INFO
        logger.log(level, "progress (state=%s): %s", state.value, message)


def _code_value(code: ErrorCode | str) -> str:
    return code.value if isinstance(code, ErrorCode) else str(code)


class PipelineOrchestrator:
    """Runs the audio-to-summary pipeline for one source file at a time per path.

    The settings snapshot is captured when a run starts; `update_settings()`
    only affects runs started afterwards.
    """

    def __init__(
        self,
        settings: PipelineSettings,
        store: ArtifactStore | None = None,
        *,
        progress_reporter: ProgressReporter | None = None,
        locks: SourceLockRegistry | None = None,
    ) -> None:
        self._settings = settings
        self.store = store or LocalArtifactStore()
        self.progress_reporter = progress_reporter or LoggingProgressReporter()
        self.locks = locks or SourceLockRegistry()
        self._tasks: dict[str, set[asyncio.Task[PipelineOutcome]]] = {}

    @property
    def settings(self) -> PipelineSettings:
        return self._settings

    def update_settings(self, settings: PipelineSettings) -> None:
        self._settings = settings

    def asset_for(self, source_path: str | Path, settings: PipelineSettings | None = None) -> MediaAsset:
        settings = settings or self._settings
        return MediaAsset.from_path(
            source_path,
            normalize_extensions=settings.normalize_extensions,
            transcript_format=settings.transcript_format,
            base_dir=settings.base_dir,
        )

    @staticmethod
    def _lock_key(asset: MediaAsset) -> str:
        return str(asset.source_path.resolve())

    @staticmethod
    def _infer_error_code(state: PipelineState, exc: BaseException) -> str:
        code = getattr(exc, "error_code", None)
        if code is not None:
            return _code_value(code)
        if isinstance(exc, PipelineBusyError):
            return ErrorCode.RUN_BUSY.value
        if isinstance(exc, ConfigurationError) and state != PipelineState.START:
            return ErrorCode.INVALID_CONFIG.value
        if isinstance(exc, PersistenceError) and state != PipelineState.START:
            return ErrorCode.PERSISTENCE_FAILED.value
        return _STATE_ERROR_CODES.get(state, ErrorCode.UNKNOWN).value

    def _stage_factories(
        self, asset: MediaAsset, settings: PipelineSettings
    ) -> list[tuple[PipelineState, StageFactory, str]]:
        factories: list[tuple[PipelineState, StageFactory, str]] = []
        if asset.needs_normalization:
            factories.append(
                (
                    PipelineState.CONVERTING,
                    lambda: FormatConverter(settings, self.store),
                    f"converting {asset.source_path.name} to {asset.audio_path.name}",
                )
            )
        factories += [
            (
                PipelineState.TRANSCRIBING,
                lambda: Transcriber(settings, self.store),
                f"transcribing {asset.audio_path.name}",
            ),
            (
                PipelineState.SUMMARIZING,
                lambda: Summarizer(settings),
                f"summarizing {asset.transcript_path.name}",
            ),
            (
                PipelineState.SAVING,
                lambda: SummaryWriter(self.store),
                f"saving {asset.summary_path.name}",
            ),
        ]
        return factories

    async def _check_source(self, asset: MediaAsset, settings: PipelineSettings) -> None:
        if asset.extension not in settings.supported_extensions:
            raise ConfigurationError(
                f"unsupported media extension {asset.extension!r} "
                f"(supported: {', '.join(settings.supported_extensions)})"
            )
        if not await self.store.exists(asset.source_path):
            raise ConfigurationError(f"source not found: {asset.source_path}")

    async def _run_locked(
        self,
        asset: MediaAsset,
        settings: PipelineSettings,
        reporter: ProgressReporter,
    ) -> PipelineResult:
        state = PipelineState.START
        run_started = time.monotonic()
        await reporter.report(state, f"processing {asset.source_path.name}")
        try:
            await self._check_source(asset, settings)
            context: PipelineContext = {"asset": asset, "audio_path": str(asset.source_path)}

            for stage_state, make_stage, message in self._stage_factories(asset, settings):
                state = stage_state
                await reporter.report(state, message)
                started = time.monotonic()
                stage = make_stage()
                try:
                    context = await stage.execute(context)
                finally:
                    await stage.close()
                logger.info(
                    "stage done (source=%s, stage=%s, duration_ms=%s)",
                    asset.source_path,
                    stage.name,
                    int((time.monotonic() - started) * 1000),
                )
        except asyncio.CancelledError:
            logger.warning("run cancelled (source=%s, stage=%s)", asset.source_path, state.value)
            raise
        except Exception as exc:
            logger.exception("stage failed (source=%s, stage=%s)", asset.source_path, state.value)
            error = StageExecutionError(
                state.value,
                str(exc),
                source_path=str(asset.source_path),
                error_code=self._infer_error_code(state, exc),
            )
            await reporter.report(PipelineState.ERROR, str(error))
            raise error from exc

        result = PipelineResult(
            source_path=asset.source_path,
            summary_text=context["summary_text"],
            summary_path=Path(context["summary_path"]),
            transcript_path=asset.transcript_path,
            chunk_count=len(context.get("chunks") or []),
        )
        logger.info(
            "run done (source=%s, chunks=%s, duration_ms=%s)",
            asset.source_path,
            result.chunk_count,
            int((time.monotonic() - run_started) * 1000),
        )
        await reporter.report(PipelineState.DONE, f"summary saved to {result.summary_path}")
        return result

    async def run(
        self,
        source_path: str | Path,
        *,
        progress_reporter: ProgressReporter | None = None,
    ) -> PipelineResult:
        """Run the whole pipeline; raise `StageExecutionError` tagged with the failing stage."""
        settings = self._settings
        reporter = progress_reporter or self.progress_reporter
        asset = self.asset_for(source_path, settings)
        key = self._lock_key(asset)
        wait = settings.concurrent_runs == "wait"

        if wait and self.locks.is_running(key):
            await reporter.report(
                PipelineState.START, f"waiting for the running job on {asset.source_path.name}"
            )
        try:
            async with self.locks.hold(key, wait=wait):
                return await self._run_locked(asset, settings, reporter)
        except PipelineBusyError as exc:
            error = StageExecutionError(
                PipelineState.START.value,
                str(exc),
                source_path=str(asset.source_path),
                error_code=ErrorCode.RUN_BUSY,
            )
            await reporter.report(PipelineState.ERROR, str(error))
            raise error from exc

    async def run_outcome(
        self,
        source_path: str | Path,
        *,
        progress_reporter: ProgressReporter | None = None,
    ) -> PipelineOutcome:
        """Like `run()`, but return a tagged outcome instead of raising."""
        try:
            result = await self.run(source_path, progress_reporter=progress_reporter)
        except StageExecutionError as exc:
            return PipelineOutcome(state=PipelineState.ERROR, error=exc)
        return PipelineOutcome(state=PipelineState.DONE, result=result)

    def submit(
        self,
        source_path: str | Path,
        *,
        progress_reporter: ProgressReporter | None = None,
    ) -> asyncio.Task[PipelineOutcome]:
        """Start a run in the background; `cancel()` can stop it later."""
        key = self._lock_key(self.asset_for(source_path))
        task = asyncio.create_task(
            self.run_outcome(source_path, progress_reporter=progress_reporter),
            name=f"audiodigest:{key}",
        )
        self._tasks.setdefault(key, set()).add(task)

        def _forget(done: asyncio.Task[PipelineOutcome]) -> None:
            tasks = self._tasks.get(key)
            if tasks is not None:
                tasks.discard(done)
                if not tasks:
                    self._tasks.pop(key, None)

        task.add_done_callback(_forget)
        return task

    def cancel(self, source_path: str | Path) -> int:
        """Cancel submitted runs for `source_path`; return how many were signalled.

        Cancellation kills running child processes and aborts in-flight requests.
        """
        key = self._lock_key(self.asset_for(source_path))
        count = 0
        for task in list(self._tasks.get(key, ())):
            if not task.done():
                task.cancel()
                count += 1
        if count:
            logger.info("cancel requested (source=%s, runs=%s)", key, count)
        return count
