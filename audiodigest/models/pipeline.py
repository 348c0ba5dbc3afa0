"""Pipeline run state and results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from audiodigest.exceptions import StageExecutionError


class PipelineState(str, Enum):
    START = "start"
    CONVERTING = "converting"
    TRANSCRIBING = "transcribing"
    SUMMARIZING = "summarizing"
    SAVING = "saving"
    DONE = "done"
    ERROR = "error"

    @property
    def terminal(self) -> bool:
        return self in {PipelineState.DONE, PipelineState.ERROR}


@dataclass(frozen=True)
class PipelineResult:
    source_path: Path
    summary_text: str
    summary_path: Path
    transcript_path: Path
    chunk_count: int


@dataclass(frozen=True)
class PipelineOutcome:
    """Terminal outcome of a run: either a result or a stage-tagged error."""

    state: PipelineState
    result: PipelineResult | None = None
    error: StageExecutionError | None = None

    @property
    def ok(self) -> bool:
        return self.state == PipelineState.DONE

    @property
    def failed_stage(self) -> str | None:
        return self.error.stage if self.error is not None else None
