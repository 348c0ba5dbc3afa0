"""Stage abstractions for pipeline execution."""

from __future__ import annotations

from abc import ABC, abstractmethod

from audiodigest.models.pipeline import PipelineState
from audiodigest.pipeline.context import PipelineContext


class Stage(ABC):
    """One step of a run; `state` is the orchestrator state it runs in."""

    state: PipelineState

    @property
    def name(self) -> str:
        return self.state.value

    @abstractmethod
    async def execute(self, context: PipelineContext) -> PipelineContext:
        """Run the stage and return the updated context."""

    @abstractmethod
    def validate_input(self, context: PipelineContext) -> bool:
        """Whether the context carries what this stage needs."""

    async def close(self) -> None:
        return None
