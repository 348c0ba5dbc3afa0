"""Pipeline orchestration.

This package is imported by pipeline stages for type hints. Keep imports lazy to
avoid circular-import issues between `audiodigest.pipeline` and `audiodigest.stages`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from audiodigest.pipeline.orchestrator import PipelineOrchestrator

__all__ = ["PipelineOrchestrator"]


def __getattr__(name: str) -> Any:
    if name == "PipelineOrchestrator":
        from audiodigest.pipeline.orchestrator import PipelineOrchestrator

        return PipelineOrchestrator
    raise AttributeError(name)
