"""Data models."""

from audiodigest.models.media import ArtifactPaths, MediaAsset, resolve_artifact_paths
from audiodigest.models.pipeline import PipelineOutcome, PipelineResult, PipelineState

__all__ = [
    "ArtifactPaths",
    "MediaAsset",
    "PipelineOutcome",
    "PipelineResult",
    "PipelineState",
    "resolve_artifact_paths",
]
