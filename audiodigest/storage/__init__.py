"""Artifact storage."""

from __future__ import annotations

from audiodigest.storage.artifact_store import ArtifactStore, LocalArtifactStore


def get_artifact_store(base_dir: str | None = None) -> ArtifactStore:
    return LocalArtifactStore(base_dir)


__all__ = ["ArtifactStore", "LocalArtifactStore", "get_artifact_store"]
