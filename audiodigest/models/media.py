"""Media asset and derived artifact paths."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

NORMALIZED_AUDIO_SUFFIX = ".mp3"
TRANSCRIPT_SUFFIX = "-transcription"
SUMMARY_SUFFIX = "-summary.md"


@dataclass(frozen=True)
class ArtifactPaths:
    audio: Path
    transcript: Path
    summary: Path


def _extension(path: Path) -> str:
    return path.suffix.lower().lstrip(".")


def _replace_extension(path: Path, suffix: str) -> Path:
    """Strip the last extension of `path` (if any) and append `suffix`."""
    return path.with_name(path.stem + suffix)


def transcript_path_for(audio_path: str | Path, transcript_format: str = "srt") -> Path:
    return _replace_extension(Path(audio_path), f"{TRANSCRIPT_SUFFIX}.{transcript_format}")


def resolve_artifact_paths(
    source_path: str | Path,
    normalize_extensions: Iterable[str] = ("webm",),
    *,
    transcript_format: str = "srt",
) -> ArtifactPaths:
    """Map a source media path to its derived artifact paths. Pure, no I/O.

    - audio: extension replaced by `.mp3` for formats needing normalization,
      otherwise the source itself
    - transcript: audio path with the extension replaced by `-transcription.<fmt>`
    - summary: source path with the extension replaced by `-summary.md`
    """
    source = Path(source_path)
    ext = _extension(source)
    wanted = {str(e).lower().lstrip(".") for e in normalize_extensions}
    audio = _replace_extension(source, NORMALIZED_AUDIO_SUFFIX) if ext in wanted else source
    transcript = transcript_path_for(audio, transcript_format)
    summary = _replace_extension(source, SUMMARY_SUFFIX)
    return ArtifactPaths(audio=audio, transcript=transcript, summary=summary)


@dataclass(frozen=True)
class MediaAsset:
    """A source media file and the artifacts derived from it."""

    source_path: Path
    extension: str
    needs_normalization: bool
    audio_path: Path
    transcript_path: Path
    summary_path: Path

    @classmethod
    def from_path(
        cls,
        source_path: str | Path,
        *,
        normalize_extensions: Iterable[str] = ("webm",),
        transcript_format: str = "srt",
        base_dir: str | Path | None = None,
    ) -> "MediaAsset":
        source = Path(source_path)
        if base_dir and not source.is_absolute():
            source = Path(base_dir) / source
        normalize_extensions = tuple(normalize_extensions)
        paths = resolve_artifact_paths(
            source, normalize_extensions, transcript_format=transcript_format
        )
        return cls(
            source_path=source,
            extension=_extension(source),
            needs_normalization=paths.audio != source,
            audio_path=paths.audio,
            transcript_path=paths.transcript,
            summary_path=paths.summary,
        )
