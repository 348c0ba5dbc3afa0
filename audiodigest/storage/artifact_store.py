"""Artifact store interface and local implementation.

The store is the pipeline's cache layer: normalized audio, transcripts and
summaries all live next to the source media and are looked up by path.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from audiodigest.exceptions import ArtifactNotFoundError, PersistenceError


class ArtifactStore(ABC):
    @abstractmethod
    async def exists(self, path: str | Path) -> bool:
        """Return True when an artifact exists at `path`."""

    @abstractmethod
    async def save(self, path: str | Path, data: bytes) -> str:
        """Create or overwrite the artifact and return its resolved path."""

    @abstractmethod
    async def load(self, path: str | Path) -> bytes:
        """Load artifact bytes."""

    @abstractmethod
    async def delete(self, path: str | Path) -> bool:
        """Remove the artifact; return False when it did not exist."""

    @abstractmethod
    async def prepare(self, path: str | Path) -> str:
        """Make `path` writable by an external tool and return its resolved path."""

    async def save_text(self, path: str | Path, text: str) -> str:
        return await self.save(path, text.encode("utf-8"))

    async def load_text(self, path: str | Path) -> str:
        raw = await self.load(path)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise PersistenceError(f"artifact is not valid UTF-8: {path}") from exc


class LocalArtifactStore(ArtifactStore):
    """Local filesystem artifact store."""

    def __init__(self, base_dir: str | None = None) -> None:
        self.base_dir = Path(base_dir) if base_dir else None

    def _path(self, path: str | Path) -> Path:
        p = Path(path)
        if self.base_dir is not None and not p.is_absolute():
            p = self.base_dir / p
        return p

    async def exists(self, path: str | Path) -> bool:
        return self._path(path).is_file()

    async def save(self, path: str | Path, data: bytes) -> str:
        target = self._path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise PersistenceError(f"cannot write {target}: {exc}") from exc
        return str(target)

    async def load(self, path: str | Path) -> bytes:
        target = self._path(path)
        try:
            return target.read_bytes()
        except FileNotFoundError as exc:
            raise ArtifactNotFoundError(str(target)) from exc
        except OSError as exc:
            raise PersistenceError(f"cannot read {target}: {exc}") from exc

    async def prepare(self, path: str | Path) -> str:
        target = self._path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(f"cannot create directory for {target}: {exc}") from exc
        return str(target)

    async def delete(self, path: str | Path) -> bool:
        target = self._path(path)
        try:
            target.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise PersistenceError(f"cannot delete {target}: {exc}") from exc
        return True
