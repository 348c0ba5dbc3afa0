"""Configuration management using pydantic-settings."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel, to_snake
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict, SettingsError

from audiodigest.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_ENV_FILES = (".env", "../.env")

DEFAULT_SUMMARY_PROMPT = "请总结以下音频转录的内容，提取关键信息和要点："
DEFAULT_AI_ENDPOINT = "https://api.openai.com/v1/chat/completions"

SUPPORTED_EXTENSIONS = ("mp3", "wav", "ogg", "flac", "mp4", "m4a", "webm")
NORMALIZE_EXTENSIONS = ("webm",)


def _normalize_extensions(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        value = value.split(",")
    out: list[str] = []
    for item in value or ():
        ext = str(item or "").strip().lower().lstrip(".")
        if ext and ext not in out:
            out.append(ext)
    return tuple(out)


class PipelineSettings(BaseSettings):
    """Settings snapshot used by one pipeline run.

    Instances are frozen; use `SettingsStore.update()` (or `with_changes()`)
    to derive a new snapshot.
    """

    model_config = SettingsConfigDict(
        env_prefix="AUDIODIGEST_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # External tools
    ffmpeg_path: str = "ffmpeg"
    whisper_cli_path: str = "whisper"
    whisper_model_path: str = ""
    whisper_language: str = "zh"
    transcript_format: str = "srt"
    process_timeout_s: float | None = Field(default=None, gt=0)

    # Summarization
    summary_prompt: str = DEFAULT_SUMMARY_PROMPT
    ai_endpoint: str = DEFAULT_AI_ENDPOINT
    ai_model: str = "gpt-3.5-turbo"
    ai_api_key: str = ""
    ai_temperature: float = Field(default=0.3, ge=0, le=2)
    ai_timeout_s: float = Field(default=120.0, gt=0)
    ai_max_attempts: int = Field(
        default=1,
        ge=1,
        description="1 disables retries; >1 retries 429/5xx/transport errors.",
    )
    chunk_max_chars: int = Field(default=4000, ge=1)

    # Media handling
    # NoDecode: env values arrive as comma-separated strings, not JSON.
    supported_extensions: Annotated[tuple[str, ...], NoDecode] = SUPPORTED_EXTENSIONS
    normalize_extensions: Annotated[tuple[str, ...], NoDecode] = NORMALIZE_EXTENSIONS
    base_dir: str | None = None

    concurrent_runs: Literal["wait", "reject"] = "wait"

    @field_validator("supported_extensions", "normalize_extensions", mode="before")
    @classmethod
    def _clean_extensions(cls, value: Any) -> tuple[str, ...]:
        return _normalize_extensions(value)

    @field_validator("transcript_format", "whisper_language")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        value = str(value or "").strip().lstrip(".")
        if not value:
            raise ValueError("must not be empty")
        return value

    def with_changes(self, **changes: Any) -> "PipelineSettings":
        """Return a validated copy with `changes` applied (keys in either case style)."""
        normalized: dict[str, Any] = {}
        for key, value in changes.items():
            name = to_snake(str(key))
            if name not in type(self).model_fields:
                raise ConfigurationError(f"Unknown setting: {key!r}")
            normalized[name] = value
        data = self.model_dump()
        data.update(normalized)
        try:
            return type(self)(**data)
        except (ValidationError, SettingsError) as exc:
            raise ConfigurationError(f"Invalid settings: {exc}") from exc

    def to_record(self) -> dict[str, Any]:
        """Serialize to the persisted camelCase record."""
        record: dict[str, Any] = {}
        for name, value in self.model_dump().items():
            if isinstance(value, tuple):
                value = list(value)
            record[to_camel(name)] = value
        return record

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "PipelineSettings":
        known = cls.model_fields
        data = {}
        for key, value in (record or {}).items():
            name = to_snake(str(key))
            if name in known:
                data[name] = value
            else:
                logger.debug("ignore unknown persisted setting %r", key)
        try:
            return cls(**data)
        except (ValidationError, SettingsError) as exc:
            raise ConfigurationError(f"Invalid persisted settings: {exc}") from exc


class SettingsStore:
    """JSON-backed persistence for `PipelineSettings`.

    Defaults are overlaid by `AUDIODIGEST_*` env vars, then by the stored record.
    Every update writes the full record back.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._current: PipelineSettings | None = None

    @property
    def current(self) -> PipelineSettings:
        if self._current is None:
            return self.load()
        return self._current

    def load(self) -> PipelineSettings:
        record: dict[str, Any] = {}
        if self.path.exists():
            try:
                raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
            except (OSError, json.JSONDecodeError) as exc:
                raise ConfigurationError(f"Cannot read settings file {self.path}: {exc}") from exc
            if not isinstance(raw, dict):
                raise ConfigurationError(f"Settings file {self.path} must contain a JSON object")
            record = raw
        self._current = PipelineSettings.from_record(record)
        logger.debug("settings loaded (path=%s, stored_keys=%s)", self.path, len(record))
        return self._current

    def save(self, settings: PipelineSettings) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(settings.to_record(), ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
        except OSError as exc:
            raise ConfigurationError(f"Cannot write settings file {self.path}: {exc}") from exc
        self._current = settings

    def update(self, **changes: Any) -> PipelineSettings:
        updated = self.current.with_changes(**changes)
        self.save(updated)
        logger.info("settings updated (keys=%s)", ",".join(sorted(changes)))
        return updated


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
    console: bool = True
    file: str | None = None
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=0)
    backup_count: int = Field(default=5, ge=0)


class Settings(BaseSettings):
    """Process-level settings (where things live, how to log)."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILES, env_file_encoding="utf-8", extra="ignore"
    )

    settings_file: str = "./audiodigest.json"
    log_dir: str = "./logs"

    logging: LoggingSettings = LoggingSettings()

    def settings_store(self) -> SettingsStore:
        return SettingsStore(self.settings_file)
