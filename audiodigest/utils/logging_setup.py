"""Logging initialization for the CLI and embedding hosts."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from audiodigest.config import LoggingSettings, Settings

# Libraries that log every request at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def _handlers(config: LoggingSettings, log_dir: str, level: int) -> list[logging.Handler]:
    formatter = logging.Formatter(fmt=str(config.format), datefmt=str(config.datefmt))
    handlers: list[logging.Handler] = []
    if config.console:
        handlers.append(logging.StreamHandler())
    if config.file:
        file_path = Path(str(config.file))
        if not file_path.is_absolute():
            file_path = Path(log_dir) / file_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                file_path,
                maxBytes=int(config.max_bytes),
                backupCount=int(config.backup_count),
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def setup_logging(settings: Settings, *, level: str | None = None) -> None:
    """Attach handlers to the `audiodigest` logger.

    Only the package logger is touched, so a host application keeps its own
    root configuration. `level` overrides `LOG_LEVEL`. Repeated calls are no-ops.
    """
    logger = logging.getLogger("audiodigest")
    if getattr(logger, "_audiodigest_configured", False):
        return

    level_name = str(level or settings.logging.level or "INFO").upper()
    resolved = getattr(logging, level_name, logging.INFO)

    logger.setLevel(resolved)
    logger.handlers = _handlers(settings.logging, settings.log_dir, resolved)
    logger.propagate = False
    if resolved > logging.DEBUG:
        for name in _CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    setattr(logger, "_audiodigest_configured", True)
