"""External tool lookup for the ffmpeg and whisper binaries."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


def _is_explicit_path(value: str) -> bool:
    return os.sep in value or (os.altsep is not None and os.altsep in value)


def resolve_ffmpeg_bin(ffmpeg_bin: str = "ffmpeg") -> str:
    """Resolve the ffmpeg executable.

    An explicit path is used as configured, even when it does not exist, so the
    failure surfaces as a conversion error naming that path. A bare command name
    is looked up on PATH first, then the `imageio-ffmpeg` bundled binary is used
    when that extra is installed.
    """
    ffmpeg_bin = str(Path((ffmpeg_bin or "ffmpeg").strip()).expanduser())
    if _is_explicit_path(ffmpeg_bin):
        return ffmpeg_bin

    found = shutil.which(ffmpeg_bin)
    if found:
        return found

    try:
        import imageio_ffmpeg
    except ImportError:
        return ffmpeg_bin
    try:
        return str(imageio_ffmpeg.get_ffmpeg_exe())
    except Exception as exc:
        logger.warning("failed to resolve bundled ffmpeg (%s); fallback to %r", exc, ffmpeg_bin)
        return ffmpeg_bin


def missing_binary_message(tool: str, binary: str, setting: str, hint: str = "") -> str:
    """Message for a tool that could not be spawned."""
    message = f"{tool} binary not found: {binary}. "
    if hint:
        message += f"{hint}, "
    return message + f"or set {setting} to its full path."
