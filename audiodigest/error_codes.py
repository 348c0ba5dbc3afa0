"""Canonical error codes surfaced to the host/UI."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    UNKNOWN = "UNKNOWN"
    INVALID_MEDIA = "INVALID_MEDIA"
    INVALID_CONFIG = "INVALID_CONFIG"
    MISSING_CREDENTIAL = "MISSING_CREDENTIAL"

    CONVERSION_FAILED = "CONVERSION_FAILED"
    TRANSCRIPTION_FAILED = "TRANSCRIPTION_FAILED"
    LLM_FAILED = "LLM_FAILED"
    LLM_TIMEOUT = "LLM_TIMEOUT"
    LLM_BAD_RESPONSE = "LLM_BAD_RESPONSE"
    PERSISTENCE_FAILED = "PERSISTENCE_FAILED"

    RUN_BUSY = "RUN_BUSY"
