"""audiodigest exception hierarchy."""

from __future__ import annotations

from audiodigest.error_codes import ErrorCode


class AudioDigestError(Exception):
    """Base error for audiodigest."""


class ConfigurationError(AudioDigestError):
    """Raised when configuration or inputs are invalid."""


class ProviderError(AudioDigestError):
    """Raised when an external provider call fails."""

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        error_code: ErrorCode | str | None = None,
    ) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message
        self.error_code = error_code


class ExternalProcessError(ProviderError):
    """An external tool exited non-zero or did not produce its output."""

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        returncode: int | None = None,
        stderr: str = "",
        error_code: ErrorCode | str | None = None,
    ) -> None:
        super().__init__(provider, message, error_code=error_code)
        self.returncode = returncode
        self.stderr = stderr


class ConversionError(ExternalProcessError):
    """Raised when the audio transcoder fails."""

    def __init__(self, message: str, *, returncode: int | None = None, stderr: str = "") -> None:
        super().__init__(
            "ffmpeg",
            message,
            returncode=returncode,
            stderr=stderr,
            error_code=ErrorCode.CONVERSION_FAILED,
        )


class TranscriptionError(ExternalProcessError):
    """Raised when the speech-to-text tool fails or its output is missing."""

    def __init__(self, message: str, *, returncode: int | None = None, stderr: str = "") -> None:
        super().__init__(
            "whisper",
            message,
            returncode=returncode,
            stderr=stderr,
            error_code=ErrorCode.TRANSCRIPTION_FAILED,
        )


class SummarizationError(AudioDigestError):
    """Raised when a chunk could not be summarized."""

    def __init__(
        self,
        message: str,
        *,
        chunk_index: int | None = None,
        error_code: ErrorCode | str | None = ErrorCode.LLM_FAILED,
    ) -> None:
        prefix = "summarize"
        if chunk_index is not None:
            prefix = f"{prefix} (chunk={chunk_index})"
        super().__init__(f"{prefix}: {message}")
        self.message = message
        self.chunk_index = chunk_index
        self.error_code = error_code


class MissingCredentialError(ConfigurationError, SummarizationError):
    """Raised before any request when no API key is configured."""

    def __init__(self, message: str = "aiApiKey is not configured") -> None:
        SummarizationError.__init__(self, message, error_code=ErrorCode.MISSING_CREDENTIAL)


class PersistenceError(AudioDigestError):
    """Raised when an artifact cannot be read or written."""


class ArtifactNotFoundError(PersistenceError):
    """Raised when an expected artifact is missing."""


class PipelineBusyError(AudioDigestError):
    """Raised when a run for the same source is already in flight."""

    def __init__(self, source_path: str) -> None:
        super().__init__(f"a run is already in progress for {source_path}")
        self.source_path = source_path


class StageExecutionError(AudioDigestError):
    """Raised when a pipeline stage fails."""

    def __init__(
        self,
        stage: str,
        message: str,
        *,
        source_path: str | None = None,
        error_code: ErrorCode | str | None = None,
    ) -> None:
        prefix = f"{stage}"
        if source_path:
            prefix = f"{prefix} (source={source_path})"
        super().__init__(f"{prefix}: {message}")
        self.stage = stage
        self.source_path = source_path
        self.message = message
        self.error_code = error_code.value if isinstance(error_code, ErrorCode) else error_code
