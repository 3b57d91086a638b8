"""Error handling for WASM runtime acquisition."""
from typing import Any, Dict, Optional

from mcp.types import (
    ErrorData,
    PARSE_ERROR,
    INVALID_REQUEST,
    INVALID_PARAMS,
    INTERNAL_ERROR
)

from wasm_runtime.logging import get_logger

logger = get_logger(__name__)


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None
) -> None:
    """Log an error with context."""
    error_info = {
        "event": "runtime_error",
        "error_type": error.__class__.__name__,
        "error_message": str(error)
    }
    if context:
        error_info["context"] = context
    if isinstance(error, WasmRuntimeError):
        error_info["code"] = error.code
        error_info["details"] = error.details

    logger.error(error_info)


class WasmRuntimeError(Exception):
    """Base error class for runtime acquisition."""
    def __init__(
        self,
        message: str,
        code: int = INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.code = code
        self.details = details or {}

    def to_error_data(self) -> ErrorData:
        """Convert to ErrorData format."""
        return ErrorData(
            code=self.code,
            message=str(self),
            data=self.details
        )


class RuntimeNotFoundError(WasmRuntimeError):
    """No runtime exists for a language/version pair.

    Nothing in this package raises it; it is kept for callers that look
    runtimes up by other means.
    """
    def __init__(self, language: str, version: str):
        super().__init__(
            f"Runtime not found: {language} {version}",
            code=INVALID_REQUEST,
            details={"language": language, "version": version}
        )


class NetworkError(WasmRuntimeError):
    """Transport failure or non-success HTTP status."""
    def __init__(self, url: str, reason: str, status: Optional[int] = None):
        super().__init__(
            f"Network error: {reason}",
            code=INTERNAL_ERROR,
            details={"url": url, "reason": reason, "status": status}
        )
        self.url = url
        self.status = status


class IntegrityCheckError(WasmRuntimeError):
    """Downloaded or cached bytes do not hash to the expected digest."""
    def __init__(self, expected: str, actual: str):
        super().__init__(
            f"Integrity check failed: expected {expected}, got {actual}",
            code=INTERNAL_ERROR,
            details={"expected": expected, "actual": actual}
        )
        self.expected = expected
        self.actual = actual


class ManifestParseError(WasmRuntimeError):
    """Manifest document is not valid JSON or has the wrong shape."""
    def __init__(self, source: str, reason: str):
        super().__init__(
            f"JSON parsing error: {reason}",
            code=PARSE_ERROR,
            details={"source": source, "reason": reason}
        )


class InvalidLanguageError(WasmRuntimeError):
    """Language string matches no known alias."""
    def __init__(self, value: str):
        super().__init__(
            f"Invalid language: {value}",
            code=INVALID_PARAMS,
            details={"value": value}
        )
        self.value = value


class InvalidVersionError(WasmRuntimeError):
    """Version string cannot be used as a single cache file name."""
    def __init__(self, value: str):
        super().__init__(
            f"Invalid version: {value!r}",
            code=INVALID_PARAMS,
            details={"value": value}
        )
        self.value = value


class ManifestNotFoundError(WasmRuntimeError):
    def __init__(self, language: str):
        super().__init__(
            f"Manifest not found for {language}",
            code=INVALID_REQUEST,
            details={"language": language}
        )
        self.language = language


class VersionNotFoundError(WasmRuntimeError):
    def __init__(self, language: str, version: str):
        super().__init__(
            f"Version {version} not found for {language}",
            code=INVALID_PARAMS,
            details={"language": language, "version": version}
        )
        self.language = language
        self.version = version


class CacheDirError(WasmRuntimeError):
    """The OS cache directory could not be determined."""
    def __init__(self, reason: str):
        super().__init__(
            f"Could not determine cache directory: {reason}",
            code=INTERNAL_ERROR,
            details={"reason": reason}
        )
