"""
Mongo Cache - Error Types

Defines the exception hierarchy for the cache store.
All exceptions raised by this package inherit from MongoCacheError.

Storage-layer failures (pymongo exceptions) are NOT wrapped: they propagate
to the caller unmodified. Only the cases below get their own types.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """
    Standard error codes for structured error reporting.

    Used by integrating layers that translate cache failures into responses.
    """

    # Input validation errors
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_PARAMETER_VALUE = "INVALID_PARAMETER_VALUE"

    # Configuration errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Cache errors
    CACHE_FAILURE = "CACHE_FAILURE"
    MALFORMED_PAYLOAD = "MALFORMED_PAYLOAD"
    PARTIAL_BULK_WRITE = "PARTIAL_BULK_WRITE"

    # Internal errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class MongoCacheError(Exception):
    """Base exception for all Mongo Cache errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for error responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(MongoCacheError):
    """Raised when configuration is invalid or the store cannot be built from it."""


class ValidationError(MongoCacheError):
    """Raised when a cache operation receives invalid arguments."""


class CacheError(MongoCacheError):
    """Base exception for cache operation errors."""


class MalformedPayloadError(CacheError):
    """
    Raised when a stored payload cannot be used as requested.

    Covers increment/decrement against a non-numeric value and payloads the
    configured serializer cannot decode.
    """

    def __init__(self, key: str, reason: str, details: dict[str, Any] | None = None):
        message = f"Malformed payload for key '{key}': {reason}"
        error_details = {"key": key, **(details or {})}
        super().__init__(message, error_details)
        self.key = key


class BulkWriteError(CacheError):
    """
    Raised when put_many fails partway through.

    Writes issued before the failing key are already committed and are not
    rolled back. The original storage exception is chained as __cause__.
    """

    def __init__(self, failed_key: str, written_keys: list[str], error: Exception):
        message = f"Bulk write failed at key '{failed_key}' after {len(written_keys)} successful write(s): {error}"
        super().__init__(
            message,
            {
                "failed_key": failed_key,
                "written_keys": list(written_keys),
                "error": str(error),
            },
        )
        self.failed_key = failed_key
        self.written_keys = list(written_keys)


def extract_error_code(error: Exception) -> ErrorCode:
    """
    Extract appropriate ErrorCode from an exception.

    Args:
        error: Exception to categorize

    Returns:
        Appropriate ErrorCode for the exception
    """
    if isinstance(error, MalformedPayloadError):
        return ErrorCode.MALFORMED_PAYLOAD

    if isinstance(error, BulkWriteError):
        return ErrorCode.PARTIAL_BULK_WRITE

    if isinstance(error, CacheError):
        return ErrorCode.CACHE_FAILURE

    if isinstance(error, ValidationError):
        return ErrorCode.INVALID_INPUT

    if isinstance(error, ConfigurationError):
        return ErrorCode.CONFIGURATION_ERROR

    return ErrorCode.INTERNAL_ERROR
