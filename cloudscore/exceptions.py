"""
Custom exception types for cloudscore.

This module defines the hierarchy of exceptions raised by the SDK.
Every failure that reaches a caller goes through a Promise rejection and is
one of these types, so a single ``except CloudScoreError`` covers the SDK:
- Validation errors never leave the process
- Request errors carry the failure kind, the underlying cause and the
  last response body seen, for diagnostics
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class CloudScoreError(Exception):
    """Base exception for all cloudscore errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(CloudScoreError):
    """Raised when a component's configuration is missing or invalid."""

    def __init__(self, component: str, reason: str):
        super().__init__(
            f"Configuration error in {component}: {reason}",
            {"component": component, "reason": reason},
        )
        self.component = component
        self.reason = reason


# ============================================================================
# Validation Errors
# ============================================================================


class ValidationError(CloudScoreError):
    """Base exception for validation errors."""

    pass


class InputValidationError(ValidationError):
    """Raised when caller input fails validation before anything is sent."""

    def __init__(self, field: str, reason: str):
        super().__init__(
            f"Invalid input for '{field}': {reason}", {"field": field, "reason": reason}
        )
        self.field = field
        self.reason = reason


# ============================================================================
# Request Errors
# ============================================================================


class ErrorKind(str, Enum):
    """Which stage of a request failed."""

    TRANSPORT = "transport"
    SERVER = "server"
    DECODING = "decoding"


class RequestError(CloudScoreError):
    """Base exception for a request that was sent and did not produce a result.

    Attributes:
        kind: Stage that failed.
        cause: Underlying exception, if any.
        status: Last HTTP status received, if any.
        body: Last response body received (decoded JSON when possible).
    """

    kind: ErrorKind

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        status: int | None = None,
        body: Any = None,
        url: str | None = None,
    ):
        super().__init__(
            message,
            {"kind": self.kind.value, "status": status, "url": url},
        )
        self.cause = cause
        self.status = status
        self.body = body
        self.url = url


class TransportError(RequestError):
    """Raised when a recoverable transport failure was not retried.

    Covers connection failures, timeouts and 5xx answers once the failure
    hook aborted, or when no hook is configured. Also raised when the hook
    itself raises; ``cause`` is then the hook's exception.
    """

    kind = ErrorKind.TRANSPORT


class ServerError(RequestError):
    """Raised when the server rejects the request (4xx). Never retried."""

    kind = ErrorKind.SERVER


class DecodingError(RequestError):
    """Raised when the request succeeded but the payload is unusable."""

    kind = ErrorKind.DECODING


__all__ = [
    "CloudScoreError",
    "ConfigurationError",
    "ValidationError",
    "InputValidationError",
    "ErrorKind",
    "RequestError",
    "TransportError",
    "ServerError",
    "DecodingError",
]
