"""
Unified exception hierarchy for the API client.

Every request failure is normalized into a ClassifiedError subclass so that
callers, the auto-logout rule and the retry loop all consume one shape:
status, symbolic code, message, network flag and raw payload.
"""

from typing import Any

# Import enums from canonical source to avoid duplicate enum issues
# (comparing enums from different classes always returns False)
from client_core.types import NETWORK_KINDS, ErrorCategory, ErrorKind

# Symbolic codes for failures that never reached the API
TIMEOUT_CODE = "TIMEOUT"
NETWORK_ERROR_CODE = "NETWORK_ERROR"
SERVICE_UNAVAILABLE_CODE = "SERVICE_UNAVAILABLE"


class ClientError(Exception):
    """
    Base exception for all client errors.

    Attributes:
        message: Human-readable error description
        category: Error classification for handling decisions
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        return self.category == ErrorCategory.TRANSIENT

    def __str__(self) -> str:
        return self.message


class ConfigurationError(ValueError):
    """Invalid or incomplete client settings."""

    pass


# =============================================================================
# Classified Errors
# =============================================================================


class ClassifiedError(ClientError):
    """
    Normalized failure of a single API request.

    Attributes:
        status: HTTP status code, 0 when no response was received
        code: Symbolic error code (backend-supplied or transport code), may be None
        message: User-presentable message
        payload: Raw response body if any (parsed JSON or text)
        kind: ErrorKind of this failure
    """

    kind: ErrorKind = ErrorKind.HTTP_ERROR

    def __init__(
        self,
        message: str,
        status: int = 0,
        code: str | None = None,
        payload: Any = None,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        super().__init__(message, cause, context)
        self.status = status
        self.code = code
        self.payload = payload

    @property
    def is_network_error(self) -> bool:
        """True when the failure happened before a real API response arrived."""
        return self.kind in NETWORK_KINDS

    @property
    def is_retryable(self) -> bool:
        return self.is_network_error

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(status={self.status}, code={self.code!r}, "
            f"message={self.message!r})"
        )


class TransportTimeoutError(ClassifiedError):
    """The per-call deadline elapsed before the exchange completed."""

    kind = ErrorKind.TRANSPORT_TIMEOUT
    category = ErrorCategory.TRANSIENT


class NetworkError(ClassifiedError):
    """DNS failure, refused or reset connection, or any other transport fault."""

    kind = ErrorKind.TRANSPORT_NETWORK_ERROR
    category = ErrorCategory.TRANSIENT


class ServiceUnavailableError(ClassifiedError):
    """An HTML document was served where an API response was expected."""

    kind = ErrorKind.SERVICE_UNAVAILABLE
    category = ErrorCategory.TRANSIENT


class HttpError(ClassifiedError):
    """The API answered with a 4xx/5xx status and a real body."""

    kind = ErrorKind.HTTP_ERROR

    def __init__(
        self,
        message: str,
        status: int = 0,
        code: str | None = None,
        payload: Any = None,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        super().__init__(message, status, code, payload, cause, context)
        self.category = classify_http_status(status)


class StepUpRejectedError(HttpError):
    """401 carrying a step-up challenge code (e.g. wrong one-time code)."""

    kind = ErrorKind.AUTH_STEPUP_REJECTED


class ResponseValidationError(ClientError):
    """
    A 2xx response whose body does not match the expected schema.

    Not a ClassifiedError: it is never retried and never triggers logout.

    Attributes:
        endpoint: API path the payload came from
        payload: Raw response body
    """

    category = ErrorCategory.PERMANENT

    def __init__(
        self,
        message: str,
        endpoint: str,
        payload: Any = None,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        super().__init__(message, cause, context)
        self.endpoint = endpoint
        self.payload = payload


# =============================================================================
# Classification Utilities
# =============================================================================


def classify_http_status(status_code: int) -> ErrorCategory:
    """Classify HTTP status code into error category."""
    if 200 <= status_code < 300:
        return ErrorCategory.UNKNOWN  # Not an error

    if status_code == 401:
        return ErrorCategory.AUTH

    if 400 <= status_code < 500:
        return ErrorCategory.PERMANENT

    if status_code >= 500:
        # A real 5xx body is reported as-is; only transport kinds are retried
        return ErrorCategory.PERMANENT

    return ErrorCategory.UNKNOWN


def is_network_error(exc: BaseException) -> bool:
    """Check if exception is a transport-level ClassifiedError."""
    return isinstance(exc, ClassifiedError) and exc.is_network_error


__all__ = [
    "ClientError",
    "ConfigurationError",
    "ClassifiedError",
    "TransportTimeoutError",
    "NetworkError",
    "ServiceUnavailableError",
    "HttpError",
    "StepUpRejectedError",
    "ResponseValidationError",
    "classify_http_status",
    "is_network_error",
    "TIMEOUT_CODE",
    "NETWORK_ERROR_CODE",
    "SERVICE_UNAVAILABLE_CODE",
]
