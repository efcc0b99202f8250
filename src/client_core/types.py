"""
Core types and protocols used across modules.

This module provides base enums and protocol definitions shared by the
core library and the API client so that error handling, storage and
navigation stay consistent and substitutable in tests.
"""

from enum import Enum
from typing import Optional, Protocol


class ErrorCategory(Enum):
    """
    Coarse classification of errors for handling decisions.

    Categories:
        TRANSIENT: Failures before a usable response arrived
                   (timeouts, refused connections, HTML fallback pages)
        AUTH: Authentication failures (401)
        PERMANENT: Failures that will not change on retry
                   (validation, permission, not found)
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


class ErrorKind(Enum):
    """
    Taxonomy of request failures produced by the response classifier.

    Exactly one kind applies to each failure: either the transport failed
    (no real API response) or the server answered with an HTTP error.
    """

    TRANSPORT_TIMEOUT = "transport_timeout"
    TRANSPORT_NETWORK_ERROR = "transport_network_error"
    SERVICE_UNAVAILABLE = "service_unavailable"
    HTTP_ERROR = "http_error"
    AUTH_STEPUP_REJECTED = "auth_stepup_rejected"


NETWORK_KINDS = frozenset(
    {
        ErrorKind.TRANSPORT_TIMEOUT,
        ErrorKind.TRANSPORT_NETWORK_ERROR,
        ErrorKind.SERVICE_UNAVAILABLE,
    }
)


class Navigator(Protocol):
    """
    Capability to move the user to another location.

    Production hosts wire this to their router; tests use a recorder.
    """

    @property
    def current_path(self) -> str:
        """Path (without query string) the user is currently on."""
        ...

    def redirect_to(self, path: str) -> None:
        """
        Navigate to the given path.

        Args:
            path: Destination path, optionally with a query string
        """
        ...


class KeyValueStorage(Protocol):
    """Protocol for string key/value persistence tiers."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


__all__ = [
    "ErrorCategory",
    "ErrorKind",
    "NETWORK_KINDS",
    "Navigator",
    "KeyValueStorage",
]
