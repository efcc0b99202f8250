"""
Error classification and exception hierarchy.

Provides:
- ClientError base class and ConfigurationError
- ClassifiedError hierarchy, one subclass per ErrorKind
- Classification utilities for error handling
"""

from client_core.errors.exceptions import (
    NETWORK_ERROR_CODE,
    SERVICE_UNAVAILABLE_CODE,
    TIMEOUT_CODE,
    # Classified errors
    ClassifiedError,
    # Base classes
    ClientError,
    ConfigurationError,
    HttpError,
    NetworkError,
    ResponseValidationError,
    ServiceUnavailableError,
    StepUpRejectedError,
    TransportTimeoutError,
    # Classification utilities
    classify_http_status,
    is_network_error,
)

__all__ = [
    # Base classes
    "ClientError",
    "ConfigurationError",
    # Classified errors
    "ClassifiedError",
    "TransportTimeoutError",
    "NetworkError",
    "ServiceUnavailableError",
    "HttpError",
    "StepUpRejectedError",
    "ResponseValidationError",
    # Codes
    "TIMEOUT_CODE",
    "NETWORK_ERROR_CODE",
    "SERVICE_UNAVAILABLE_CODE",
    # Classification utilities
    "classify_http_status",
    "is_network_error",
]
