"""
Response classification for API calls.

Turns a raw outcome into exactly one ClassifiedError:
- transport failures (no response): timeout_error / network_error
- HTML fallback pages served in place of the API: service_unavailable_error
- real 4xx/5xx responses: classify(status, body)

Everything here is pure data transformation with no I/O.
"""

import json
from typing import Any

from client_core.errors.exceptions import (
    NETWORK_ERROR_CODE,
    SERVICE_UNAVAILABLE_CODE,
    TIMEOUT_CODE,
    ClassifiedError,
    HttpError,
    NetworkError,
    ServiceUnavailableError,
    StepUpRejectedError,
    TransportTimeoutError,
)

# Backend field carrying the symbolic error code
ERROR_CODE_FIELD = "errorCode"

# 401 codes that reject a step-up challenge instead of the session
STEP_UP_CODES = frozenset({"INVALID_2FA_CODE"})

NETWORK_ERROR_MESSAGE = (
    "Could not connect to the server. Check your connection and try again."
)
SERVICE_UNAVAILABLE_MESSAGE = (
    "Service temporarily unavailable. Please try again in a few moments."
)

_HTML_PREFIXES = ("<!doctype html", "<html")


def parse_body(text: str) -> Any:
    """Parse a response body read as text; unparseable text is returned as-is."""
    if not text:
        return {}
    try:
        return json.loads(text)
    except ValueError:
        return text


def looks_like_html(content_type: str | None, text: str) -> bool:
    """True when the response declares HTML and the body is an HTML document."""
    if not content_type or "text/html" not in content_type.lower():
        return False
    return text.lstrip()[:20].lower().startswith(_HTML_PREFIXES)


def extract_message(status: int, body: Any) -> str:
    """Prefer body.message, then body.error, then a generic message."""
    if isinstance(body, dict):
        for field in ("message", "error"):
            value = body.get(field)
            if value:
                return str(value)
    return f"Request failed ({status})"


def extract_code(body: Any) -> str | None:
    if isinstance(body, dict):
        code = body.get(ERROR_CODE_FIELD)
        if code:
            return str(code)
    return None


def classify(status: int, body: Any) -> ClassifiedError:
    """
    Build the ClassifiedError for an HTTP error response.

    Args:
        status: HTTP status code of the response
        body: Parsed body (dict, list or raw text)

    Returns:
        StepUpRejectedError for a 401 carrying a step-up code, else HttpError
    """
    message = extract_message(status, body)
    code = extract_code(body)
    error_class = (
        StepUpRejectedError if status == 401 and code in STEP_UP_CODES else HttpError
    )
    return error_class(message, status=status, code=code, payload=body)


def timeout_error(timeout_ms: int, cause: Exception | None = None) -> TransportTimeoutError:
    return TransportTimeoutError(
        f"Request timed out after {timeout_ms} ms. Please try again.",
        status=0,
        code=TIMEOUT_CODE,
        cause=cause,
        context={"timeout_ms": timeout_ms},
    )


def network_error(cause: Exception | None = None) -> NetworkError:
    return NetworkError(
        NETWORK_ERROR_MESSAGE,
        status=0,
        code=NETWORK_ERROR_CODE,
        cause=cause,
        context={"error_type": type(cause).__name__} if cause else None,
    )


def service_unavailable_error(body: str | None = None) -> ServiceUnavailableError:
    """HTML shell received instead of an API response; reported as 503."""
    return ServiceUnavailableError(
        SERVICE_UNAVAILABLE_MESSAGE,
        status=503,
        code=SERVICE_UNAVAILABLE_CODE,
        payload=body,
    )


__all__ = [
    "parse_body",
    "looks_like_html",
    "extract_message",
    "extract_code",
    "classify",
    "timeout_error",
    "network_error",
    "service_unavailable_error",
    "STEP_UP_CODES",
    "NETWORK_ERROR_MESSAGE",
    "SERVICE_UNAVAILABLE_MESSAGE",
]
