"""
Core library: reusable, transport-agnostic building blocks for the API client.

Modules:
    auth        - Credential storage tiers, token store, logout flag
    resilience  - Fixed-delay retry for transport failures
    logging     - Structured JSON logging with request correlation IDs
    errors      - Classified error hierarchy and HTTP status helpers

Design Principles:
    - No knowledge of specific endpoints or pages
    - All modules are independently testable
    - Async-first where applicable
"""

from .types import ErrorCategory, ErrorKind, KeyValueStorage, Navigator

__version__ = "0.1.0"

__all__ = [
    "ErrorCategory",
    "ErrorKind",
    "KeyValueStorage",
    "Navigator",
]
