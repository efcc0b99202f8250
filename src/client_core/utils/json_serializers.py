"""Shared JSON serialization utilities for type-safe JSON encoding."""

from datetime import date, datetime
from pathlib import Path
from typing import Any


def _serialize_known_type(obj: Any) -> tuple[bool, Any]:
    """Try to serialize by known type. Returns (handled, result)."""
    if isinstance(obj, (datetime, date)):
        return True, obj.isoformat()
    if isinstance(obj, Path):
        return True, str(obj)
    if isinstance(obj, (set, frozenset)):
        return True, sorted(str(item) for item in obj)
    return False, None


def json_serializer(obj: Any) -> Any:
    """
    JSON ``default=`` hook for log records and CLI output.

    - datetime/date -> ISO 8601 string
    - Path -> string
    - set/frozenset -> sorted list of strings
    - Enums -> value
    - Everything else -> string (fallback)

    Args:
        obj: Object to serialize

    Returns:
        JSON-serializable representation
    """
    handled, result = _serialize_known_type(obj)
    if handled:
        return result
    if hasattr(obj, "value"):
        return obj.value
    return str(obj)


__all__ = ["json_serializer"]
