"""Context variables for structured logging."""

from contextvars import ContextVar
from typing import Dict, Optional

_request_id: ContextVar[str] = ContextVar("request_id", default="")
_trace_id: ContextVar[str] = ContextVar("trace_id", default="")
_session_id: ContextVar[str] = ContextVar("session_id", default="")


def set_log_context(
    request_id: Optional[str] = None,
    trace_id: Optional[str] = None,
    session_id: Optional[str] = None,
) -> None:
    if request_id is not None:
        _request_id.set(request_id)
    if trace_id is not None:
        _trace_id.set(trace_id)
    if session_id is not None:
        _session_id.set(session_id)


def get_log_context() -> Dict[str, str]:
    return {
        "request_id": _request_id.get(),
        "trace_id": _trace_id.get(),
        "session_id": _session_id.get(),
    }


def clear_log_context() -> None:
    _request_id.set("")
    _trace_id.set("")
    _session_id.set("")
