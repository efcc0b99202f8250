"""
Credential store with a primary in-process tier and a durable fallback.

The bearer token lives in two places:

- primary: an attribute of the store, lost when the process restarts
- durable: a KeyValueStorage that survives restarts and is only consulted
  until the primary tier is repopulated

Session-scoped side state (the return URL remembered before a redirect to
login, and the logout flag) lives in a separate session tier.

Thread Safety:
    read/write/clear are serialized by a threading.Lock so no reader ever
    observes only one tier updated.

Example:
    >>> store = TokenStore(durable=JsonFileStorage("state.json"), session=MemoryStorage())
    >>> store.write("eyJ0eXAi...")
    >>> store.read()
    'eyJ0eXAi...'
    >>> store.clear()
    >>> store.read() is None
    True
"""

import logging
import threading
from typing import Optional

from client_core.auth.storage import MemoryStorage
from client_core.types import KeyValueStorage

logger = logging.getLogger(__name__)

# Persisted client state keys
TOKEN_KEY = "admin_token"
LOGOUT_FLAG_KEY = "admin_logging_out"
RETURN_URL_KEY = "returnUrl"


class TokenStore:
    """Two-tier holder for the current bearer credential."""

    def __init__(
        self,
        durable: Optional[KeyValueStorage] = None,
        session: Optional[KeyValueStorage] = None,
    ):
        self._durable = durable if durable is not None else MemoryStorage()
        self._session = session if session is not None else MemoryStorage()
        self._token: Optional[str] = None
        self._lock = threading.Lock()

    def read(self) -> Optional[str]:
        """
        Return the current credential.

        Prefers the primary tier, then the durable fallback (which also
        repopulates primary), else None.
        """
        with self._lock:
            if self._token:
                return self._token
            fallback = self._durable.get(TOKEN_KEY)
            if fallback:
                self._token = fallback
                return fallback
            return None

    def write(self, token: str) -> None:
        """Store the credential in both tiers."""
        if not token:
            raise ValueError("Cannot store an empty credential")
        with self._lock:
            self._token = token
            self._durable.set(TOKEN_KEY, token)

    def clear(self) -> None:
        """Empty both tiers and session-scoped artifacts (return URL)."""
        with self._lock:
            self._token = None
            self._durable.remove(TOKEN_KEY)
            self._session.remove(RETURN_URL_KEY)
        logger.debug("Credential cleared")

    def remember_return_url(self, url: str) -> None:
        """Remember where to send the user after the next sign-in."""
        self._session.set(RETURN_URL_KEY, url)

    def return_url(self) -> Optional[str]:
        return self._session.get(RETURN_URL_KEY)


class LogoutFlag:
    """
    Process-wide "logout in progress" marker in the session tier.

    Set at the very start of logout; cleared only by an explicit call
    (after the next successful sign-in). Anything about to refresh the
    credential silently must check it immediately before acting.
    """

    def __init__(self, session: Optional[KeyValueStorage] = None):
        self._session = session if session is not None else MemoryStorage()

    def set(self) -> None:
        self._session.set(LOGOUT_FLAG_KEY, "1")

    def is_set(self) -> bool:
        return self._session.get(LOGOUT_FLAG_KEY) == "1"

    def clear(self) -> None:
        self._session.remove(LOGOUT_FLAG_KEY)


__all__ = [
    "TokenStore",
    "LogoutFlag",
    "TOKEN_KEY",
    "LOGOUT_FLAG_KEY",
    "RETURN_URL_KEY",
]
