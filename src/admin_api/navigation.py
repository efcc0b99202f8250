"""In-process Navigator implementation."""

import logging
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)


class InProcessNavigator:
    """
    Tracks the current location in memory.

    Hosts with a real router implement the Navigator protocol themselves;
    this one serves CLI tools, workers and tests.
    """

    def __init__(self, initial_path: str = "/"):
        self._current_path = urlsplit(initial_path).path or "/"
        self.history: list[str] = []

    @property
    def current_path(self) -> str:
        return self._current_path

    def redirect_to(self, path: str) -> None:
        logger.debug("Navigating", extra={"redirect_to": path, "current_path": self._current_path})
        self.history.append(path)
        self._current_path = urlsplit(path).path or "/"

    @property
    def last_destination(self) -> str | None:
        return self.history[-1] if self.history else None


__all__ = ["InProcessNavigator"]
