"""Inactivity timeout that ends the session after a quiet period."""

import asyncio
import logging
from collections.abc import Callable

from client_core.logging.utilities import log_exception

logger = logging.getLogger(__name__)


class IdleTimeout:
    """
    Calls ``on_timeout`` once no activity was reported for ``timeout_minutes``.

    Hosts call ``touch()`` on user activity (input, scroll, returning to
    the window). Requires a running event loop for ``start``/``touch``.

    Example:
        >>> idle = IdleTimeout(lambda: orchestrator.logout("session_expired"), 30)
        >>> idle.start()
        >>> idle.touch()  # on every user interaction
    """

    def __init__(self, on_timeout: Callable[[], None], timeout_minutes: float = 30):
        if timeout_minutes <= 0:
            raise ValueError(f"timeout_minutes must be greater than 0, got {timeout_minutes}")
        self.on_timeout = on_timeout
        self.timeout_minutes = timeout_minutes
        self._handle: asyncio.TimerHandle | None = None

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_minutes * 60

    @property
    def active(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        self._schedule()
        logger.debug(
            "Idle timeout started",
            extra={"idle_timeout_minutes": self.timeout_minutes},
        )

    def touch(self) -> None:
        """Reset the timer. Ignored when not started."""
        if self._handle is None:
            return
        self._schedule()

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.timeout_seconds, self._fire)

    def _fire(self) -> None:
        self._handle = None
        logger.info(
            "Session idle timeout reached",
            extra={"idle_timeout_minutes": self.timeout_minutes},
        )
        try:
            self.on_timeout()
        except Exception as e:
            log_exception(logger, e, "Idle timeout callback failed")


__all__ = ["IdleTimeout"]
