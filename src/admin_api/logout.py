"""
Global logout.

Ordering is significant:

1. set the logout flag (so a concurrent silent refresh aborts)
2. clear the token store
3. best-effort revocation call with a short deadline, outcome ignored
4. navigate to the login page, with ``?reason=`` when given

``logout()`` returns after steps 1-2; steps 3-4 run as a background task.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from admin_api.client import RequestConfig
from client_config.config import ClientSettings
from client_core.auth.token_store import LogoutFlag, TokenStore
from client_core.types import Navigator

if TYPE_CHECKING:
    from admin_api.client import ApiClient

logger = logging.getLogger(__name__)


class LogoutOrchestrator:
    """Signs the user out locally and revokes the session server-side."""

    def __init__(
        self,
        client: "ApiClient",
        token_store: TokenStore,
        logout_flag: LogoutFlag,
        navigator: Navigator,
        settings: ClientSettings | None = None,
    ):
        settings = settings or ClientSettings()
        self.client = client
        self.token_store = token_store
        self.logout_flag = logout_flag
        self.navigator = navigator
        self.login_path = settings.login_path
        self.logout_endpoint = settings.logout_endpoint
        self.logout_timeout_ms = settings.logout_timeout_ms
        self._pending: set[asyncio.Task] = set()
        self._reason: str | None = None

    def login_destination(self, reason: str | None = None) -> str:
        return f"{self.login_path}?reason={reason}" if reason else self.login_path

    def logout(self, reason: str | None = None) -> None:
        """Sign out. Returns once the flag is set and the credential cleared."""
        self.logout_flag.set()
        token = self.token_store.read()
        self.token_store.clear()

        if reason or not self._pending:
            self._reason = reason
        logger.info(
            "Logging out",
            extra={"reason": reason, "redirect_to": self.login_destination(self._reason)},
        )

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is None:
            logger.debug("No running event loop, skipping credential revocation")
            self.navigator.redirect_to(self.login_destination(self._reason))
            return

        if self._pending:
            # Latest non-empty reason is used by the pending navigation
            logger.debug("Logout already in progress, not revoking again")
            return

        task = loop.create_task(self._finish(token))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _finish(self, token: str | None) -> None:
        try:
            await self._revoke(token)
        finally:
            self.navigator.redirect_to(self.login_destination(self._reason))

    async def _revoke(self, token: str | None) -> None:
        config = RequestConfig(
            self.logout_endpoint,
            "POST",
            token=token or "",
            timeout_ms=self.logout_timeout_ms,
            suppress_auto_logout=True,
        )
        try:
            await self.client.request(config)
        except Exception as e:
            # Server-side revocation is best effort
            logger.info(
                "Credential revocation failed, continuing logout",
                extra={
                    "error_type": type(e).__name__,
                    "error_message": str(e)[:200],
                },
            )
            return
        logger.debug("Credential revoked")

    async def wait_pending(self) -> None:
        """Wait for outstanding revocation/navigation tails."""
        if self._pending:
            await asyncio.wait(list(self._pending))

    @property
    def pending(self) -> int:
        return len(self._pending)

    def is_logging_out(self) -> bool:
        return self.logout_flag.is_set()

    def clear_logout_flag(self) -> None:
        self.logout_flag.clear()


__all__ = ["LogoutOrchestrator"]
