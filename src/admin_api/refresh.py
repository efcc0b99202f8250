"""Silent credential refresh guarded by the logout flag."""

import logging
from typing import TYPE_CHECKING

from admin_api.client import RequestConfig
from admin_api.schemas import RefreshResponse, parse_response
from client_core.auth.token_store import LogoutFlag, TokenStore
from client_core.logging.utilities import log_with_context

if TYPE_CHECKING:
    from admin_api.client import ApiClient

logger = logging.getLogger(__name__)


class SessionRefresher:
    """
    Exchanges the current session for a fresh credential.

    The logout flag is checked immediately before the call and again once
    it returns: a logout started by another in-flight call while the
    refresh was pending must win, so the new credential is discarded.
    """

    def __init__(
        self,
        client: "ApiClient",
        token_store: TokenStore,
        logout_flag: LogoutFlag,
        endpoint: str = "/api/auth/refresh",
    ):
        self.client = client
        self.token_store = token_store
        self.logout_flag = logout_flag
        self.endpoint = endpoint

    async def refresh(self) -> str | None:
        """
        Refresh the stored credential.

        Returns:
            The new credential, or None when aborted by a logout in progress

        Raises:
            ClassifiedError: the refresh call failed
            ResponseValidationError: the response carried no usable token
        """
        if self.logout_flag.is_set():
            logger.info("Logout in progress, skipping token refresh")
            return None

        data = await self.client.request(
            RequestConfig(self.endpoint, "POST", suppress_auto_logout=True)
        )

        if self.logout_flag.is_set():
            logger.info("Logout started during token refresh, discarding new token")
            return None

        token = parse_response(RefreshResponse, data, self.endpoint).token
        self.token_store.write(token)
        log_with_context(
            logger,
            logging.DEBUG,
            "Token refreshed",
            operation="refresh",
            api_endpoint=self.endpoint,
        )
        return token


__all__ = ["SessionRefresher"]
