"""Wires the client, session state and side-effect handlers together."""

import logging
from dataclasses import dataclass

import aiohttp

from admin_api.auth import AuthService
from admin_api.client import ApiClient
from admin_api.idle import IdleTimeout
from admin_api.logout import LogoutOrchestrator
from admin_api.navigation import InProcessNavigator
from admin_api.policies import LOGOUT_REASON_SESSION_EXPIRED, SubscriptionRedirectHandler
from admin_api.refresh import SessionRefresher
from client_config.config import ClientSettings, get_config
from client_core.auth.storage import JsonFileStorage, MemoryStorage
from client_core.auth.token_store import LogoutFlag, TokenStore
from client_core.resilience.retry import RetryConfig
from client_core.types import KeyValueStorage, Navigator

logger = logging.getLogger(__name__)


@dataclass
class ApiSession:
    """
    Fully wired API session.

    Usage:
        async with ApiSession.create(settings) as api:
            await api.auth.login("admin@example.com", "secret")
            users = await api.client.get("/api/admin/users")
    """

    settings: ClientSettings
    token_store: TokenStore
    logout_flag: LogoutFlag
    navigator: Navigator
    client: ApiClient
    orchestrator: LogoutOrchestrator
    redirect_handler: SubscriptionRedirectHandler
    refresher: SessionRefresher
    idle_timeout: IdleTimeout
    auth: AuthService

    @classmethod
    def create(
        cls,
        settings: ClientSettings | None = None,
        navigator: Navigator | None = None,
        session: aiohttp.ClientSession | None = None,
        durable_storage: KeyValueStorage | None = None,
    ) -> "ApiSession":
        """
        Build every component from settings.

        The durable tier is a JsonFileStorage at ``settings.token_file`` when
        set, else in-memory. The session tier is always in-memory.
        """
        settings = settings or get_config()
        navigator = navigator if navigator is not None else InProcessNavigator()

        if durable_storage is None:
            durable_storage = (
                JsonFileStorage(settings.token_file) if settings.token_file else MemoryStorage()
            )
        session_storage = MemoryStorage()

        token_store = TokenStore(durable=durable_storage, session=session_storage)
        logout_flag = LogoutFlag(session_storage)
        redirect_handler = SubscriptionRedirectHandler(navigator, settings.upsell_path)

        client = ApiClient(
            settings.base_url,
            token_store,
            redirect_handler=redirect_handler,
            request_timeout_ms=settings.request_timeout_ms,
            retry_config=RetryConfig(
                retries=settings.retries, retry_delay_ms=settings.retry_delay_ms
            ),
            max_connections=settings.max_connections,
            session=session,
        )
        orchestrator = LogoutOrchestrator(client, token_store, logout_flag, navigator, settings)
        client.logout_handler = orchestrator.logout

        refresher = SessionRefresher(
            client, token_store, logout_flag, settings.refresh_endpoint
        )
        idle_timeout = IdleTimeout(
            lambda: orchestrator.logout(LOGOUT_REASON_SESSION_EXPIRED),
            settings.session_timeout_minutes,
        )
        auth = AuthService(client, token_store, logout_flag, orchestrator)

        logger.debug("API session created", extra={"base_url": settings.base_url})
        return cls(
            settings=settings,
            token_store=token_store,
            logout_flag=logout_flag,
            navigator=navigator,
            client=client,
            orchestrator=orchestrator,
            redirect_handler=redirect_handler,
            refresher=refresher,
            idle_timeout=idle_timeout,
            auth=auth,
        )

    async def __aenter__(self) -> "ApiSession":
        await self.client.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        self.idle_timeout.stop()
        await self.orchestrator.wait_pending()
        await self.client.close()


__all__ = ["ApiSession"]
