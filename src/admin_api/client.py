"""Admin REST API client with deadline enforcement, classification and retry."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import aiohttp

from admin_api.classifier import (
    classify,
    looks_like_html,
    network_error,
    parse_body,
    service_unavailable_error,
    timeout_error,
)
from admin_api.policies import (
    LOGOUT_REASON_SESSION_EXPIRED,
    SubscriptionRedirectHandler,
    should_logout,
)
from client_core.auth.token_store import TokenStore
from client_core.errors.exceptions import ClassifiedError
from client_core.logging.context import get_log_context
from client_core.logging.setup import generate_request_id
from client_core.logging.utilities import log_exception
from client_core.resilience.retry import RetryConfig, retry_async

logger = logging.getLogger(__name__)

ALLOWED_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})

DEFAULT_TIMEOUT_MS = 15000
SLOW_REQUEST_SECONDS = 2.0


@dataclass
class RequestConfig:
    """
    Per-call configuration.

    Attributes:
        path: Endpoint path relative to the base URL (e.g. /api/sessions)
        method: HTTP verb
        body: JSON-serializable request body, omitted when None
        token: Credential override; None reads the token store, "" sends none
        timeout_ms: Deadline for the whole exchange; None uses the client default
        suppress_auto_logout: Never trigger global logout from this call
    """

    path: str
    method: str = "GET"
    body: Any = None
    token: str | None = None
    timeout_ms: int | None = None
    suppress_auto_logout: bool = False

    def __post_init__(self):
        self.method = self.method.upper()
        if self.method not in ALLOWED_METHODS:
            raise ValueError(
                f"Unsupported HTTP method {self.method!r}, expected one of {sorted(ALLOWED_METHODS)}"
            )
        if self.timeout_ms is not None and self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be greater than 0, got {self.timeout_ms}")


@dataclass
class RetryRequestConfig(RequestConfig):
    """RequestConfig plus retry settings; None uses the client defaults."""

    retries: int | None = None
    retry_delay_ms: int | None = None


class ApiClient:
    """
    Async client for the admin API.

    Every failure is raised as a ClassifiedError. Before it is raised the
    side-effect rules run: the subscription redirect handler first, then the
    auto-logout rule, which calls ``logout_handler("session_expired")``.
    """

    def __init__(
        self,
        base_url: str,
        token_store: TokenStore,
        redirect_handler: SubscriptionRedirectHandler | None = None,
        logout_handler: Callable[[str], None] | None = None,
        request_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        retry_config: RetryConfig | None = None,
        max_connections: int = 20,
        session: aiohttp.ClientSession | None = None,
    ):
        self.base_url = base_url.rstrip("/") if base_url else ""

        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(
                f"ApiClient base_url must start with http:// or https://, got: {self.base_url!r}. "
                "Set API_BASE_URL environment variable or configure client.base_url in config."
            )
        if request_timeout_ms <= 0:
            raise ValueError("ApiClient request_timeout_ms must be greater than 0")

        self.token_store = token_store
        self.redirect_handler = redirect_handler
        self.logout_handler = logout_handler
        self.request_timeout_ms = request_timeout_ms
        self.retry_config = retry_config or RetryConfig()
        self.max_connections = max_connections

        self._session = session
        self._owns_session = session is None
        self._closed = False

        logger.debug(
            "ApiClient initialized",
            extra={
                "base_url": self.base_url,
                "timeout_ms": self.request_timeout_ms,
            },
        )

    async def __aenter__(self) -> "ApiClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._closed:
            raise RuntimeError("ApiClient is closed, cannot create new session")
        if self._session is None or self._session.closed:
            if not self._owns_session:
                raise RuntimeError("Injected HTTP session is closed")
            connector = aiohttp.TCPConnector(
                limit=self.max_connections,
                limit_per_host=self.max_connections,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers={"Accept": "application/json"},
            )
        return self._session

    async def close(self) -> None:
        self._closed = True
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            await asyncio.sleep(0)
        self._session = None

    @property
    def closed(self) -> bool:
        return self._closed

    @staticmethod
    def _get_context_ids() -> dict[str, str]:
        return {k: v for k, v in get_log_context().items() if v}

    def _build_url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _build_headers(self, config: RequestConfig) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = config.token if config.token is not None else self.token_store.read()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _send(self, config: RequestConfig) -> Any:
        """One HTTP exchange within the deadline; raises ClassifiedError on failure."""
        session = await self._ensure_session()

        url = self._build_url(config.path)
        timeout_ms = config.timeout_ms or self.request_timeout_ms
        headers = self._build_headers(config)
        ctx = self._get_context_ids()
        log_fields = {
            **ctx,
            "request_id": ctx.get("request_id") or generate_request_id(),
            "api_endpoint": config.path,
            "api_method": config.method,
        }

        logger.debug(
            "API request starting",
            extra={
                **log_fields,
                "api_url": url,
                "timeout_ms": timeout_ms,
                "has_body": config.body is not None,
                "has_token": "Authorization" in headers,
            },
        )

        loop = asyncio.get_running_loop()
        start_time = loop.time()
        try:
            async with asyncio.timeout(timeout_ms / 1000):
                async with session.request(
                    config.method,
                    url,
                    json=config.body,
                    headers=headers,
                ) as response:
                    status = response.status
                    content_type = response.headers.get("Content-Type", "")
                    text = await response.text(errors="replace")

        except TimeoutError as e:
            duration = loop.time() - start_time
            error = timeout_error(timeout_ms, cause=e)
            logger.warning(
                "API request timeout",
                extra={
                    **log_fields,
                    "timeout_ms": timeout_ms,
                    "duration_seconds": round(duration, 3),
                    "error_kind": error.kind.value,
                    "is_network_error": True,
                },
            )
            raise error from e

        except (aiohttp.ClientError, OSError) as e:
            duration = loop.time() - start_time
            error = network_error(cause=e)
            logger.warning(
                "API connection error",
                extra={
                    **log_fields,
                    "duration_seconds": round(duration, 3),
                    "error_kind": error.kind.value,
                    "error_type": type(e).__name__,
                    "error_message": str(e)[:200],
                    "is_network_error": True,
                },
            )
            raise error from e

        duration = loop.time() - start_time

        if looks_like_html(content_type, text):
            error = service_unavailable_error(text[:500])
            logger.warning(
                "API returned an HTML page instead of JSON",
                extra={
                    **log_fields,
                    "http_status": status,
                    "content_type": content_type,
                    "duration_seconds": round(duration, 3),
                    "error_kind": error.kind.value,
                },
            )
            raise error

        body = parse_body(text)

        if not 200 <= status < 300:
            error = classify(status, body)
            logger.warning(
                "API request failed",
                extra={
                    **log_fields,
                    "http_status": status,
                    "error_code": error.code,
                    "error_kind": error.kind.value,
                    "error_category": error.category.value,
                    "duration_seconds": round(duration, 3),
                },
            )
            raise error

        slow = duration > SLOW_REQUEST_SECONDS
        logger.log(
            logging.INFO if slow else logging.DEBUG,
            "Slow API request" if slow else "API request succeeded",
            extra={
                **log_fields,
                "http_status": status,
                "duration_seconds": round(duration, 3),
            },
        )
        return body

    def _dispatch_side_effects(self, error: ClassifiedError, config: RequestConfig) -> None:
        if self.redirect_handler is not None:
            try:
                self.redirect_handler.maybe_redirect(error)
            except Exception as handler_err:
                log_exception(
                    logger,
                    handler_err,
                    "Subscription redirect failed",
                    callback_error=str(handler_err)[:100],
                )

        if not should_logout(error, config):
            return

        logger.warning(
            "Session rejected by API, logging out",
            extra={
                **self._get_context_ids(),
                "api_endpoint": config.path,
                "http_status": error.status,
                "error_code": error.code,
                "reason": LOGOUT_REASON_SESSION_EXPIRED,
            },
        )
        if self.logout_handler is None:
            return
        try:
            self.logout_handler(LOGOUT_REASON_SESSION_EXPIRED)
        except Exception as handler_err:
            log_exception(
                logger,
                handler_err,
                "Logout handler failed",
                callback_error=str(handler_err)[:100],
            )

    async def request(self, config: RequestConfig) -> Any:
        """
        Execute one API call.

        Returns:
            Parsed response body (dict/list, {} when empty, raw text when not JSON)

        Raises:
            ClassifiedError: after the redirect/logout rules have run
        """
        try:
            return await self._send(config)
        except ClassifiedError as error:
            self._dispatch_side_effects(error, config)
            raise

    async def request_with_retry(self, config: RetryRequestConfig) -> Any:
        """
        Execute an API call, retrying transport failures with a fixed delay.

        HTTP errors are raised after the first attempt. Exhausted retries
        raise the last ClassifiedError unchanged.
        """
        retry_config = RetryConfig(
            retries=(
                config.retries if config.retries is not None else self.retry_config.retries
            ),
            retry_delay_ms=(
                config.retry_delay_ms
                if config.retry_delay_ms is not None
                else self.retry_config.retry_delay_ms
            ),
        )
        return await retry_async(
            lambda: self.request(config),
            config=retry_config,
            operation=f"{config.method} {config.path}",
        )

    async def get(self, path: str, **options: Any) -> Any:
        return await self.request(RequestConfig(path, "GET", **options))

    async def post(self, path: str, body: Any = None, **options: Any) -> Any:
        return await self.request(RequestConfig(path, "POST", body, **options))

    async def put(self, path: str, body: Any = None, **options: Any) -> Any:
        return await self.request(RequestConfig(path, "PUT", body, **options))

    async def patch(self, path: str, body: Any = None, **options: Any) -> Any:
        return await self.request(RequestConfig(path, "PATCH", body, **options))

    async def delete(self, path: str, **options: Any) -> Any:
        return await self.request(RequestConfig(path, "DELETE", **options))


__all__ = [
    "ApiClient",
    "RequestConfig",
    "RetryRequestConfig",
    "ALLOWED_METHODS",
    "DEFAULT_TIMEOUT_MS",
]
