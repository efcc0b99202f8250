"""Sign-in, step-up verification and session status."""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from admin_api.client import RequestConfig
from admin_api.schemas import SignInResponse, TwoFactorChallenge, parse_response
from client_core.auth.token_store import LogoutFlag, TokenStore

if TYPE_CHECKING:
    from admin_api.client import ApiClient
    from admin_api.logout import LogoutOrchestrator

logger = logging.getLogger(__name__)

LOGIN_ENDPOINT = "/api/auth/login"
TWO_FACTOR_VERIFY_ENDPOINT = "/api/auth/2fa/verify"
STATUS_ENDPOINT = "/api/auth/status"

TWO_FACTOR_REQUIRED = "TWO_FACTOR_REQUIRED"


class TwoFactorRequired(Exception):
    """Primary credentials accepted; a one-time code must be verified next."""

    def __init__(self, temp_token: str, user_id: str, message: str = "Two-factor verification required"):
        super().__init__(message)
        self.temp_token = temp_token
        self.user_id = user_id
        self.message = message


@dataclass
class LoginResult:
    token: str
    user: dict[str, Any] = field(default_factory=dict)


class AuthService:
    """Authentication flows that populate the token store."""

    def __init__(
        self,
        client: "ApiClient",
        token_store: TokenStore,
        logout_flag: LogoutFlag,
        orchestrator: "LogoutOrchestrator",
    ):
        self.client = client
        self.token_store = token_store
        self.logout_flag = logout_flag
        self.orchestrator = orchestrator

    def _complete_sign_in(self, data: Any, endpoint: str) -> LoginResult:
        response = parse_response(SignInResponse, data, endpoint)
        self.token_store.write(response.token)
        self.logout_flag.clear()
        logger.info("Signed in", extra={"operation": "login", "api_endpoint": endpoint})
        return LoginResult(token=response.token, user=response.user)

    async def login(self, email: str, password: str) -> LoginResult:
        """
        Sign in with email and password.

        Raises:
            TwoFactorRequired: the account needs a one-time code
            ClassifiedError: the API rejected the credentials or was unreachable
            ResponseValidationError: the sign-in response was malformed
        """
        data = await self.client.request(
            RequestConfig(
                LOGIN_ENDPOINT,
                "POST",
                body={"email": email, "password": password},
                token="",
                suppress_auto_logout=True,
            )
        )
        if isinstance(data, dict) and data.get("authStep") == TWO_FACTOR_REQUIRED:
            challenge = parse_response(TwoFactorChallenge, data, LOGIN_ENDPOINT)
            logger.info("Two-factor verification required", extra={"operation": "login"})
            raise TwoFactorRequired(
                temp_token=challenge.temp_token,
                user_id=challenge.user_id,
                message=challenge.message or "Two-factor verification required",
            )
        return self._complete_sign_in(data, LOGIN_ENDPOINT)

    async def verify_two_factor(self, user_id: str, code: str, temp_token: str) -> LoginResult:
        """
        Complete sign-in with a one-time code.

        A wrong code surfaces as StepUpRejectedError (401 INVALID_2FA_CODE)
        and never ends the session.
        """
        data = await self.client.request(
            RequestConfig(
                TWO_FACTOR_VERIFY_ENDPOINT,
                "POST",
                body={"userId": user_id, "code": code},
                token=temp_token,
                suppress_auto_logout=True,
            )
        )
        return self._complete_sign_in(data, TWO_FACTOR_VERIFY_ENDPOINT)

    async def status(self) -> Any:
        return await self.client.get(STATUS_ENDPOINT)

    def logout(self, reason: str | None = None) -> None:
        self.orchestrator.logout(reason)


__all__ = [
    "AuthService",
    "LoginResult",
    "TwoFactorRequired",
    "LOGIN_ENDPOINT",
    "TWO_FACTOR_VERIFY_ENDPOINT",
    "STATUS_ENDPOINT",
]
