"""
Admin API client.

Request execution with deadlines, response classification, fixed-delay
retry of transport failures, and the two global side effects a failed
call may trigger: logout on an invalid session and redirect to the plans
page on a billing block.
"""

from admin_api.auth import AuthService, LoginResult, TwoFactorRequired
from admin_api.client import ApiClient, RequestConfig, RetryRequestConfig
from admin_api.idle import IdleTimeout
from admin_api.logout import LogoutOrchestrator
from admin_api.navigation import InProcessNavigator
from admin_api.policies import SubscriptionRedirectHandler, should_logout
from admin_api.refresh import SessionRefresher
from admin_api.schemas import RefreshResponse, SignInResponse, TwoFactorChallenge
from admin_api.session import ApiSession

__all__ = [
    "ApiClient",
    "ApiSession",
    "AuthService",
    "IdleTimeout",
    "InProcessNavigator",
    "LoginResult",
    "LogoutOrchestrator",
    "RefreshResponse",
    "RequestConfig",
    "RetryRequestConfig",
    "SessionRefresher",
    "SignInResponse",
    "SubscriptionRedirectHandler",
    "TwoFactorChallenge",
    "TwoFactorRequired",
    "should_logout",
]
