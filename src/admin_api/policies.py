"""
Side-effect decision rules applied to every classified failure.

Both rules look only at (status, code) and never at message text:

- should_logout: whether the failure means the session is gone
- SubscriptionRedirectHandler: whether the failure is a billing block
  that sends the user to the plans page (without touching the session)
"""

import logging
from typing import Protocol

from client_core.errors.exceptions import ClassifiedError
from client_core.types import Navigator

logger = logging.getLogger(__name__)

INVALID_TOKEN = "INVALID_TOKEN"
INVALID_2FA_CODE = "INVALID_2FA_CODE"
TRIAL_EXPIRED = "TRIAL_EXPIRED"
SUBSCRIPTION_REQUIRED = "SUBSCRIPTION_REQUIRED"

LOGOUT_REASON_SESSION_EXPIRED = "session_expired"

# code -> reason query value on the upsell page
REDIRECT_REASONS = {
    TRIAL_EXPIRED: "trial_expired",
    SUBSCRIPTION_REQUIRED: "subscription_required",
}


class SupportsSuppression(Protocol):
    suppress_auto_logout: bool


def should_logout(error: ClassifiedError, config: SupportsSuppression) -> bool:
    """
    Decide whether a failed call must end the session.

    Rules, first match wins:
        1. suppress_auto_logout set: no
        2. transport failure (timeout, network, service unavailable): no
        3. 401 with no code or INVALID_TOKEN: yes
        4. 401 with any other code (e.g. INVALID_2FA_CODE): no
        5. anything else: no
    """
    if config.suppress_auto_logout:
        return False
    if error.is_network_error:
        return False
    if error.status == 401:
        return error.code is None or error.code == INVALID_TOKEN
    return False


class SubscriptionRedirectHandler:
    """Sends the user to the upsell page on trial/subscription 403s."""

    def __init__(self, navigator: Navigator, upsell_path: str = "/plans"):
        self.navigator = navigator
        self.upsell_path = upsell_path

    def maybe_redirect(self, error: ClassifiedError) -> bool:
        """
        Redirect when the error is a 403 billing block.

        Returns:
            True if a redirect was issued
        """
        if error.status != 403 or error.code not in REDIRECT_REASONS:
            return False
        if self.navigator.current_path == self.upsell_path:
            return False

        destination = f"{self.upsell_path}?reason={REDIRECT_REASONS[error.code]}"
        logger.info(
            "Redirecting to upsell page",
            extra={
                "redirect_to": destination,
                "error_code": error.code,
                "current_path": self.navigator.current_path,
            },
        )
        self.navigator.redirect_to(destination)
        return True


__all__ = [
    "should_logout",
    "SubscriptionRedirectHandler",
    "INVALID_TOKEN",
    "INVALID_2FA_CODE",
    "TRIAL_EXPIRED",
    "SUBSCRIPTION_REQUIRED",
    "LOGOUT_REASON_SESSION_EXPIRED",
    "REDIRECT_REASONS",
]
