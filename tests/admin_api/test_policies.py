"""Tests for the auto-logout rule, the subscription redirect and navigation."""

import pytest

from admin_api.classifier import classify, network_error, service_unavailable_error, timeout_error
from admin_api.client import RequestConfig
from admin_api.navigation import InProcessNavigator
from admin_api.policies import SubscriptionRedirectHandler, should_logout

PLAIN = RequestConfig("/api/sessions")
SUPPRESSED = RequestConfig("/api/sessions", suppress_auto_logout=True)


class TestShouldLogout:
    def test_401_invalid_token_logs_out(self):
        assert should_logout(classify(401, {"errorCode": "INVALID_TOKEN"}), PLAIN) is True

    def test_401_without_code_logs_out(self):
        assert should_logout(classify(401, {"message": "Unauthorized"}), PLAIN) is True
        assert should_logout(classify(401, {}), PLAIN) is True

    def test_suppression_wins(self):
        assert should_logout(classify(401, {"errorCode": "INVALID_TOKEN"}), SUPPRESSED) is False
        assert should_logout(classify(401, {}), SUPPRESSED) is False

    def test_401_step_up_code_never_logs_out(self):
        assert should_logout(classify(401, {"errorCode": "INVALID_2FA_CODE"}), PLAIN) is False

    def test_401_other_code_never_logs_out(self):
        assert should_logout(classify(401, {"errorCode": "PASSWORD_EXPIRED"}), PLAIN) is False

    @pytest.mark.parametrize(
        "error",
        [timeout_error(100), network_error(OSError("refused")), service_unavailable_error()],
    )
    @pytest.mark.parametrize("config", [PLAIN, SUPPRESSED])
    def test_transport_failures_never_log_out(self, error, config):
        assert should_logout(error, config) is False

    @pytest.mark.parametrize("status", [400, 403, 404, 409, 422, 500, 502])
    def test_other_statuses_never_log_out(self, status):
        assert should_logout(classify(status, {"errorCode": "INVALID_TOKEN"}), PLAIN) is False


class TestSubscriptionRedirectHandler:
    def test_trial_expired_redirects(self):
        navigator = InProcessNavigator("/monitors")
        handler = SubscriptionRedirectHandler(navigator, "/plans")

        assert handler.maybe_redirect(classify(403, {"errorCode": "TRIAL_EXPIRED"})) is True
        assert navigator.history == ["/plans?reason=trial_expired"]
        assert navigator.current_path == "/plans"

    def test_subscription_required_redirects(self):
        navigator = InProcessNavigator("/monitors")
        handler = SubscriptionRedirectHandler(navigator)

        handler.maybe_redirect(classify(403, {"errorCode": "SUBSCRIPTION_REQUIRED"}))
        assert navigator.last_destination == "/plans?reason=subscription_required"

    def test_no_redirect_loop_on_upsell_page(self):
        navigator = InProcessNavigator("/plans")
        handler = SubscriptionRedirectHandler(navigator, "/plans")

        assert handler.maybe_redirect(classify(403, {"errorCode": "TRIAL_EXPIRED"})) is False
        assert navigator.history == []

    def test_repeated_failures_redirect_once(self):
        navigator = InProcessNavigator("/monitors")
        handler = SubscriptionRedirectHandler(navigator, "/plans")
        error = classify(403, {"errorCode": "TRIAL_EXPIRED"})

        handler.maybe_redirect(error)
        handler.maybe_redirect(error)
        assert len(navigator.history) == 1

    def test_other_403_codes_ignored(self):
        navigator = InProcessNavigator("/monitors")
        handler = SubscriptionRedirectHandler(navigator)
        assert handler.maybe_redirect(classify(403, {"errorCode": "FORBIDDEN"})) is False
        assert handler.maybe_redirect(classify(403, {})) is False
        assert navigator.history == []

    def test_codes_on_other_statuses_ignored(self):
        navigator = InProcessNavigator("/monitors")
        handler = SubscriptionRedirectHandler(navigator)
        assert handler.maybe_redirect(classify(402, {"errorCode": "TRIAL_EXPIRED"})) is False
        assert handler.maybe_redirect(timeout_error(100)) is False


class TestInProcessNavigator:
    def test_tracks_path_without_query(self):
        navigator = InProcessNavigator()
        assert navigator.current_path == "/"
        assert navigator.last_destination is None

        navigator.redirect_to("/login?reason=session_expired")
        assert navigator.current_path == "/login"
        assert navigator.last_destination == "/login?reason=session_expired"

    def test_initial_path_query_is_stripped(self):
        assert InProcessNavigator("/plans?reason=trial_expired").current_path == "/plans"
