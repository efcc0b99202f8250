"""
Tests for fixed-delay retry of transport failures.

Covers:
    - attempts = retries + 1 on persistent transport failure
    - HTTP errors are never retried
    - the last error is raised unchanged
    - the fixed delay is passed to asyncio.sleep
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from client_core.errors.exceptions import HttpError, NetworkError, TransportTimeoutError
from client_core.resilience.retry import (
    DEFAULT_RETRY,
    RetryConfig,
    retry_async,
    with_retry_async,
)


class TestRetryConfig:
    def test_default_values(self):
        config = RetryConfig()
        assert config.retries == 2
        assert config.retry_delay_ms == 1000.0
        assert config.max_attempts == 3
        assert DEFAULT_RETRY.max_attempts == 3

    def test_type_conversion_from_strings(self):
        config = RetryConfig(retries="4", retry_delay_ms="250")
        assert config.retries == 4
        assert config.retry_delay_ms == 250.0
        assert config.get_delay() == 0.25

    def test_negative_values_rejected(self):
        with pytest.raises(ValueError):
            RetryConfig(retries=-1)
        with pytest.raises(ValueError):
            RetryConfig(retry_delay_ms=-5)

    def test_should_retry_only_network_errors(self):
        config = RetryConfig(retries=2)
        assert config.should_retry(NetworkError("x"), 0) is True
        assert config.should_retry(TransportTimeoutError("x"), 1) is True
        assert config.should_retry(HttpError("x", status=500), 0) is False
        assert config.should_retry(ValueError("x"), 0) is False

    def test_should_retry_stops_at_last_attempt(self):
        config = RetryConfig(retries=2)
        assert config.should_retry(NetworkError("x"), 2) is False

    def test_zero_retries_never_retries(self):
        config = RetryConfig(retries=0)
        assert config.max_attempts == 1
        assert config.should_retry(NetworkError("x"), 0) is False


class TestRetryAsync:
    @pytest.mark.asyncio
    async def test_success_first_try(self):
        func = AsyncMock(return_value="ok")
        result = await retry_async(func, RetryConfig(retries=2, retry_delay_ms=0))
        assert result == "ok"
        assert func.await_count == 1

    @pytest.mark.asyncio
    async def test_persistent_transport_failure_exhausts_attempts(self):
        final = NetworkError("third")
        func = AsyncMock(side_effect=[NetworkError("first"), NetworkError("second"), final])

        with pytest.raises(NetworkError) as exc_info:
            await retry_async(func, RetryConfig(retries=2, retry_delay_ms=0))

        assert exc_info.value is final
        assert func.await_count == 3

    @pytest.mark.asyncio
    async def test_recovers_after_one_failure(self):
        func = AsyncMock(side_effect=[TransportTimeoutError("slow"), {"ok": True}])
        result = await retry_async(func, RetryConfig(retries=2, retry_delay_ms=0))
        assert result == {"ok": True}
        assert func.await_count == 2

    @pytest.mark.asyncio
    async def test_http_error_not_retried(self):
        err = HttpError("Validation failed", status=422)
        func = AsyncMock(side_effect=err)

        with pytest.raises(HttpError) as exc_info:
            await retry_async(func, RetryConfig(retries=5, retry_delay_ms=0))

        assert exc_info.value is err
        assert func.await_count == 1

    @pytest.mark.asyncio
    async def test_unclassified_error_not_retried(self):
        func = AsyncMock(side_effect=KeyError("x"))
        with pytest.raises(KeyError):
            await retry_async(func, RetryConfig(retries=3, retry_delay_ms=0))
        assert func.await_count == 1

    @pytest.mark.asyncio
    async def test_fixed_delay_between_attempts(self):
        func = AsyncMock(side_effect=[NetworkError("a"), NetworkError("b"), "ok"])

        with patch(
            "client_core.resilience.retry.asyncio.sleep", new_callable=AsyncMock
        ) as mock_sleep:
            result = await retry_async(func, RetryConfig(retries=2, retry_delay_ms=1500))

        assert result == "ok"
        assert [c.args[0] for c in mock_sleep.await_args_list] == [1.5, 1.5]

    @pytest.mark.asyncio
    async def test_on_retry_callback(self):
        on_retry = MagicMock()
        first = NetworkError("a")
        func = AsyncMock(side_effect=[first, "ok"])

        await retry_async(func, RetryConfig(retries=1, retry_delay_ms=0), on_retry=on_retry)

        on_retry.assert_called_once_with(first, 0, 0.0)

    @pytest.mark.asyncio
    async def test_on_retry_callback_error_does_not_break_retry(self):
        on_retry = MagicMock(side_effect=RuntimeError("callback broke"))
        func = AsyncMock(side_effect=[NetworkError("a"), "ok"])

        result = await retry_async(
            func, RetryConfig(retries=1, retry_delay_ms=0), on_retry=on_retry
        )

        assert result == "ok"


class TestWithRetryAsyncDecorator:
    @pytest.mark.asyncio
    async def test_decorator_retries_and_passes_args(self):
        calls = []

        @with_retry_async(RetryConfig(retries=1, retry_delay_ms=0))
        async def fetch(value, scale=1):
            calls.append(value)
            if len(calls) == 1:
                raise NetworkError("down")
            return value * scale

        assert await fetch(3, scale=2) == 6
        assert calls == [3, 3]
        assert fetch.__name__ == "fetch"
