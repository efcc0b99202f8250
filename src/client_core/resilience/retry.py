"""
Retry utilities with classification-aware handling.

Only transport-classified failures are retried:
- Timeouts, refused connections, HTML fallback pages: retry after a fixed delay
- HTTP errors with a real response (4xx/5xx): fail immediately
- Anything that is not a ClassifiedError: fail immediately

The delay between attempts is fixed so behaviour stays predictable.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import wraps
from typing import Any, TypeVar

from client_core.errors.exceptions import ClassifiedError, ClientError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _error_fields(error: BaseException) -> dict[str, object]:
    fields: dict[str, object] = {
        "error_type": type(error).__name__,
        "error_message": str(error)[:200],
    }
    if isinstance(error, ClassifiedError):
        fields["error_kind"] = error.kind.value
        fields["error_code"] = error.code
        fields["http_status"] = error.status
    if isinstance(error, ClientError):
        fields["error_category"] = error.category.value
    return fields


def _log_retry_failure(
    operation: str,
    error: BaseException,
    attempt: int,
    config: "RetryConfig",
) -> None:
    """Log a non-retryable error or exhausted retries."""
    if not (isinstance(error, ClassifiedError) and error.is_network_error):
        logger.debug(
            "Non-retryable error for %s, not retrying: %s",
            operation,
            str(error)[:200],
            extra={"operation": operation, "attempt": attempt + 1, **_error_fields(error)},
        )
        return

    logger.warning(
        "Retries exhausted for %s: %s",
        operation,
        str(error)[:200],
        extra={
            "operation": operation,
            "total_attempts": attempt + 1,
            "max_attempts": config.max_attempts,
            **_error_fields(error),
        },
    )


def _safe_invoke_on_retry(
    on_retry: Callable[[ClassifiedError, int, float], None],
    error: ClassifiedError,
    attempt: int,
    delay: float,
    operation: str,
) -> None:
    """Call the on_retry callback, logging any error it raises."""
    try:
        on_retry(error, attempt, delay)
    except Exception as cb_err:
        logger.warning(
            "Error in on_retry callback for %s: %s",
            operation,
            str(cb_err)[:100],
            extra={
                "operation": operation,
                "callback_error": str(cb_err)[:100],
            },
        )


@dataclass
class RetryConfig:
    """Configuration for retry behavior.

    Attributes:
        retries: Additional attempts after the first one
        retry_delay_ms: Fixed pause between attempts, in milliseconds
    """

    retries: int = 2
    retry_delay_ms: float = 1000.0

    def __post_init__(self):
        """Ensure proper types from YAML/env vars."""
        self.retries = int(self.retries)
        self.retry_delay_ms = float(self.retry_delay_ms)
        if self.retries < 0:
            raise ValueError(f"retries must be 0 or greater, got {self.retries}")
        if self.retry_delay_ms < 0:
            raise ValueError(
                f"retry_delay_ms must be 0 or greater, got {self.retry_delay_ms}"
            )

    @property
    def max_attempts(self) -> int:
        return self.retries + 1

    def get_delay(self) -> float:
        """Delay before the next attempt, in seconds."""
        return self.retry_delay_ms / 1000.0

    def should_retry(self, error: BaseException, attempt: int) -> bool:
        """
        Determine if error should be retried.

        Args:
            error: The exception that occurred
            attempt: 0-indexed current attempt

        Returns:
            True if another attempt is allowed and the error is transport-level
        """
        if attempt >= self.max_attempts - 1:
            return False
        return isinstance(error, ClassifiedError) and error.is_network_error


DEFAULT_RETRY = RetryConfig(retries=2, retry_delay_ms=1000)


async def retry_async(
    func: Callable[[], Awaitable[T]],
    config: RetryConfig | None = None,
    on_retry: Callable[[ClassifiedError, int, float], None] | None = None,
    operation: str | None = None,
) -> T:
    """
    Run an async callable, retrying transport failures sequentially.

    Args:
        func: Zero-argument coroutine function performing one attempt
        config: Retry configuration (defaults to DEFAULT_RETRY)
        on_retry: Callback before each retry (error, attempt, delay_seconds)
        operation: Name used in log records (defaults to func.__name__)

    Returns:
        Result of the first successful attempt

    Raises:
        The last error unchanged once retries are exhausted, or the first
        non-retryable error immediately.
    """
    config = config or DEFAULT_RETRY
    operation = operation or getattr(func, "__name__", "operation")

    attempt = 0
    while True:
        try:
            result = await func()
        except Exception as e:
            if not config.should_retry(e, attempt):
                _log_retry_failure(operation, e, attempt, config)
                raise

            delay = config.get_delay()
            logger.warning(
                "Transport error for %s, will retry",
                operation,
                extra={
                    "operation": operation,
                    "attempt": attempt + 1,
                    "max_attempts": config.max_attempts,
                    "delay_seconds": round(delay, 3),
                    **_error_fields(e),
                },
            )
            if on_retry:
                _safe_invoke_on_retry(on_retry, e, attempt, delay, operation)

            await asyncio.sleep(delay)
            attempt += 1
            continue

        if attempt > 0:
            logger.info(
                "Retry succeeded for %s after %d attempts",
                operation,
                attempt + 1,
                extra={
                    "operation": operation,
                    "attempt": attempt + 1,
                    "total_attempts": config.max_attempts,
                },
            )
        return result


def with_retry_async(
    config: RetryConfig | None = None,
    on_retry: Callable[[ClassifiedError, int, float], None] | None = None,
):
    """
    Decorator for retrying async functions on transport failures.

    Usage:
        @with_retry_async(RetryConfig(retries=3, retry_delay_ms=500))
        async def fetch_dashboard():
            ...
    """

    def decorator(func: Callable[..., Awaitable[Any]]):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            return await retry_async(
                lambda: func(*args, **kwargs),
                config=config,
                on_retry=on_retry,
                operation=func.__name__,
            )

        return wrapper

    return decorator


__all__ = [
    "RetryConfig",
    "retry_async",
    "with_retry_async",
    "DEFAULT_RETRY",
]
