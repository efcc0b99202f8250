"""
Resilience patterns module.

Components:
    - RetryConfig: Fixed-delay retry configuration
    - retry_async: Sequential retry of transport failures
    - @with_retry_async decorator
"""

from .retry import (
    DEFAULT_RETRY,
    RetryConfig,
    retry_async,
    with_retry_async,
)

__all__ = [
    "RetryConfig",
    "retry_async",
    "with_retry_async",
    "DEFAULT_RETRY",
]
