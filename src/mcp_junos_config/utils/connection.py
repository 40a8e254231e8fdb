"""Retry helpers for device transports."""
import asyncio
import logging
from functools import wraps
from typing import Any, Callable, TypeVar

import paramiko
from ncclient.transport.errors import SSHError, TransportError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


# Network failures worth another connection attempt
RETRYABLE_EXCEPTIONS = (
    ConnectionRefusedError,
    ConnectionResetError,
    TimeoutError,
    OSError,
    EOFError,
    paramiko.SSHException,
    SSHError,
    TransportError,
)


def retry_policy(
    max_attempts: int = 3,
    min_wait: float = 1,
    max_wait: float = 10,
    exceptions: tuple = RETRYABLE_EXCEPTIONS,
) -> dict[str, Any]:
    """Keyword arguments for a tenacity `retry` with exponential backoff."""
    return dict(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(exceptions),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


def lock_retry_policy(attempts: int, wait: float) -> dict[str, Any]:
    """Keyword arguments for retrying a lock attempt that returned False.

    Exceptions are not retried. Once attempts run out the last result
    (False) is returned instead of raising `RetryError`.
    """
    return dict(
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_fixed(wait),
        retry=retry_if_result(lambda locked: not locked),
        before_sleep=before_sleep_log(logger, logging.INFO),
        retry_error_callback=lambda retry_state: retry_state.outcome.result(),
    )


def with_retry(
    max_attempts: int = 3,
    min_wait: float = 1,
    max_wait: float = 10,
    exceptions: tuple = RETRYABLE_EXCEPTIONS,
) -> Callable:
    """Decorator factory retrying a sync or async callable.

    Args:
        max_attempts: Maximum number of attempts
        min_wait: Minimum wait between attempts (seconds)
        max_wait: Maximum wait between attempts (seconds)
        exceptions: Exception types that trigger another attempt
    """
    policy = retry_policy(max_attempts, min_wait, max_wait, exceptions)

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        if asyncio.iscoroutinefunction(func):
            @retry(**policy)
            @wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> T:
                return await func(*args, **kwargs)  # type: ignore[misc]

            return async_wrapper  # type: ignore[return-value]

        @retry(**policy)
        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> T:
            return func(*args, **kwargs)

        return sync_wrapper

    return decorator
