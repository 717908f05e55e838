"""
Retry Strategies using Tenacity.

Only transient transport failures are retried. JSON-RPC errors, empty
results and decode failures are deterministic for the same calldata and
go straight back to the caller.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from custos.core.exceptions import NetworkError
from custos.core.logging import get_logger

logger = get_logger("resilience.retry")

DEFAULT_ATTEMPTS = 3
DEFAULT_BACKOFF = 0.25  # seconds, doubled per attempt
MAX_BACKOFF = 2.0


def is_transient_error(exception: BaseException) -> bool:
    """Check if exception is a transient network/infrastructure error."""
    if isinstance(exception, NetworkError):
        return exception.is_retryable
    return isinstance(exception, (httpx.TimeoutException, httpx.TransportError))


def _log_retry(retry_state: Any) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        f"Retrying upstream read after transient error "
        f"(attempt {retry_state.attempt_number}): {exc}"
    )


async def execute_with_retry(
    func: Callable[..., Awaitable[Any]],
    *args: Any,
    attempts: int = DEFAULT_ATTEMPTS,
    backoff: float = DEFAULT_BACKOFF,
    **kwargs: Any,
) -> Any:
    """
    Execute an async function, retrying transient errors with backoff.

    The last exception is re-raised once ``attempts`` is exhausted.
    """
    async for attempt in AsyncRetrying(
        retry=retry_if_exception(is_transient_error),
        wait=wait_exponential(multiplier=backoff, max=MAX_BACKOFF),
        stop=stop_after_attempt(attempts),
        before_sleep=_log_retry,
        reraise=True,
    ):
        with attempt:
            return await func(*args, **kwargs)
