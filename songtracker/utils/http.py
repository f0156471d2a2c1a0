"""HTTP utilities providing timeout retry semantics for upstream calls."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)


class RetryConfig:
    """How many extra attempts a timed-out request gets, and the pause between them."""

    def __init__(self, *, timeout_retries: int = 1, backoff_seconds: float = 0.5) -> None:
        self.timeout_retries = timeout_retries
        self.backoff_seconds = backoff_seconds


NO_RETRY = RetryConfig(timeout_retries=0)


async def request_with_retry(
    func: Callable[..., Awaitable[httpx.Response]],
    *args,
    retry_config: RetryConfig | None = None,
    **kwargs,
) -> httpx.Response:
    """Invoke ``func`` and retry only when the request timed out.

    Non-timeout transport errors and HTTP error statuses are returned or raised
    immediately; status handling is left to the caller.
    """
    config = retry_config or RetryConfig()
    attempt = 0

    while True:
        try:
            return await func(*args, **kwargs)
        except httpx.TimeoutException:
            if attempt >= config.timeout_retries:
                raise
            attempt += 1
            logger.warning(
                "Upstream request timed out; retrying (%s/%s)",
                attempt,
                config.timeout_retries,
            )
            await asyncio.sleep(config.backoff_seconds * attempt)


__all__ = ["NO_RETRY", "RetryConfig", "request_with_retry"]
