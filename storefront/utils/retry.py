"""Caller-side retry helpers."""

from __future__ import annotations

import asyncio
import functools
import random
from collections.abc import Awaitable, Callable

from storefront.catalog.errors import UpstreamUnavailable

RETRY_EXCEPTIONS = (UpstreamUnavailable, OSError, asyncio.TimeoutError)


def retry_async(func: Callable[..., Awaitable], *, attempts: int = 3, base_delay: float = 1.0):
    """Retry idempotent reads on transient failures with jittered backoff."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        delay = base_delay
        for attempt in range(attempts):
            try:
                return await func(*args, **kwargs)
            except RETRY_EXCEPTIONS:
                if attempt == attempts - 1:
                    raise
                await asyncio.sleep(delay + random.random() * base_delay)
                delay *= 2
    return wrapper
