"""
Timeout guard for calls that leave the process.

Store and signing calls are the only suspension points in a request.
Each one is bounded so a stalled upstream turns into a retryable
UpstreamUnavailableError instead of a hung request.
"""

import asyncio
import logging
from typing import Awaitable, TypeVar

from .exceptions import UpstreamUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_with_timeout(awaitable: Awaitable[T], timeout: float, service: str) -> T:
    """
    Await `awaitable`, giving up after `timeout` seconds.

    Args:
        awaitable: The upstream call to wait for
        timeout: Limit in seconds
        service: Upstream name reported in the error details

    Returns:
        Whatever the awaitable returns

    Raises:
        UpstreamUnavailableError: If the limit is exceeded
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.warning(f"{service} call timed out after {timeout}s")
        raise UpstreamUnavailableError(
            f"{service} did not respond within {timeout}s",
            service=service,
            details={"timeout_seconds": timeout},
        ) from e
