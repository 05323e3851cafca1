"""Tests for the upstream timeout guard."""

import asyncio

import pytest

from shared.exceptions import UpstreamUnavailableError
from shared.timeouts import call_with_timeout


async def _value(value, delay: float = 0):
    await asyncio.sleep(delay)
    return value


class TestCallWithTimeout:

    @pytest.mark.asyncio
    async def test_returns_result(self):
        assert await call_with_timeout(_value(42), 1.0, "store") == 42

    @pytest.mark.asyncio
    async def test_timeout_raises_upstream_unavailable(self):
        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await call_with_timeout(_value(1, delay=1.0), 0.01, "user-store")
        error = exc_info.value
        assert error.retryable
        assert error.service == "user-store"
        assert error.details["timeout_seconds"] == 0.01

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self):
        async def fail():
            raise RuntimeError("nope")

        with pytest.raises(RuntimeError):
            await call_with_timeout(fail(), 1.0, "store")
