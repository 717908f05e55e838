"""Tests for transient-error retry."""

from unittest.mock import AsyncMock

import httpx
import pytest

from custos.core.exceptions import NetworkError, RpcError
from custos.resilience.retry import execute_with_retry, is_transient_error

_REQUEST = httpx.Request("POST", "https://rpc.test")


class TestIsTransientError:

    @pytest.mark.parametrize(
        "exc,expected",
        [
            (httpx.ReadTimeout("t", request=_REQUEST), True),
            (httpx.ConnectError("c", request=_REQUEST), True),
            (NetworkError("down"), True),
            (NetworkError("busy", status_code=429), True),
            (NetworkError("bad gateway", status_code=502), True),
            (NetworkError("not found", status_code=404), False),
            (RpcError("not json"), False),
            (ValueError("nope"), False),
        ],
    )
    def test_classification(self, exc, expected):
        assert is_transient_error(exc) is expected


class TestExecuteWithRetry:

    @pytest.mark.asyncio
    async def test_success_first_try(self):
        func = AsyncMock(return_value="ok")
        assert await execute_with_retry(func, "a", backoff=0, key="b") == "ok"
        func.assert_awaited_once_with("a", key="b")

    @pytest.mark.asyncio
    async def test_transient_then_success(self):
        func = AsyncMock(side_effect=[NetworkError("x", status_code=503), "ok"])
        assert await execute_with_retry(func, backoff=0) == "ok"
        assert func.await_count == 2

    @pytest.mark.asyncio
    async def test_exhausted_reraises_last(self):
        func = AsyncMock(side_effect=NetworkError("still down", status_code=500))

        with pytest.raises(NetworkError, match="still down"):
            await execute_with_retry(func, attempts=4, backoff=0)
        assert func.await_count == 4

    @pytest.mark.asyncio
    @pytest.mark.parametrize("exc", [RpcError("bad body"), NetworkError("no", status_code=400),
                                     ValueError("bug")])
    async def test_permanent_not_retried(self, exc):
        func = AsyncMock(side_effect=exc)

        with pytest.raises(type(exc)):
            await execute_with_retry(func, attempts=3, backoff=0)
        assert func.await_count == 1

    @pytest.mark.asyncio
    async def test_single_attempt(self):
        func = AsyncMock(side_effect=httpx.ConnectError("c", request=_REQUEST))

        with pytest.raises(httpx.ConnectError):
            await execute_with_retry(func, attempts=1, backoff=0)
        assert func.await_count == 1
