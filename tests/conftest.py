import json
from typing import Any, Callable

import httpx
import pytest

from custos.core.config import Config
from custos.core.exceptions import StorageError
from custos.storage.base import StorageBackend
from custos.storage.memory import InMemoryStorage

AUCTOBOT_WALLET = "0x6758360d6182d5E78b86C59d7B6bdbFa4093a539"
ZERO_HASH = "0" * 64


def _uint(value: int) -> str:
    return f"{value:064x}"


def build_agent_payload(
    agent_id: int = 3,
    wallet: str = AUCTOBOT_WALLET,
    role_pointer: int = 0,
    role_level: int = 0,
    cycle_count: int = 42,
    chain_head: str = ZERO_HASH,
    active: int = 1,
    role: str | bytes | None = None,
    role_length: int | None = None,
    role_at: int | None = None,
) -> str:
    """
    Hex (no 0x) for agents(uint256) return data.

    With ``role`` set, a length word plus padded bytes are written starting
    at slot ``role_at`` (default 10, i.e. byte offset 320). ``role_length``
    overrides the declared length.
    """
    slots = [
        _uint(agent_id),
        wallet.lower().replace("0x", "").rjust(64, "0"),
        _uint(role_pointer),
        _uint(role_level),
        _uint(cycle_count),
        chain_head,
        _uint(0),
        _uint(0),
        _uint(active),
    ]
    if role is not None:
        raw = role.encode("utf-8") if isinstance(role, str) else role
        start = 10 if role_at is None else role_at
        while len(slots) < start:
            slots.append(_uint(0))
        slots.append(_uint(len(raw) if role_length is None else role_length))
        padded = raw.hex().ljust(((len(raw) + 31) // 32) * 64 or 64, "0")
        slots.append(padded)
    return "".join(slots)


@pytest.fixture
def agent_payload() -> Callable[..., str]:
    return build_agent_payload


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


class UnavailableStorage(StorageBackend):
    """Backend whose every call fails, as during a redis outage."""

    def __init__(self) -> None:
        self.calls = 0

    def _fail(self):
        self.calls += 1
        raise StorageError("redis down")

    async def save(self, collection, key, data, ttl=None):
        self._fail()

    async def get(self, collection, key):
        self._fail()

    async def delete(self, collection, key):
        self._fail()

    async def query(self, collection, filters=None, limit=None, offset=0):
        self._fail()

    async def update(self, collection, key, data):
        self._fail()

    async def count(self, collection, filters=None):
        self._fail()

    async def clear(self, collection):
        self._fail()


@pytest.fixture
def unavailable_storage() -> UnavailableStorage:
    return UnavailableStorage()


@pytest.fixture
def config() -> Config:
    """No retry backoff so failure tests run instantly."""
    return Config(rpc_url="https://rpc.test", feed_url="https://feed.test/api/inscriptions",
                  rpc_retry_backoff=0.0)


class RpcStub:
    """
    Scripted JSON-RPC endpoint for httpx.MockTransport.

    ``responses`` maps a 4-byte selector to either a result string, or a
    callable(request) returning an httpx.Response. Unknown selectors answer
    with result "0x".
    """

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.responses = responses or {}
        self.requests: list[dict[str, Any]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        data = body["params"][0]["data"]
        selector = data[2:10]
        handler = self.responses.get(selector, "0x")
        if callable(handler):
            return handler(request)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": handler})

    def calls_for(self, selector: str) -> int:
        return sum(1 for r in self.requests if r["params"][0]["data"][2:10] == selector)


@pytest.fixture
def rpc_stub() -> RpcStub:
    return RpcStub()


@pytest.fixture
def mock_http(rpc_stub) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(rpc_stub))
