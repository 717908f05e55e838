"""
CustosNetwork On-Chain Provider — lightweight JSON-RPC for proxy reads.

Uses `eth_call` via httpx against the CustosNetwork proxy on Base. No
web3.py dependency: calldata is built by custos.chain.encoding and return
data is decoded by custos.chain.decoder.

Configuration (pick one):
    1. Constructor: CustosProvider(rpc_url="https://base-mainnet.g.alchemy.com/v2/KEY")
    2. Env var:     CUSTOS_RPC_URL=https://mainnet.base.org
    3. Config:      CustosProvider(config=Config.from_env())

For fallback, pass comma-separated URLs:
    CUSTOS_RPC_URL=https://mainnet.base.org,https://base.llamarpc.com

Failures never raise out of the read methods; they come back as an
RpcResult / DecodeResult with a failure status, or None for scalar reads.
Each read, retries and fallback URLs included, is bounded by
config.rpc_deadline.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from custos.chain.cache import ReadCache
from custos.chain.decoder import decode_agent, decode_chain_head, decode_counter
from custos.chain.encoding import build_calldata
from custos.core.config import Config
from custos.core.contract import (
    QUERY_AGENT,
    QUERY_CHAIN_HEAD,
    QUERY_TOTAL_AGENTS,
    QUERY_TOTAL_CYCLES,
    selector_for,
)
from custos.core.exceptions import NetworkError, RpcError
from custos.core.logging import get_logger
from custos.core.types import DecodeResult, DecodeStatus, RpcResult, RpcStatus
from custos.resilience.retry import execute_with_retry

logger = get_logger("chain.provider")


class CustosProvider:
    """
    JSON-RPC provider for CustosNetwork proxy reads.

    Supports multi-provider fallback: if the primary RPC fails, the next URL
    in the list is tried. Within one URL, transient failures (timeouts,
    connection errors, HTTP 429/5xx) are retried with exponential backoff.

    Usage:
        async with CustosProvider() as provider:
            result = await provider.get_agent(3)
            if result.ok:
                print(result.record.role)
            head = await provider.get_chain_head(3)
    """

    def __init__(
        self,
        config: Config | None = None,
        rpc_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        cache: ReadCache | None = None,
    ) -> None:
        """
        Args:
            config: Library configuration (defaults to Config())
            rpc_url: Overrides config.rpc_url. Supports comma-separated fallback.
            http_client: Shared httpx client (for connection pooling / tests)
            cache: Optional read cache; successful results are stored for
                   config.chain_cache_ttl seconds
        """
        self._config = config or Config()
        if rpc_url is not None:
            self._config = self._config.with_updates(rpc_url=rpc_url)
        self._rpc_urls = self._config.rpc_urls
        self._http_client = http_client
        self._owns_client = False
        self._cache = cache

        if not self._rpc_urls:
            logger.warning(
                "No RPC URL configured. Set CUSTOS_RPC_URL or pass rpc_url to "
                "CustosProvider. On-chain lookups will return no data."
            )

    @property
    def config(self) -> Config:
        return self._config

    @property
    def is_configured(self) -> bool:
        """Whether an RPC endpoint is configured."""
        return len(self._rpc_urls) > 0

    async def _get_client(self) -> httpx.AsyncClient:
        """Lazy-init HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._config.rpc_timeout)
            self._owns_client = True
        return self._http_client

    async def close(self) -> None:
        """Close owned HTTP client."""
        if self._owns_client and self._http_client:
            await self._http_client.aclose()
            self._http_client = None
            self._owns_client = False

    async def __aenter__(self) -> CustosProvider:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ─── JSON-RPC Call with Multi-Provider Fallback ──────────────────

    async def _post(self, rpc_url: str, payload: dict[str, Any]) -> dict[str, Any]:
        """One HTTP round trip. Raises on anything but a JSON object body."""
        client = await self._get_client()
        response = await client.post(rpc_url, json=payload, timeout=self._config.rpc_timeout)

        if not response.is_success:
            raise NetworkError(
                f"RPC HTTP {response.status_code}",
                status_code=response.status_code,
                url=rpc_url,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise RpcError("RPC response is not JSON", url=rpc_url) from e

        if not isinstance(body, dict):
            raise RpcError("RPC response is not a JSON object", url=rpc_url)
        return body

    async def _eth_call(self, data: str) -> RpcResult:
        """
        Execute an eth_call JSON-RPC request against the proxy.

        Args:
            data: ABI-encoded calldata (hex with 0x prefix)

        Returns:
            RpcResult; on success ``data`` is the raw 0x-prefixed result
        """
        if not self._rpc_urls:
            return RpcResult.failure(RpcStatus.NOT_CONFIGURED, "no RPC URL configured")

        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "eth_call",
            "params": [
                {"to": self._config.proxy_address, "data": data},
                "latest",
            ],
        }

        total = len(self._rpc_urls)
        last = RpcResult.failure(RpcStatus.TRANSPORT_ERROR, "no provider attempted")
        for i, rpc_url in enumerate(self._rpc_urls):
            position = f"{i + 1}/{total}"
            try:
                body = await execute_with_retry(
                    self._post,
                    rpc_url,
                    payload,
                    attempts=self._config.rpc_retry_attempts,
                    backoff=self._config.rpc_retry_backoff,
                )
            except httpx.TimeoutException:
                logger.warning(f"RPC timeout from provider {position}: {rpc_url}")
                last = RpcResult.failure(RpcStatus.TIMEOUT, f"timeout: {rpc_url}")
                continue
            except httpx.TransportError as e:
                logger.warning(f"RPC transport error from provider {position}: {e}")
                last = RpcResult.failure(RpcStatus.TRANSPORT_ERROR, str(e))
                continue
            except RpcError as e:
                logger.warning(f"Malformed RPC response from provider {position}: {e}")
                last = RpcResult.failure(RpcStatus.MALFORMED, str(e))
                continue
            except NetworkError as e:
                logger.warning(f"RPC HTTP {e.status_code} from provider {position}: {rpc_url}")
                last = RpcResult.failure(RpcStatus.HTTP_ERROR, str(e))
                continue
            except Exception as e:
                logger.error(f"RPC error from provider {position}: {e}")
                last = RpcResult.failure(RpcStatus.TRANSPORT_ERROR, str(e))
                continue

            if body.get("error") is not None:
                logger.debug(f"eth_call RPC error from {rpc_url}: {body['error']}")
                last = RpcResult.failure(RpcStatus.RPC_ERROR, str(body["error"]))
                continue

            raw = body.get("result")
            if not isinstance(raw, str) or raw in ("", "0x"):
                # Reverted or returned nothing; another node will agree
                return RpcResult.failure(RpcStatus.EMPTY, "empty eth_call result")

            return RpcResult.success(raw)

        logger.error(f"All {total} RPC providers failed: {last.status.value} ({last.error})")
        return last

    async def read(self, query: str, agent_id: int | None = None) -> RpcResult:
        """
        Run one known proxy read, consulting the read cache first.

        Args:
            query: One of the QUERY_* constants in custos.core.contract
            agent_id: Argument for per-agent reads; None for aggregates

        Raises:
            EncodingError: agent_id is negative or not an int
        """
        args = () if agent_id is None else (agent_id,)
        calldata = build_calldata(selector_for(query), *args)

        if self._cache is not None:
            cached = await self._cache.get(query, agent_id)
            if cached is not None:
                return RpcResult.success(cached, cache_hit=True)

        deadline = self._config.rpc_deadline
        try:
            result = await asyncio.wait_for(self._eth_call(calldata), timeout=deadline)
        except asyncio.TimeoutError:
            logger.warning(f"RPC read {query} exceeded the {deadline}s deadline")
            result = RpcResult.failure(RpcStatus.TIMEOUT, f"deadline of {deadline}s exceeded")

        if result.ok and self._cache is not None:
            await self._cache.set(query, agent_id, result.data, ttl=self._config.chain_cache_ttl)
        return result

    # ─── Proxy Reads ─────────────────────────────────────────────────

    async def get_agent(self, agent_id: int) -> DecodeResult:
        """Read agents(agentId) → decoded struct, or a failure status."""
        result = await self.read(QUERY_AGENT, agent_id)
        if not result.ok:
            return DecodeResult.failure(DecodeStatus.NO_DATA, result.status.value)

        decoded = decode_agent(result.data, self._config.role_layout)
        if not decoded.ok and not decoded.not_found:
            logger.debug(f"Agent {agent_id} payload rejected: {decoded.status.value} ({decoded.reason})")
        return decoded

    async def get_chain_head(self, agent_id: int) -> str | None:
        """Read getChainHead(agentId) → latest proof hash, or None."""
        result = await self.read(QUERY_CHAIN_HEAD, agent_id)
        if not result.ok:
            return None
        return decode_chain_head(result.data)

    async def get_total_cycles(self) -> int | None:
        """Read totalCycles() → proof cycles across all agents."""
        result = await self.read(QUERY_TOTAL_CYCLES)
        if not result.ok:
            return None
        return decode_counter(result.data)

    async def get_total_agents(self) -> int | None:
        """Read totalAgents() → number of registered agents."""
        result = await self.read(QUERY_TOTAL_AGENTS)
        if not result.ok:
            return None
        return decode_counter(result.data)


__all__ = ["CustosProvider"]
