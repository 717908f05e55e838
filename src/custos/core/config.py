"""
Configuration management for custos.

Handles loading configuration from environment variables and validation.
The contract address and endpoints are plain fields so tests can point the
library at a local mock endpoint without touching core logic.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, fields
from typing import Any

from custos.core.contract import (
    BASE_CHAIN_ID,
    DEFAULT_RPC_URL,
    INSCRIPTION_FEED_URL,
    PROXY_ADDRESS,
)
from custos.core.exceptions import ConfigurationError
from custos.core.types import RoleStringLayout

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def _get_env_var(name: str, default: str | None = None) -> str | None:
    """Get environment variable with optional default."""
    return os.environ.get(name, default)


def _env_number(name: str, cast: type, default: Any) -> Any:
    raw = _get_env_var(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError(
            f"Environment variable {name} must be a {cast.__name__}",
            details={"value": raw},
        ) from None


@dataclass(frozen=True)
class Config:
    """Library configuration."""

    # Chain
    rpc_url: str = DEFAULT_RPC_URL  # comma-separated for fallback
    proxy_address: str = PROXY_ADDRESS
    chain_id: int = BASE_CHAIN_ID
    role_layout: RoleStringLayout = RoleStringLayout.FIXED_OFFSET

    # Upstream inscription feed
    feed_url: str = INSCRIPTION_FEED_URL
    feed_limit: int = 30

    # Timeouts (seconds). rpc_deadline caps one read across retries and
    # fallback URLs.
    rpc_timeout: float = 2.0
    rpc_deadline: float = 6.0
    feed_timeout: float = 5.0

    # Retries apply to transient transport failures only
    rpc_retry_attempts: int = 3
    rpc_retry_backoff: float = 0.25

    # Advisory read cache (seconds); 0 disables
    chain_cache_ttl: int = 60
    feed_cache_ttl: int = 30

    # Storage
    storage_backend: str = "memory"
    redis_url: str | None = None

    # Environment & Logging
    log_level: str = "INFO"
    env: str = "development"

    def __post_init__(self) -> None:
        if not _ADDRESS_RE.match(self.proxy_address or ""):
            raise ConfigurationError(
                "proxy_address must be a 0x-prefixed 20-byte hex address",
                details={"proxy_address": self.proxy_address},
            )
        if self.rpc_timeout <= 0 or self.rpc_deadline <= 0 or self.feed_timeout <= 0:
            raise ConfigurationError("timeouts must be positive")
        if self.rpc_retry_attempts < 1:
            raise ConfigurationError("rpc_retry_attempts must be at least 1")
        if self.rpc_retry_backoff < 0:
            raise ConfigurationError("rpc_retry_backoff must not be negative")
        if self.chain_cache_ttl < 0 or self.feed_cache_ttl < 0:
            raise ConfigurationError("cache TTLs must not be negative")
        if self.feed_limit < 1:
            raise ConfigurationError("feed_limit must be at least 1")

    @property
    def rpc_urls(self) -> list[str]:
        """Configured RPC endpoints in fallback order."""
        return [u.strip() for u in self.rpc_url.split(",") if u.strip()]

    @classmethod
    def from_env(cls, **overrides: Any) -> Config:
        """Load configuration from CUSTOS_* environment variables."""
        role_layout = overrides.get("role_layout") or _get_env_var(
            "CUSTOS_ROLE_LAYOUT", default=RoleStringLayout.FIXED_OFFSET.value
        )
        if isinstance(role_layout, str):
            try:
                role_layout = RoleStringLayout.from_string(role_layout)
            except ValueError as e:
                raise ConfigurationError(str(e)) from None

        values: dict[str, Any] = {
            "rpc_url": _get_env_var("CUSTOS_RPC_URL", default=cls.rpc_url),
            "proxy_address": _get_env_var("CUSTOS_PROXY_ADDRESS", default=cls.proxy_address),
            "chain_id": _env_number("CUSTOS_CHAIN_ID", int, cls.chain_id),
            "role_layout": role_layout,
            "feed_url": _get_env_var("CUSTOS_FEED_URL", default=cls.feed_url),
            "feed_limit": _env_number("CUSTOS_FEED_LIMIT", int, cls.feed_limit),
            "rpc_timeout": _env_number("CUSTOS_RPC_TIMEOUT", float, cls.rpc_timeout),
            "rpc_deadline": _env_number("CUSTOS_RPC_DEADLINE", float, cls.rpc_deadline),
            "feed_timeout": _env_number("CUSTOS_FEED_TIMEOUT", float, cls.feed_timeout),
            "rpc_retry_attempts": _env_number(
                "CUSTOS_RPC_RETRY_ATTEMPTS", int, cls.rpc_retry_attempts
            ),
            "rpc_retry_backoff": _env_number(
                "CUSTOS_RPC_RETRY_BACKOFF", float, cls.rpc_retry_backoff
            ),
            "chain_cache_ttl": _env_number("CUSTOS_CHAIN_CACHE_TTL", int, cls.chain_cache_ttl),
            "feed_cache_ttl": _env_number("CUSTOS_FEED_CACHE_TTL", int, cls.feed_cache_ttl),
            "storage_backend": _get_env_var(
                "CUSTOS_STORAGE_BACKEND", default=cls.storage_backend
            ),
            "redis_url": _get_env_var("CUSTOS_REDIS_URL"),
            "log_level": _get_env_var("CUSTOS_LOG_LEVEL", default=cls.log_level),
            "env": _get_env_var("CUSTOS_ENV", default=cls.env),
        }
        values.update({k: v for k, v in overrides.items() if k != "role_layout"})
        return cls(**values)

    def with_updates(self, **updates: Any) -> Config:
        """Create a new Config with updated values."""
        current = {f.name: getattr(self, f.name) for f in fields(self)}
        current.update(updates)
        return Config(**current)
