"""
Exception hierarchy for custos.

All library exceptions inherit from CustosError. Expected "no data"
conditions on the read path (failed RPC calls, undecodable payloads) are
reported through result objects in custos.core.types, not raised.
"""

from __future__ import annotations

from typing import Any


class CustosError(Exception):
    """
    Base exception for all custos errors.

    Example:
        >>> try:
        ...     await store.upsert("Bad Handle!")
        ... except CustosError as e:
        ...     print(f"Directory error: {e}")
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(CustosError):
    """
    Configuration is missing or invalid.

    Raised when:
    - Environment variables hold values that do not parse
    - Timeouts, TTLs or retry counts are out of range
    - The proxy address is not a 20-byte hex address
    """

    pass


class ValidationError(CustosError):
    """
    Input validation error.

    Raised when:
    - A directory handle does not match ^[a-z0-9-]{2,24}$
    - An upsert carries a field of the wrong type
    - A feed page size is below 1
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field


class EncodingError(ValidationError):
    """
    Calldata could not be encoded.

    Raised when:
    - A uint256 argument is negative, too large or not an int
    - A function selector is not exactly 4 bytes of hex
    """

    pass


class NetworkError(CustosError):
    """
    Network or upstream communication error.

    Used inside the transport layer; the public read API converts it into a
    failed result instead of letting it escape.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code
        self.url = url

    @property
    def is_retryable(self) -> bool:
        """Whether this looks like a transient condition worth retrying."""
        if self.status_code is None:
            return True
        return self.status_code == 429 or self.status_code >= 500


class RpcError(NetworkError):
    """
    A JSON-RPC endpoint answered, but not with usable data.

    Carries the JSON-RPC error object when one was returned.
    """

    def __init__(
        self,
        message: str,
        rpc_error: Any = None,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, url=url, details=details)
        self.rpc_error = rpc_error

    @property
    def is_retryable(self) -> bool:
        # Deterministic for the same calldata
        return False


class StorageError(CustosError):
    """
    A storage backend operation failed.

    Raised when:
    - The Redis backend cannot be reached
    - A stored record cannot be deserialized
    """

    pass


__all__ = [
    "CustosError",
    "ConfigurationError",
    "ValidationError",
    "EncodingError",
    "NetworkError",
    "RpcError",
    "StorageError",
]
