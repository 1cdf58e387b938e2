"""Exceptions raised while resolving did:dsnp identifiers."""

from typing import Any, Optional


class ResolverError(Exception):
    """Base class for resolver exceptions."""


class ConfigError(ResolverError):
    """Raised when the resolver is missing or given an invalid setting."""


class ChainConnectionError(ResolverError):
    """Raised when the connection to the chain node cannot be used."""


class DecodeError(ResolverError):
    """Raised when a value read from the chain does not match its expected layout."""


class RpcError(ResolverError):
    """Raised when the node answers a JSON-RPC call with an error object."""

    def __init__(
        self, method: str, code: Optional[int], message: str, data: Any = None
    ):
        super().__init__(f"{method} failed ({code}): {message}")
        self.method = method
        self.code = code
        self.message = message
        self.data = data
