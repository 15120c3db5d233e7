"""Network transports used by chain clients."""

from coins_oracle.transport.http import (
    DEFAULT_CLIENT_TIMEOUT,
    BaseClient,
    JSONRPCClient,
    strip_hex,
)

__all__ = ["DEFAULT_CLIENT_TIMEOUT", "BaseClient", "JSONRPCClient", "strip_hex"]
