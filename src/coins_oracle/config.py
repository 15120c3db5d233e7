"""Application configuration using pydantic-settings.

Every adapter reads its node endpoint from one environment variable
(BITCOIN_URL, ETHEREUM_URL, ...). Blank values fall back to a local node.
"""

import re
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_NODE_URL = "http://localhost"

_SCHEME_RE = re.compile(r"^https?://")


def normalize_node_url(value: str) -> str:
    """Return a scheme-qualified node URL.

    Blank values resolve to the local host; values without a scheme
    are treated as plain http.
    """
    value = (value or "").strip()
    if not value:
        return DEFAULT_NODE_URL
    if _SCHEME_RE.match(value):
        return value
    return f"http://{value}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=True, description="Enable debug mode")

    # ======================
    # Node endpoints
    # ======================
    # UTXO chains (bitcoind-compatible JSON-RPC)
    bitcoin_url: str = Field(default="", description="Bitcoin node RPC URL")
    litecoin_url: str = Field(default="", description="Litecoin node RPC URL")
    dogecoin_url: str = Field(default="", description="Dogecoin node RPC URL")
    bitcoincash_url: str = Field(default="", description="Bitcoin Cash node RPC URL")
    bitcoinsv_url: str = Field(default="", description="Bitcoin SV node RPC URL")
    bitcoingold_url: str = Field(default="", description="Bitcoin Gold node RPC URL")

    # Account chains (Ethereum JSON-RPC)
    ethereum_url: str = Field(default="", description="Ethereum node RPC URL")
    ethereumclassic_url: str = Field(default="", description="Ethereum Classic node RPC URL")

    # REST ledgers
    stellar_url: str = Field(default="", description="Stellar Horizon URL")
    lisk_url: str = Field(default="", description="Lisk Core API URL")

    # ======================
    # Node credentials
    # ======================
    rpc_user: str = Field(default="", description="JSON-RPC user for UTXO nodes")
    rpc_pass: str = Field(default="", description="JSON-RPC password for UTXO nodes")

    # ======================
    # Timeouts
    # ======================
    client_timeout_seconds: float = Field(
        default=3.0, description="Network timeout applied by every adapter transport"
    )
    import_timeout_seconds: float = Field(
        default=3.0, description="How long to wait on an address import before giving up"
    )

    def node_url(self, name: str) -> str:
        """Get the normalized endpoint for a node setting (e.g. "bitcoin_url")."""
        return normalize_node_url(getattr(self, name))

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "rpc_user": self.rpc_user or "(not set)",
            "rpc_pass": "***" if self.rpc_pass else "(not set)",
            "client_timeout_seconds": self.client_timeout_seconds,
            "import_timeout_seconds": self.import_timeout_seconds,
            "nodes": {
                "BTC": self.node_url("bitcoin_url"),
                "LTC": self.node_url("litecoin_url"),
                "DOGE": self.node_url("dogecoin_url"),
                "BCH": self.node_url("bitcoincash_url"),
                "BSV": self.node_url("bitcoinsv_url"),
                "BTG": self.node_url("bitcoingold_url"),
                "ETH": self.node_url("ethereum_url"),
                "ETC": self.node_url("ethereumclassic_url"),
                "XLM": self.node_url("stellar_url"),
                "LSK": self.node_url("lisk_url"),
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
