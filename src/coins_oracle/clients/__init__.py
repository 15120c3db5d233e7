"""Chain clients implementing the common client contract."""

from coins_oracle.clients.base import (
    AddressImporter,
    CoinClient,
    require_importer,
    supports_import,
)

__all__ = ["AddressImporter", "CoinClient", "require_importer", "supports_import"]
