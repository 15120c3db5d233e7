"""Startup registration of every supported chain client.

``DEFAULT_CLIENTS`` is the ordered list of (asset id, constructor)
pairs. ``new_resolver`` builds each client once and registers it; a
client that cannot be built aborts startup.
"""

import logging
from functools import partial
from typing import Callable, Optional, Sequence

from coins_oracle.clients.base import CoinClient
from coins_oracle.clients.bitcoin import (
    BITCOIN_ASSET_ID,
    BITCOINCASH_ASSET_ID,
    BITCOINGOLD_ASSET_ID,
    BITCOINSV_ASSET_ID,
    DOGECOIN_ASSET_ID,
    LITECOIN_ASSET_ID,
    new_bitcoin_family_client,
)
from coins_oracle.clients.ethereum import (
    ERC20_TOKENS,
    ETHEREUM_ASSET_ID,
    ETHEREUM_CLASSIC_ASSET_ID,
    new_erc20_client,
    new_ethereum_classic_client,
    new_ethereum_client,
)
from coins_oracle.clients.lisk import LISK_ASSET_ID, new_lisk_client
from coins_oracle.clients.stellar import STELLAR_ASSET_ID, new_stellar_client
from coins_oracle.config import Settings, get_settings
from coins_oracle.errors import ClientConstructionError
from coins_oracle.resolver import CoinResolver

logger = logging.getLogger(__name__)

ClientConstructor = Callable[[Settings], CoinClient]

DEFAULT_CLIENTS: list[tuple[str, ClientConstructor]] = [
    (ETHEREUM_ASSET_ID, new_ethereum_client),
    (BITCOIN_ASSET_ID, partial(new_bitcoin_family_client, BITCOIN_ASSET_ID)),
    (STELLAR_ASSET_ID, new_stellar_client),
    (LITECOIN_ASSET_ID, partial(new_bitcoin_family_client, LITECOIN_ASSET_ID)),
    (BITCOINCASH_ASSET_ID, partial(new_bitcoin_family_client, BITCOINCASH_ASSET_ID)),
    (DOGECOIN_ASSET_ID, partial(new_bitcoin_family_client, DOGECOIN_ASSET_ID)),
    (BITCOINSV_ASSET_ID, partial(new_bitcoin_family_client, BITCOINSV_ASSET_ID)),
    (ETHEREUM_CLASSIC_ASSET_ID, new_ethereum_classic_client),
    (BITCOINGOLD_ASSET_ID, partial(new_bitcoin_family_client, BITCOINGOLD_ASSET_ID)),
    (LISK_ASSET_ID, new_lisk_client),
    *[(token, partial(new_erc20_client, token)) for token in ERC20_TOKENS],
]


def new_resolver(
    settings: Optional[Settings] = None,
    clients: Sequence[tuple[str, ClientConstructor]] = DEFAULT_CLIENTS,
) -> CoinResolver:
    """Build every client and register it in a fresh resolver.

    Args:
        settings: Settings passed to each constructor (defaults to env)
        clients: Ordered (asset id, constructor) pairs

    Raises:
        ClientConstructionError: a constructor failed
    """
    settings = settings or get_settings()
    resolver = CoinResolver()

    for asset_id, constructor in clients:
        try:
            client = constructor(settings)
        except Exception as e:
            logger.error(f"Error creating {asset_id} client: {e}")
            raise ClientConstructionError(asset_id, e) from e
        resolver.register(asset_id, client)

    logger.info(f"Registered {len(resolver)} coin clients")
    return resolver
