"""Lisk client using the Lisk Core REST API.

Lisk nodes report a confirmation counter on every transaction, so no
head height lookup is needed.
"""

import logging
from typing import Optional

import httpx

from coins_oracle.clients.base import CoinClient, upstream_errors
from coins_oracle.config import Settings
from coins_oracle.confirmations import by_depth
from coins_oracle.models import AssetBalance, Balance, ChainState, Transaction
from coins_oracle.transport.http import BaseClient

logger = logging.getLogger(__name__)

LISK_ASSET_ID = "LSK"


class LiskClient(CoinClient):
    """Client for a Lisk Core node."""

    def __init__(self, api: BaseClient, asset_id: str = LISK_ASSET_ID):
        self.asset_id = asset_id
        self.api = api

    async def get_info(self) -> ChainState:
        with upstream_errors(self.asset_id, "get_info"):
            res = await self.api.get("/api/blocks", params={"limit": 1, "sort": "height:desc"})
            block = res["data"][0]
            return ChainState(
                chain_name="main",
                block_height=int(block["height"]),
                current_block_hash=block["id"],
            )

    async def get_balance(self, address: str) -> Balance:
        with upstream_errors(self.asset_id, "get_balance"):
            res = await self.api.get("/api/accounts", params={"address": address, "limit": 1})
            account = res["data"][0]

        return Balance(assets=[AssetBalance(asset_symbol=self.asset_id, balance=account["balance"])])

    async def get_transaction_by_hash(self, tx_hash: str) -> Transaction:
        with upstream_errors(self.asset_id, "get_transaction_by_hash"):
            res = await self.api.get("/api/transactions", params={"id": tx_hash, "limit": 1})
            tx = res["data"][0]
            return Transaction(
                id=tx_hash,
                from_address=tx["senderId"],
                to_address=tx.get("recipientId") or "",
                value=str(tx["amount"]),
                confirmation=by_depth(tx.get("confirmations", 0)),
            )

    async def close(self) -> None:
        await self.api.close()


def new_lisk_client(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> LiskClient:
    url = settings.node_url("lisk_url")
    logger.info(f"{LISK_ASSET_ID} node at {url}")
    return LiskClient(BaseClient(url, timeout=settings.client_timeout_seconds, transport=transport))
