"""Stellar client using the Horizon REST API.

Stellar closes ledgers by federated consensus: a transaction that
Horizon returns is already in a closed ledger and therefore final.
API Docs: https://developers.stellar.org/api/horizon
"""

import logging
from typing import Optional

import httpx

from coins_oracle.clients.base import CoinClient, upstream_errors
from coins_oracle.config import Settings
from coins_oracle.confirmations import finalized
from coins_oracle.models import AssetBalance, Balance, ChainState, Transaction
from coins_oracle.transport.http import BaseClient

logger = logging.getLogger(__name__)

STELLAR_ASSET_ID = "XLM"

PAYMENT_OPERATION_TYPES = (
    "payment",
    "create_account",
    "path_payment_strict_receive",
    "path_payment_strict_send",
)


class StellarClient(CoinClient):
    """Client for a Stellar Horizon server."""

    def __init__(self, horizon: BaseClient, asset_id: str = STELLAR_ASSET_ID):
        self.asset_id = asset_id
        self.horizon = horizon

    async def get_info(self) -> ChainState:
        """Report the most recently closed ledger."""
        with upstream_errors(self.asset_id, "get_info"):
            data = await self.horizon.get("/ledgers", params={"order": "desc", "limit": 1})
            ledger = data["_embedded"]["records"][0]
            return ChainState(
                chain_name="main",
                block_height=int(ledger["sequence"]),
                current_block_hash=ledger["hash"],
            )

    async def get_balance(self, address: str) -> Balance:
        """Get the native balance and every trustline balance of an account."""
        with upstream_errors(self.asset_id, "get_balance"):
            account = await self.horizon.get(f"/accounts/{address}")
            assets = []
            for entry in account["balances"]:
                code = entry.get("asset_code") or self.asset_id
                assets.append(AssetBalance(asset_symbol=code, balance=entry["balance"]))

        return Balance(assets=assets)

    async def get_transaction_by_hash(self, tx_hash: str) -> Transaction:
        """Get a transaction and describe it by its first payment operation."""
        with upstream_errors(self.asset_id, "get_transaction_by_hash"):
            tx = await self.horizon.get(f"/transactions/{tx_hash}")
            ops = await self.horizon.get(f"/transactions/{tx_hash}/operations")

            payment = self._first_payment(ops["_embedded"]["records"])
            if payment is None:
                raise ValueError(f"transaction {tx_hash} has no payment operation")

            return Transaction(
                id=tx["id"],
                from_address=payment.get("from") or payment.get("funder") or tx["source_account"],
                to_address=payment.get("to") or payment.get("account", ""),
                value=payment.get("amount") or payment.get("starting_balance", "0"),
                confirmation=finalized(),
            )

    @staticmethod
    def _first_payment(records: list) -> Optional[dict]:
        for record in records:
            if record.get("type") in PAYMENT_OPERATION_TYPES:
                return record
        return None

    async def close(self) -> None:
        await self.horizon.close()


def new_stellar_client(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> StellarClient:
    url = settings.node_url("stellar_url")
    logger.info(f"{STELLAR_ASSET_ID} horizon at {url}")
    return StellarClient(BaseClient(url, timeout=settings.client_timeout_seconds, transport=transport))
