"""Bitcoin and bitcoind-compatible forks over JSON-RPC.

Litecoin, Dogecoin, Bitcoin Cash, Bitcoin SV and Bitcoin Gold nodes
speak the same RPC dialect. Each fork is its own ``BitcoinClient``
built around its own ``BitcoinRPC``; only the asset id and the node
endpoint differ.

RPC reference: https://developer.bitcoin.org/reference/rpc/
"""

import logging
from decimal import Decimal
from typing import Optional

import httpx

from coins_oracle.clients.base import AddressImporter, CoinClient, upstream_errors
from coins_oracle.config import Settings
from coins_oracle.confirmations import by_depth
from coins_oracle.errors import AlreadyInProgressError, RPCError
from coins_oracle.models import (
    AssetBalance,
    Balance,
    ChainState,
    Transaction,
    decimal_string,
)
from coins_oracle.transport.http import DEFAULT_CLIENT_TIMEOUT, JSONRPCClient
from coins_oracle.utils.slow_operation import DEFAULT_SLOW_OPERATION_TIMEOUT, SlowOperation

logger = logging.getLogger(__name__)

BITCOIN_ASSET_ID = "BTC"
LITECOIN_ASSET_ID = "LTC"
DOGECOIN_ASSET_ID = "DOGE"
BITCOINCASH_ASSET_ID = "BCH"
BITCOINSV_ASSET_ID = "BSV"
BITCOINGOLD_ASSET_ID = "BTG"

# Asset id -> settings field holding the node URL
UTXO_NODE_SETTINGS = {
    BITCOIN_ASSET_ID: "bitcoin_url",
    LITECOIN_ASSET_ID: "litecoin_url",
    DOGECOIN_ASSET_ID: "dogecoin_url",
    BITCOINCASH_ASSET_ID: "bitcoincash_url",
    BITCOINSV_ASSET_ID: "bitcoinsv_url",
    BITCOINGOLD_ASSET_ID: "bitcoingold_url",
}

# RPC_WALLET_ERROR: returned by importaddress while a rescan for the
# same wallet is running or once the address is already known.
RPC_WALLET_ERROR = -4

MAX_CONFIRMATIONS = 9999999


class BitcoinRPC(JSONRPCClient):
    """bitcoind JSON-RPC methods used by the client."""

    version = "1.0"

    async def get_blockchain_info(self) -> dict:
        return await self.call("getblockchaininfo")

    async def list_unspent(self, address: str) -> list:
        return await self.call("listunspent", 1, MAX_CONFIRMATIONS, [address])

    async def get_raw_transaction(self, txid: str) -> dict:
        """Get a decoded transaction (verbose getrawtransaction)."""
        return await self.call("getrawtransaction", txid, True)

    async def import_address(self, address: str) -> None:
        """Import a watch-only address and rescan.

        The node only answers once the rescan finishes, so no transport
        timeout is applied to this request.

        Raises:
            AlreadyInProgressError: a rescan is running or the address is known
            RPCError: any other RPC failure
        """
        try:
            await self._call("importaddress", [address, "", True], timeout=None)
        except RPCError as e:
            if e.code == RPC_WALLET_ERROR:
                raise AlreadyInProgressError(f"address {address} already imported") from e
            raise


def _output_address(output: dict) -> str:
    script = output["scriptPubKey"]
    if script.get("address"):
        return script["address"]
    # Pre-0.21 nodes report a list of addresses
    return script["addresses"][0]


class BitcoinClient(CoinClient, AddressImporter):
    """Client for bitcoind-compatible UTXO chains."""

    def __init__(
        self,
        asset_id: str,
        rpc: BitcoinRPC,
        import_timeout: float = DEFAULT_SLOW_OPERATION_TIMEOUT,
    ):
        """Initialize the client.

        Args:
            asset_id: Asset symbol reported in balances (BTC, LTC, ...)
            rpc: JSON-RPC connection to the chain's node
            import_timeout: Seconds to wait on each import attempt
        """
        self.asset_id = asset_id
        self.rpc = rpc
        self.import_timeout = import_timeout

    async def get_info(self) -> ChainState:
        with upstream_errors(self.asset_id, "get_info"):
            info = await self.rpc.get_blockchain_info()
            return ChainState(
                chain_name=info["chain"],
                block_height=int(info["blocks"]),
                current_block_hash=info["bestblockhash"],
            )

    async def get_balance(self, address: str) -> Balance:
        """Sum the confirmed unspent outputs held by the address."""
        with upstream_errors(self.asset_id, "get_balance"):
            unspent = await self.rpc.list_unspent(address)
            total = sum((Decimal(str(utxo["amount"])) for utxo in unspent), Decimal("0"))

        return Balance(assets=[AssetBalance(asset_symbol=self.asset_id, balance=decimal_string(total))])

    async def get_transaction_by_hash(self, tx_hash: str) -> Transaction:
        """Get a transaction.

        The sender is the address of the output spent by the first
        input, so the funding transaction is fetched as well. The
        receiver is the first output; the value is the sum of outputs.
        """
        with upstream_errors(self.asset_id, "get_transaction_by_hash"):
            raw = await self.rpc.get_raw_transaction(tx_hash)
            spent = raw["vin"][0]
            funding = await self.rpc.get_raw_transaction(spent["txid"])

            value = sum((Decimal(str(out["value"])) for out in raw["vout"]), Decimal("0"))

            return Transaction(
                id=raw["txid"],
                from_address=_output_address(funding["vout"][spent["vout"]]),
                to_address=_output_address(raw["vout"][0]),
                value=decimal_string(value),
                confirmation=by_depth(raw.get("confirmations", 0)),
            )

    async def _import(self, address: str) -> None:
        with upstream_errors(self.asset_id, "import_address"):
            await self.rpc.import_address(address)

    async def import_address(self, address: str) -> None:
        """Import an address, tolerating a rescan that outlives the wait.

        The first attempt usually times out while the node rescans. The
        second attempt then sees the import as already in progress,
        which confirms it was kicked off.
        """
        operation = SlowOperation(
            f"{self.asset_id} import_address",
            lambda: self._import(address),
            timeout=self.import_timeout,
        )
        state = await operation.run()
        logger.info(f"{self.asset_id} import of {address}: {state.value}")

    async def close(self) -> None:
        await self.rpc.close()


def new_bitcoin_family_client(
    asset_id: str,
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BitcoinClient:
    """Build the client for one UTXO chain from settings."""
    url = settings.node_url(UTXO_NODE_SETTINGS[asset_id])
    logger.info(f"{asset_id} node at {url}")

    auth = None
    if settings.rpc_user:
        auth = httpx.BasicAuth(settings.rpc_user, settings.rpc_pass)

    rpc = BitcoinRPC(
        url,
        timeout=settings.client_timeout_seconds or DEFAULT_CLIENT_TIMEOUT,
        auth=auth,
        transport=transport,
    )
    return BitcoinClient(asset_id, rpc, import_timeout=settings.import_timeout_seconds)
