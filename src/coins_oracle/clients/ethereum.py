"""Ethereum, Ethereum Classic and ERC-20 tokens over Ethereum JSON-RPC.

Token clients reuse the Ethereum protocol client: an ``ERC20Client``
wraps an ``EthereumRPC`` for the Ethereum node and adds the token's
contract address.

Amounts are reported in the chain's smallest unit (wei, token base
units), as the node returns them.
"""

import logging
from typing import Optional

import httpx

from coins_oracle.clients.base import CoinClient, upstream_errors
from coins_oracle.config import Settings
from coins_oracle.confirmations import by_height
from coins_oracle.models import AssetBalance, Balance, ChainState, Transaction
from coins_oracle.transport.http import JSONRPCClient, strip_hex

logger = logging.getLogger(__name__)

ETHEREUM_ASSET_ID = "ETH"
ETHEREUM_CLASSIC_ASSET_ID = "ETC"

# Asset id -> ERC-20 contract address (mainnet)
ERC20_TOKENS = {
    "USDT": "0xdAC17F958D2ee523a2206206994597C13D831ec7",
    "ZRX": "0xE41d2489571d322189246DaFA5ebDe1F4699F498",
    "BAT": "0x0D8775F648430679A709E98d2b0Cb6250d2887EF",
    "LINK": "0x514910771AF9Ca656af840dff83E8264EcF986CA",
    "ICX": "0xb5a5f22694352c15b00323844ad545abb2b11028",
    "MKR": "0x9f8f72aa9304c8b593d555f12ef6589cc3a579a2",
    "OMG": "0xd26114cd6EE289AccF82350c8d8487fedB8A0C07",
    "VEN": "0xd850942ef8811f2a866692a623011bde52a462c1",
    "ZIL": "0x05f4a42e251f2d52b8ed15E9FEdAacFcEF1FAD27",
}

# keccak("balanceOf(address)")[:4]
BALANCE_OF_SELECTOR = "0x70a08231"
# keccak("transfer(address,uint256)")[:4]
TRANSFER_SELECTOR = "0xa9059cbb"


def _hex_to_int(value: Optional[str]) -> int:
    if not value or value == "0x":
        return 0
    return int(value, 16)


def _pad_address(address: str) -> str:
    return strip_hex(address).lower().rjust(64, "0")


class EthereumRPC(JSONRPCClient):
    """Ethereum JSON-RPC methods used by the clients."""

    async def network_id(self) -> str:
        return await self.call("net_version")

    async def block_number(self) -> int:
        return _hex_to_int(await self.call("eth_blockNumber"))

    async def latest_block(self) -> dict:
        return await self.call("eth_getBlockByNumber", "latest", False)

    async def get_balance(self, address: str) -> int:
        return _hex_to_int(await self.call("eth_getBalance", address, "latest"))

    async def get_transaction(self, tx_hash: str) -> Optional[dict]:
        return await self.call("eth_getTransactionByHash", tx_hash)

    async def get_receipt(self, tx_hash: str) -> Optional[dict]:
        return await self.call("eth_getTransactionReceipt", tx_hash)

    async def call_contract(self, to: str, data: str) -> str:
        return await self.call("eth_call", {"to": to, "data": data}, "latest")

    async def chain_state(self) -> ChainState:
        """Network id plus the latest block."""
        chain = await self.network_id()
        block = await self.latest_block()
        return ChainState(
            chain_name=str(chain),
            block_height=_hex_to_int(block["number"]),
            current_block_hash=block["hash"],
        )

    async def confirmed_transaction(self, tx_hash: str) -> tuple[dict, int, Optional[int]]:
        """Fetch a transaction with the current head and its inclusion height.

        Returns:
            (transaction, head height, block height or None while pending)
        """
        head = await self.block_number()
        tx = await self.get_transaction(tx_hash)
        if tx is None:
            raise ValueError(f"transaction not found: {tx_hash}")

        receipt = await self.get_receipt(tx_hash)
        tx_height = None
        if receipt and receipt.get("blockNumber"):
            tx_height = _hex_to_int(receipt["blockNumber"])
        return tx, head, tx_height


class EthereumClient(CoinClient):
    """Client for Ethereum-compatible account chains (ETH, ETC)."""

    def __init__(self, asset_id: str, rpc: EthereumRPC):
        self.asset_id = asset_id
        self.rpc = rpc

    async def get_info(self) -> ChainState:
        with upstream_errors(self.asset_id, "get_info"):
            return await self.rpc.chain_state()

    async def get_balance(self, address: str) -> Balance:
        with upstream_errors(self.asset_id, "get_balance"):
            wei = await self.rpc.get_balance(address)
        return Balance(assets=[AssetBalance(asset_symbol=self.asset_id, balance=str(wei))])

    async def get_transaction_by_hash(self, tx_hash: str) -> Transaction:
        with upstream_errors(self.asset_id, "get_transaction_by_hash"):
            tx, head, tx_height = await self.rpc.confirmed_transaction(tx_hash)
            return Transaction(
                id=tx_hash,
                from_address=tx["from"],
                to_address=tx.get("to") or "",
                value=str(_hex_to_int(tx["value"])),
                confirmation=by_height(head, tx_height),
            )

    async def close(self) -> None:
        await self.rpc.close()


class ERC20Client(CoinClient):
    """Client for one ERC-20 token on an Ethereum node."""

    def __init__(self, asset_id: str, contract_address: str, rpc: EthereumRPC):
        """Initialize the client.

        Args:
            asset_id: Token symbol (USDT, LINK, ...)
            contract_address: Token contract address
            rpc: JSON-RPC connection to an Ethereum node
        """
        self.asset_id = asset_id
        self.contract_address = contract_address
        self.rpc = rpc

    async def get_info(self) -> ChainState:
        """Tokens have no chain of their own; report the Ethereum head."""
        with upstream_errors(self.asset_id, "get_info"):
            return await self.rpc.chain_state()

    async def get_balance(self, address: str) -> Balance:
        with upstream_errors(self.asset_id, "get_balance"):
            result = await self.rpc.call_contract(
                self.contract_address, BALANCE_OF_SELECTOR + _pad_address(address)
            )
            if not result or result == "0x":
                raise ValueError("contract returned no data for balanceOf")
            amount = _hex_to_int(result)

        return Balance(assets=[AssetBalance(asset_symbol=self.asset_id, balance=str(amount))])

    async def get_transaction_by_hash(self, tx_hash: str) -> Transaction:
        """Get a token transfer.

        Recipient and amount are decoded from the ``transfer`` call data.
        """
        with upstream_errors(self.asset_id, "get_transaction_by_hash"):
            tx, head, tx_height = await self.rpc.confirmed_transaction(tx_hash)

            data = tx.get("input", "")
            if not data.startswith(TRANSFER_SELECTOR):
                raise ValueError(f"transaction {tx_hash} is not a token transfer")

            # selector (10 chars) + address word (64) + amount word (64)
            to_word = data[10:74]
            amount_word = data[74:138]
            if len(amount_word) != 64:
                raise ValueError(f"malformed transfer input in {tx_hash}")

            return Transaction(
                id=tx_hash,
                from_address=tx["from"],
                to_address="0x" + to_word[-40:],
                value=str(int(amount_word, 16)),
                confirmation=by_height(head, tx_height),
            )

    async def close(self) -> None:
        await self.rpc.close()


def _rpc_from_settings(
    settings: Settings, setting_name: str, transport: Optional[httpx.AsyncBaseTransport]
) -> EthereumRPC:
    url = settings.node_url(setting_name)
    logger.info(f"{setting_name} resolved to {url}")
    return EthereumRPC(url, timeout=settings.client_timeout_seconds, transport=transport)


def new_ethereum_client(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> EthereumClient:
    return EthereumClient(ETHEREUM_ASSET_ID, _rpc_from_settings(settings, "ethereum_url", transport))


def new_ethereum_classic_client(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> EthereumClient:
    return EthereumClient(
        ETHEREUM_CLASSIC_ASSET_ID, _rpc_from_settings(settings, "ethereumclassic_url", transport)
    )


def new_erc20_client(
    asset_id: str,
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ERC20Client:
    """Build a token client.

    Raises:
        KeyError: the token is not listed in ``ERC20_TOKENS``
    """
    contract = ERC20_TOKENS[asset_id]
    return ERC20Client(asset_id, contract, _rpc_from_settings(settings, "ethereum_url", transport))
