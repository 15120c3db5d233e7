"""Fakes and mock node transports shared by the tests."""

import asyncio
import json
from typing import Callable, Optional

import httpx

from coins_oracle.clients.base import AddressImporter, CoinClient
from coins_oracle.confirmations import finalized
from coins_oracle.errors import OracleError
from coins_oracle.models import AssetBalance, Balance, ChainState, Transaction


class FakeCoinClient(CoinClient):
    """In-memory client returning canned answers."""

    def __init__(
        self,
        asset_id: str,
        info: Optional[ChainState] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        self.asset_id = asset_id
        self.info = info or ChainState(
            chain_name="main", block_height=100, current_block_hash=f"{asset_id}-head"
        )
        self.error = error
        self.delay = delay
        self.info_calls = 0
        self.closed = False

    async def _maybe_fail(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error

    async def get_info(self) -> ChainState:
        self.info_calls += 1
        await self._maybe_fail()
        return self.info

    async def get_balance(self, address: str) -> Balance:
        await self._maybe_fail()
        return Balance(assets=[AssetBalance(asset_symbol=self.asset_id, balance="1.5")])

    async def get_transaction_by_hash(self, tx_hash: str) -> Transaction:
        await self._maybe_fail()
        return Transaction(
            id=tx_hash,
            from_address="sender",
            to_address="receiver",
            value="2.25",
            confirmation=finalized(),
        )

    async def close(self) -> None:
        self.closed = True


class FakeImporterClient(FakeCoinClient, AddressImporter):
    """Fake client that also supports address import."""

    def __init__(self, asset_id: str, import_error: Optional[OracleError] = None, **kwargs):
        super().__init__(asset_id, **kwargs)
        self.import_error = import_error
        self.imported: list[str] = []

    async def import_address(self, address: str) -> None:
        if self.import_error:
            raise self.import_error
        self.imported.append(address)


def rpc_transport(
    handlers: dict[str, Callable], calls: Optional[list] = None
) -> httpx.MockTransport:
    """Mock JSON-RPC node.

    ``handlers`` maps an RPC method to a function taking the params and
    returning either a result or a full ``httpx.Response``.
    """

    async def handle(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        if calls is not None:
            calls.append(payload)
        handler = handlers[payload["method"]]
        result = handler(payload["params"])
        if asyncio.iscoroutine(result):
            result = await result
        if isinstance(result, httpx.Response):
            return result
        return httpx.Response(200, json={"jsonrpc": payload["jsonrpc"], "id": payload["id"], "result": result})

    return httpx.MockTransport(handle)


def rpc_error(code: int, message: str, status_code: int = 500) -> httpx.Response:
    """A bitcoind-style RPC error response."""
    return httpx.Response(
        status_code,
        json={"result": None, "error": {"code": code, "message": message}, "id": 1},
    )


def rest_transport(routes: dict[str, object], calls: Optional[list] = None) -> httpx.MockTransport:
    """Mock REST node answering GET paths with JSON bodies (or responses)."""

    def handle(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        body = routes.get(request.url.path)
        if body is None:
            return httpx.Response(404, json={"status": 404, "title": "Resource Missing"})
        if isinstance(body, httpx.Response):
            return body
        return httpx.Response(200, json=body)

    return httpx.MockTransport(handle)


