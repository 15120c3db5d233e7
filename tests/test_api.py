"""Tests for the FastAPI endpoints."""

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from coins_oracle.api.app import create_app
from coins_oracle.clients.bitcoin import BitcoinClient, BitcoinRPC
from coins_oracle.errors import OperationTimeoutError, UpstreamError
from coins_oracle.resolver import CoinResolver
from fakes import FakeCoinClient, FakeImporterClient, rpc_transport


@pytest.fixture
def test_resolver() -> CoinResolver:
    resolver = CoinResolver()
    resolver.register("BTC", FakeImporterClient("BTC"))
    resolver.register("XLM", FakeCoinClient("XLM"))
    resolver.register(
        "ETH", FakeCoinClient("ETH", error=UpstreamError("ETH", "node", "connection refused"))
    )
    return resolver


@pytest.fixture
async def client(test_resolver):
    """Create async test client."""
    app = create_app(test_resolver)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    @pytest.mark.asyncio
    async def test_ping(self, client):
        response = await client.get("/ping")

        assert response.status_code == 200
        assert response.json() == {"message": "pong"}

    @pytest.mark.asyncio
    async def test_health_check(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_detailed_health(self, client):
        """Detailed health reports the registry and redacted config."""
        response = await client.get("/health/detailed")

        assert response.status_code == 200
        data = response.json()
        assert data["registered_clients"] == 3
        assert "nodes" in data["config"]
        assert data["config"]["rpc_pass"] in ("***", "(not set)")


class TestNodeList:
    """Tests for GET /nodes."""

    @pytest.mark.asyncio
    async def test_nodes_with_info(self, client):
        response = await client.get("/nodes")

        assert response.status_code == 200
        nodes = {node["assetId"]: node for node in response.json()["data"]["nodes"]}
        assert set(nodes) == {"btc", "xlm", "eth"}
        assert nodes["btc"]["info"]["block_height"] == 100
        assert nodes["xlm"]["info"]["chain"] == "main"
        # A failing node is listed without info
        assert nodes["eth"] == {"assetId": "eth", "running": True}

    @pytest.mark.asyncio
    async def test_nodes_without_info(self, client, test_resolver):
        response = await client.get("/nodes", params={"noinfo": "true"})

        assert response.status_code == 200
        nodes = response.json()["data"]["nodes"]
        assert len(nodes) == 3
        assert all("info" not in node for node in nodes)
        assert test_resolver.get("btc").info_calls == 0

    @pytest.mark.asyncio
    async def test_noinfo_any_casing(self, client, test_resolver):
        response = await client.get("/nodes", params={"noinfo": "TRUE"})

        assert response.status_code == 200
        assert all("info" not in node for node in response.json()["data"]["nodes"])
        assert test_resolver.get("btc").info_calls == 0

    @pytest.mark.parametrize("value", ["abc", "false", "1", ""])
    @pytest.mark.asyncio
    async def test_noinfo_other_values_mean_false(self, client, value):
        """Anything but "true" still returns the listing with info."""
        response = await client.get("/nodes", params={"noinfo": value})

        assert response.status_code == 200
        nodes = {node["assetId"]: node for node in response.json()["data"]["nodes"]}
        assert nodes["btc"]["info"]["block_height"] == 100


class TestNodeEndpoints:
    """Tests for the per-asset endpoints."""

    @pytest.mark.asyncio
    async def test_unknown_asset(self, client):
        response = await client.get("/nodes/NOPE/info")

        assert response.status_code == 404
        assert response.json() == {"error": "asset: NOPE was not found"}

    @pytest.mark.asyncio
    async def test_info(self, client):
        response = await client.get("/nodes/Btc/info")

        assert response.status_code == 200
        assert response.json()["data"] == {
            "chain": "main",
            "block_height": 100,
            "current_block_hash": "BTC-head",
        }

    @pytest.mark.asyncio
    async def test_info_error(self, client):
        response = await client.get("/nodes/eth/info")

        assert response.status_code == 400
        assert response.json()["code"] == 401

    @pytest.mark.asyncio
    async def test_malformed_node_response(self, test_resolver):
        """A node answering with a bare JSON list gives an error body, not a 500."""
        rpc = BitcoinRPC(
            "http://node.test",
            transport=rpc_transport({"getblockchaininfo": lambda params: httpx.Response(200, json=[])}),
        )
        test_resolver.register("BTC", BitcoinClient("BTC", rpc))
        app = create_app(test_resolver)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.get("/nodes/btc/info")

        assert response.status_code == 400
        assert response.json() == {
            "data": None,
            "error": "unable to get node information for given coin",
            "code": 401,
        }

    @pytest.mark.asyncio
    async def test_balance(self, client):
        response = await client.get("/nodes/xlm/addrs/GABC/balance")

        assert response.status_code == 200
        assert response.json() == {"data": {"assets": [{"asset": "XLM", "balance": "1.5"}]}}

    @pytest.mark.asyncio
    async def test_balance_error(self, client):
        response = await client.get("/nodes/eth/addrs/0xabc/balance")

        assert response.status_code == 400
        assert response.json() == {
            "data": None,
            "error": "could not get balance of given address",
            "code": 202,
        }

    @pytest.mark.asyncio
    async def test_transaction(self, client):
        response = await client.get("/nodes/btc/txs/aa11")

        assert response.status_code == 200
        assert response.json() == {"data": {"transaction": {
            "id": "aa11",
            "from": "sender",
            "to": "receiver",
            "value": "2.25",
            "confirmations": {"confirmed": True},
        }}}

    @pytest.mark.asyncio
    async def test_transaction_error(self, client):
        response = await client.get("/nodes/eth/txs/0xabc")

        assert response.status_code == 400
        assert response.json()["code"] == 301


class TestImportAddress:
    """Tests for POST /nodes/{asset_id}/addrs/import."""

    @pytest.mark.asyncio
    async def test_import(self, client, test_resolver):
        response = await client.post("/nodes/btc/addrs/import", json={"addr": "bc1qwatch"})

        assert response.status_code == 200
        assert response.json() == {"data": "success"}
        assert test_resolver.get("btc").imported == ["bc1qwatch"]

    @pytest.mark.asyncio
    async def test_missing_addr(self, client):
        response = await client.post("/nodes/btc/addrs/import", json={})

        assert response.status_code == 400
        assert response.json()["code"] == 101

    @pytest.mark.asyncio
    async def test_invalid_json(self, client):
        response = await client.post(
            "/nodes/btc/addrs/import",
            content=b"not json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == 101

    @pytest.mark.asyncio
    async def test_client_without_import(self, client):
        response = await client.post("/nodes/xlm/addrs/import", json={"addr": "GABC"})

        assert response.status_code == 400
        assert response.json() == {
            "data": None,
            "error": "client: xlm does not have import address functionality",
            "code": 201,
        }

    @pytest.mark.asyncio
    async def test_import_failure(self, test_resolver):
        test_resolver.register(
            "LTC",
            FakeImporterClient("LTC", import_error=OperationTimeoutError("LTC import_address", 3.0)),
        )
        app = create_app(test_resolver)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.post("/nodes/ltc/addrs/import", json={"addr": "ltc1qwatch"})

        assert response.status_code == 400
        assert response.json()["error"] == "could not import address"
        assert response.json()["code"] == 201
