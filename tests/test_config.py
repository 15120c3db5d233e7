"""Tests for settings and startup registration."""

import pytest

from coins_oracle.bootstrap import DEFAULT_CLIENTS, new_resolver
from coins_oracle.clients.bitcoin import BitcoinClient
from coins_oracle.clients.ethereum import ERC20_TOKENS, ERC20Client, EthereumClient
from coins_oracle.clients.lisk import LiskClient
from coins_oracle.clients.stellar import StellarClient
from coins_oracle.config import DEFAULT_NODE_URL, Settings, normalize_node_url
from coins_oracle.errors import ClientConstructionError
from fakes import FakeCoinClient


class TestSettings:
    """Tests for node URL handling and redaction."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("", DEFAULT_NODE_URL),
            ("   ", DEFAULT_NODE_URL),
            ("node:8332", "http://node:8332"),
            ("http://node:8332", "http://node:8332"),
            ("https://horizon.stellar.org", "https://horizon.stellar.org"),
        ],
    )
    def test_normalize_node_url(self, value, expected):
        assert normalize_node_url(value) == expected

    def test_node_url(self):
        settings = Settings(bitcoin_url="btc-node:8332")

        assert settings.node_url("bitcoin_url") == "http://btc-node:8332"
        assert settings.node_url("lisk_url") == DEFAULT_NODE_URL

    def test_safe_dict_redacts_password(self):
        settings = Settings(rpc_user="oracle", rpc_pass="hunter2")

        safe = settings.get_safe_dict()

        assert safe["rpc_pass"] == "***"
        assert "hunter2" not in str(safe)
        assert safe["nodes"]["BTC"] == settings.node_url("bitcoin_url")


class TestBootstrap:
    """Tests for new_resolver."""

    def test_registers_every_default_client(self):
        resolver = new_resolver(Settings())

        assert len(resolver) == len(DEFAULT_CLIENTS)
        assert isinstance(resolver.get("BTC"), BitcoinClient)
        assert isinstance(resolver.get("eth"), EthereumClient)
        assert isinstance(resolver.get("Xlm"), StellarClient)
        assert isinstance(resolver.get("lsk"), LiskClient)
        for token in ERC20_TOKENS:
            client = resolver.get(token.lower())
            assert isinstance(client, ERC20Client)
            assert client.contract_address == ERC20_TOKENS[token]

    def test_forks_get_their_own_client(self):
        resolver = new_resolver(Settings())

        btc = resolver.get("btc")
        ltc = resolver.get("ltc")
        assert btc is not ltc
        assert btc.asset_id == "BTC"
        assert ltc.asset_id == "LTC"

    def test_custom_constructors(self):
        resolver = new_resolver(Settings(), clients=[("ABC", lambda settings: FakeCoinClient("ABC"))])

        assert len(resolver) == 1
        assert resolver.get("abc").asset_id == "ABC"

    def test_constructor_failure_aborts(self):
        def broken(settings):
            raise RuntimeError("bad endpoint")

        with pytest.raises(ClientConstructionError) as exc_info:
            new_resolver(Settings(), clients=[("OK", lambda s: FakeCoinClient("OK")), ("BAD", broken)])

        assert exc_info.value.asset_id == "BAD"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
