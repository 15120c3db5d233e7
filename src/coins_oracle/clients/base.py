"""Client contract every chain adapter implements.

A ``CoinClient`` answers the three base queries in the canonical
models. Clients that can also start tracking an address additionally
implement ``AddressImporter``; callers check for it with
``supports_import`` or ``require_importer`` before importing.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator

import httpx

from coins_oracle.errors import CapabilityUnsupportedError, RPCError, UpstreamError
from coins_oracle.models import Balance, ChainState, Transaction

logger = logging.getLogger(__name__)

# Failures that mean "the node did not give us a usable answer".
UPSTREAM_FAILURES = (
    httpx.HTTPError,
    RPCError,
    KeyError,
    IndexError,
    TypeError,
    ValueError,
    ArithmeticError,
)


@contextmanager
def upstream_errors(asset_id: str, operation: str) -> Iterator[None]:
    """Wrap node and decoding failures in ``UpstreamError``."""
    try:
        yield
    except UPSTREAM_FAILURES as e:
        logger.debug(f"{asset_id} {operation} failed: {e!r}")
        raise UpstreamError(asset_id, operation, e) from e


class CoinClient(ABC):
    """Abstract base class for chain clients."""

    asset_id: str

    @abstractmethod
    async def get_info(self) -> ChainState:
        """Fetch the node's current head.

        Raises:
            UpstreamError: the node could not be queried
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_balance(self, address: str) -> Balance:
        """Fetch every balance held by an address.

        Raises:
            UpstreamError: the node could not be queried
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_transaction_by_hash(self, tx_hash: str) -> Transaction:
        """Fetch a transaction by its hash or id.

        Raises:
            UpstreamError: the node could not be queried
        """
        raise NotImplementedError()

    async def close(self) -> None:
        """Release network resources."""
        pass


class AddressImporter(ABC):
    """Optional capability: ask the node to start tracking an address."""

    @abstractmethod
    async def import_address(self, address: str) -> None:
        """Import an address so the node indexes its history.

        Raises:
            OperationTimeoutError: the node did not answer in time
            UpstreamError: the node refused the import
        """
        raise NotImplementedError()


def supports_import(client: CoinClient) -> bool:
    """Check whether a client can import addresses."""
    return isinstance(client, AddressImporter)


def require_importer(client: CoinClient, asset_id: str) -> AddressImporter:
    """Return the client as an importer or raise ``CapabilityUnsupportedError``."""
    if not supports_import(client):
        raise CapabilityUnsupportedError(asset_id, "import address")
    return client
