"""Client registry and node listing.

``CoinResolver`` maps asset identifiers to live clients. Keys are
case-insensitive and a later registration replaces an earlier one.
The map is guarded by a lock that is only held while the dict is read
or written, never across a network call.
"""

import asyncio
import logging
import threading

from coins_oracle.clients.base import CoinClient
from coins_oracle.errors import NotFoundError
from coins_oracle.models import RegisteredNode

logger = logging.getLogger(__name__)


class CoinResolver:
    """Lookup container for chain clients keyed by asset identifier."""

    def __init__(self):
        self._clients: dict[str, CoinClient] = {}
        self._lock = threading.Lock()

    def register(self, asset_id: str, client: CoinClient) -> "CoinResolver":
        """Register a client under an asset id, replacing any existing one.

        Returns the resolver so registrations can be chained.
        """
        key = asset_id.lower()
        with self._lock:
            replaced = key in self._clients
            self._clients[key] = client

        if replaced:
            logger.debug(f"Replaced client registered for {key}")
        return self

    def get(self, asset_id: str) -> CoinClient:
        """Get the client registered for an asset id.

        Raises:
            NotFoundError: no client is registered under the id
        """
        with self._lock:
            client = self._clients.get(asset_id.lower())

        if client is None:
            raise NotFoundError(asset_id)
        return client

    def entries(self) -> list[tuple[str, CoinClient]]:
        """Snapshot of (asset id, client) pairs."""
        with self._lock:
            return list(self._clients.items())

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)

    def __contains__(self, asset_id: str) -> bool:
        with self._lock:
            return asset_id.lower() in self._clients

    async def get_nodes(self, info: bool = True) -> list[RegisteredNode]:
        """List every registered client.

        Args:
            info: Query each client's chain state concurrently and attach it

        A client whose ``get_info`` fails is still listed, without info.
        The call returns once every client has answered, so it takes as
        long as the slowest client.
        """
        entries = self.entries()
        nodes = [RegisteredNode(asset_id=asset_id, running=True) for asset_id, _ in entries]

        if not info or not entries:
            return nodes

        async def fetch(index: int, asset_id: str, client: CoinClient) -> None:
            logger.debug(f"executing a get_info request for {asset_id}")
            try:
                state = await client.get_info()
            except Exception as e:
                logger.warning(f"{asset_id} client returned error: {e}")
                return

            logger.debug(f"{asset_id} client returned {state}")
            nodes[index].info = state

        logger.info(f"Waiting for {len(entries)} coin nodes")
        await asyncio.gather(
            *(fetch(index, asset_id, client) for index, (asset_id, client) in enumerate(entries))
        )
        return nodes

    async def close(self) -> None:
        """Close every registered client."""
        for asset_id, client in self.entries():
            try:
                await client.close()
            except Exception as e:
                logger.warning(f"Error closing {asset_id} client: {e}")

