"""HTTP and JSON-RPC plumbing shared by REST and RPC clients."""

import itertools
import logging
import re
from typing import Any, Optional

import httpx

from coins_oracle.errors import RPCError

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_TIMEOUT = 3.0

_HEX_PREFIX_RE = re.compile(r"^0x")


def strip_hex(value: str) -> str:
    """Remove a leading 0x from a hex string."""
    return _HEX_PREFIX_RE.sub("", value)


class BaseClient:
    """Thin async HTTP client bound to one node's base URL.

    The underlying ``httpx.AsyncClient`` is created on first use and
    reused for every request, so a single instance may serve concurrent
    callers.
    """

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = DEFAULT_CLIENT_TIMEOUT,
        auth: Optional[httpx.Auth] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Node URL, scheme included
            timeout: Per-request network timeout in seconds
            auth: Optional authentication (basic auth for RPC nodes)
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.auth = auth
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                auth=self.auth,
                transport=self._transport,
            )
        return self._client

    def url(self, path: str) -> str:
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request and return the raw response without status checks."""
        client = await self._get_client()
        url = self.url(path)
        logger.debug(f"making {method} request to {url}")
        response = await client.request(method, url, **kwargs)
        logger.debug(f"received {response.status_code} from {method} to {url}")
        return response

    async def get(self, path: str, params: Optional[dict] = None) -> Any:
        """GET a path and decode the JSON body."""
        response = await self.request("GET", path, params=params)
        response.raise_for_status()
        return response.json()

    async def post(self, path: str, body: Any = None) -> Any:
        """POST a JSON body to a path and decode the JSON response."""
        response = await self.request("POST", path, json=body)
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None


class JSONRPCClient(BaseClient):
    """JSON-RPC over HTTP POST.

    bitcoind answers RPC errors with a non-2xx status and an error body,
    so the body is inspected for an ``error`` member before the status.
    """

    version = "2.0"

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._ids = itertools.count(1)

    async def call(self, method: str, *params: Any) -> Any:
        """Invoke an RPC method and return its ``result``."""
        return await self._call(method, list(params))

    async def _call(self, method: str, params: list, **request_kwargs: Any) -> Any:
        payload = {
            "jsonrpc": self.version,
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        response = await self.request("POST", "/", json=payload, **request_kwargs)

        try:
            data = response.json()
        except ValueError:
            response.raise_for_status()
            raise

        if not isinstance(data, dict):
            response.raise_for_status()
            raise RPCError(None, f"malformed response: {data!r}")

        error = data.get("error")
        if error:
            if isinstance(error, dict):
                raise RPCError(error.get("code"), error.get("message", ""))
            raise RPCError(None, str(error))

        response.raise_for_status()
        return data.get("result")
