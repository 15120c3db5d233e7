"""Error taxonomy shared by the registry, the adapters and the API."""

from typing import Optional, Union


class OracleError(Exception):
    """Base class for every error raised by coins-oracle."""

    pass


class NotFoundError(OracleError):
    """Raised when no client is registered for an asset identifier."""

    def __init__(self, asset_id: str):
        self.asset_id = asset_id
        super().__init__(
            f"could not find client named: {asset_id}, have you registered the client"
        )


class UpstreamError(OracleError):
    """A client failed talking to its node.

    Carries the asset and the contract operation that failed. The
    original exception is chained as ``__cause__``.
    """

    def __init__(self, asset_id: str, operation: str, cause: Union[Exception, str]):
        self.asset_id = asset_id
        self.operation = operation
        self.cause = cause
        super().__init__(f"{asset_id} {operation} failed: {cause}")


class RPCError(OracleError):
    """Error object returned in a JSON-RPC response."""

    def __init__(self, code: Optional[int], message: str):
        self.code = code
        self.message = message
        super().__init__(f"rpc error {code}: {message}")


class CapabilityUnsupportedError(OracleError):
    """An optional capability was requested from a client that lacks it."""

    def __init__(self, asset_id: str, capability: str):
        self.asset_id = asset_id
        self.capability = capability
        super().__init__(f"client: {asset_id} does not have {capability} functionality")


class OperationTimeoutError(OracleError):
    """Stopped waiting on a slow operation.

    The operation itself may still be running on the node.
    """

    def __init__(self, operation: str, timeout: float):
        self.operation = operation
        self.timeout = timeout
        super().__init__(f"{operation} timed out after {timeout}s")


class AlreadyInProgressError(OracleError):
    """The node reports the requested side effect as already started or done."""

    pass


class ClientConstructionError(OracleError):
    """A client could not be built at startup."""

    def __init__(self, asset_id: str, cause: Exception):
        self.asset_id = asset_id
        super().__init__(f"error creating client for {asset_id}: {cause}")
