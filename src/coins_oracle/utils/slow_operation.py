"""Bounded waiting for node calls that may block for hours.

Some node operations (importing an address into a wallet, which kicks
off a rescan) only answer once the side effect has finished. They are
idempotent, and a repeat call made while the first one is still running
is answered with an "already in progress" error instead.

A ``SlowOperation`` starts the call in the background and stops waiting
after ``timeout`` seconds. The background call is never cancelled: the
node keeps working on it, and a later attempt observes the
"already in progress" answer, which counts as success.

Each ``SlowOperation`` instance tracks a single invocation:

    NOT_STARTED -> IN_FLIGHT -> COMPLETED
                          \\-> ALREADY_IN_PROGRESS
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from coins_oracle.errors import AlreadyInProgressError, OperationTimeoutError, OracleError

logger = logging.getLogger(__name__)

DEFAULT_SLOW_OPERATION_TIMEOUT = 3.0
DEFAULT_ATTEMPTS = 2

# Started node calls, held until done so a call that outlives its
# waiter is not garbage collected.
_background_calls: set[asyncio.Future] = set()


class OperationState(str, Enum):
    """Progress of one slow operation invocation."""

    NOT_STARTED = "not_started"
    IN_FLIGHT = "in_flight"
    COMPLETED = "completed"
    ALREADY_IN_PROGRESS = "already_in_progress"

    @property
    def succeeded(self) -> bool:
        return self in (OperationState.COMPLETED, OperationState.ALREADY_IN_PROGRESS)


def _release(task: asyncio.Future) -> None:
    _background_calls.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug(f"Background slow operation finished with error: {exc}")


def pending_background_calls() -> int:
    """Number of background calls still running."""
    return len(_background_calls)


class SlowOperation:
    """Race an idempotent, possibly very slow call against a timeout.

    Example:
        operation = SlowOperation(
            "BTC import_address",
            lambda: rpc.import_address(addr),
            timeout=3.0,
        )
        await operation.run()
    """

    def __init__(
        self,
        name: str,
        call: Callable[[], Awaitable[Any]],
        timeout: float = DEFAULT_SLOW_OPERATION_TIMEOUT,
        attempts: int = DEFAULT_ATTEMPTS,
    ):
        """Initialize the operation.

        Args:
            name: Description of the operation for logging and errors
            call: Factory returning a fresh awaitable of the node call
            timeout: Seconds to wait on each attempt
            attempts: Sequential attempts made by ``run``
        """
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        self.name = name
        self.call = call
        self.timeout = timeout
        self.attempts = attempts
        self.state = OperationState.NOT_STARTED

    async def attempt(self) -> OperationState:
        """Start the call once and wait at most ``timeout`` for it.

        Returns:
            COMPLETED or ALREADY_IN_PROGRESS

        Raises:
            OperationTimeoutError: the wait expired, the call keeps running
            OracleError: the call failed
        """
        task = asyncio.ensure_future(self.call())
        _background_calls.add(task)
        task.add_done_callback(_release)
        self.state = OperationState.IN_FLIGHT

        # asyncio.wait leaves the task running on timeout
        done, _ = await asyncio.wait({task}, timeout=self.timeout)
        if task not in done:
            logger.warning(f"{self.name} still running after {self.timeout}s, no longer waiting")
            raise OperationTimeoutError(self.name, self.timeout)

        try:
            task.result()
        except AlreadyInProgressError:
            logger.info(f"{self.name} already in progress on the node")
            self.state = OperationState.ALREADY_IN_PROGRESS
            return self.state
        except Exception:
            self.state = OperationState.NOT_STARTED
            raise

        self.state = OperationState.COMPLETED
        return self.state

    async def run(self) -> OperationState:
        """Attempt the operation up to ``attempts`` times in sequence.

        A completed call or an "already in progress" answer on any
        attempt is success. The error of the last attempt propagates.
        """
        last_error: Optional[OracleError] = None

        for number in range(1, self.attempts + 1):
            try:
                return await self.attempt()
            except OracleError as e:
                logger.warning(f"{self.name} attempt {number}/{self.attempts} failed: {e}")
                last_error = e

        raise last_error
