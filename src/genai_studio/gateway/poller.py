"""Polling for long-running remote operations.

The poller re-fetches an operation on a fixed interval until it is done. It
does not classify, retry or rotate: a failed status check propagates as-is,
and callers that want rotation run the whole poll inside the executor.
"""

import asyncio
import json
import logging
from typing import Awaitable, Callable, List, Optional, TypeVar

from ..messages import ENGLISH, MessageCatalog
from .errors import ContentFilterError, GeminiAPIError
from .types import OperationHandle

logger = logging.getLogger(__name__)

T = TypeVar("T")

ProgressCallback = Callable[[str], None]

# google.rpc.Code values that an operation error may carry without a status name
_RPC_STATUS_NAMES = {
    8: "RESOURCE_EXHAUSTED",
    13: "INTERNAL",
    14: "UNAVAILABLE",
    16: "UNAUTHENTICATED",
}


def _operation_failure(handle: OperationHandle) -> GeminiAPIError:
    """Turn a finished operation's error object into a raw API failure."""
    error = dict(handle.error or {})
    if "status" not in error and error.get("code") in _RPC_STATUS_NAMES:
        error["status"] = _RPC_STATUS_NAMES[error["code"]]
    payload = {"error": error}
    # The status request itself succeeded; the failure is inside the operation.
    return GeminiAPIError(status_code=200, payload=payload, text=json.dumps(payload))


class OperationPoller:
    """Polls an OperationHandle until done and extracts its results."""

    def __init__(
        self,
        interval_seconds: float = 10.0,
        catalog: MessageCatalog = ENGLISH,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the poller.

        Args:
            interval_seconds: Fixed wait between status checks.
            catalog: Message catalog for progress and no-output messages.
            sleep: Awaitable sleep function (replaceable in tests).
        """
        self.interval_seconds = interval_seconds
        self._catalog = catalog
        self._sleep = sleep

    async def poll(
        self,
        handle: OperationHandle,
        refresh: Callable[[OperationHandle], Awaitable[OperationHandle]],
        on_progress: Optional[ProgressCallback] = None,
        extract: Callable[[OperationHandle], List[T]] = OperationHandle.result_links,
    ) -> List[T]:
        """Wait for an operation to finish and return its results.

        Args:
            handle: Handle returned by the initiating call.
            refresh: Re-fetches the handle's status, bound to the credential
                that created it.
            on_progress: Receives a progress message on every tick.
            extract: Pulls the result list out of the finished handle.

        Returns:
            Non-empty list of results.

        Raises:
            GeminiAPIError: If the operation finished with an error object.
            ContentFilterError: If the operation finished without results.
        """
        ticks = 0
        while not handle.done:
            await self._sleep(self.interval_seconds)
            ticks += 1
            logger.debug("Polling operation %s (tick %d)", handle.name, ticks)
            if on_progress is not None:
                on_progress(self._catalog.video_checking)
            handle = await refresh(handle)

        if handle.error:
            logger.warning("Operation %s finished with an error", handle.name)
            raise _operation_failure(handle)

        results = extract(handle)
        if not results:
            raise ContentFilterError(self._catalog.no_video_links)
        logger.info("Operation %s finished after %d poll(s)", handle.name, ticks)
        return results
