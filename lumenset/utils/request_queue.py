"""Serialized, rate-limited submission queue for the generation API."""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Deque, Dict, Optional

from lumenset.core.errors import QueueClearedError

logger = logging.getLogger(__name__)

Sender = Callable[[str, Dict[str, Any]], Awaitable[Dict[str, Any]]]


@dataclass
class QueueEntry:
    """A pending call and the future its caller is waiting on."""
    endpoint: str
    body: Dict[str, Any]
    future: "asyncio.Future[Dict[str, Any]]"


class RequestQueue:
    """FIFO queue that keeps at most one request in flight.

    After every completed request, successful or not, the queue waits
    `request_delay` seconds before sending the next one. The delay starts
    when the response arrives, so each call costs latency plus delay.
    A failed entry is reported to its own caller only; the queue keeps
    going with the next entry.

    Attributes:
        request_delay: Cooldown in seconds after each completed request

    Example:
        queue = RequestQueue(send=backend.post_json, request_delay=6.0)
        response = await queue.enqueue("/image/generate", {"structured_prompt": "..."})
    """

    def __init__(
        self,
        send: Sender,
        request_delay: float = 6.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        """Initialize the queue.

        Args:
            send: Coroutine function performing one request (endpoint, body) -> response
            request_delay: Seconds to wait after each completion (default: 6.0)
            sleep: Coroutine used for the cooldown, replaceable in tests

        Raises:
            ValueError: If request_delay is negative
        """
        if request_delay < 0:
            raise ValueError("request_delay must not be negative")

        self.request_delay = request_delay
        self._send = send
        self._sleep = sleep
        self._entries: Deque[QueueEntry] = deque()
        self._processing = False
        self._worker: Optional["asyncio.Task[None]"] = None

    async def enqueue(self, endpoint: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """Queue a request and wait for its response.

        Args:
            endpoint: Path of the endpoint, relative to the API base URL
            body: JSON body

        Returns:
            The decoded JSON response

        Raises:
            Whatever the sender raised for this entry, or QueueClearedError
            if the entry was discarded by clear()
        """
        future: "asyncio.Future[Dict[str, Any]]" = asyncio.get_running_loop().create_future()
        self._entries.append(QueueEntry(endpoint, body, future))
        logger.debug(f"Queued request to {endpoint} ({len(self._entries)} pending)")

        if not self._processing:
            self._processing = True
            self._worker = asyncio.create_task(self._process())

        return await future

    async def _process(self) -> None:
        try:
            while self._entries:
                entry = self._entries.popleft()
                if entry.future.done():
                    # caller stopped waiting before the request went out
                    logger.debug(f"Skipping abandoned request to {entry.endpoint}")
                    continue

                try:
                    response = await self._send(entry.endpoint, entry.body)
                except asyncio.CancelledError:
                    entry.future.cancel()
                    raise
                except Exception as e:
                    logger.warning(f"Queued request to {entry.endpoint} failed: {e}")
                    if not entry.future.done():
                        entry.future.set_exception(e)
                else:
                    if not entry.future.done():
                        entry.future.set_result(response)

                logger.debug(
                    f"Cooling down {self.request_delay}s ({len(self._entries)} pending)"
                )
                await self._sleep(self.request_delay)
        finally:
            self._processing = False

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def length(self) -> int:
        """Number of entries waiting to be sent, excluding the one in flight."""
        return len(self._entries)

    @property
    def is_processing(self) -> bool:
        return self._processing

    def clear(self) -> int:
        """Discard all entries that have not been sent yet.

        Their callers fail with QueueClearedError. The request in flight, if
        any, is not affected.

        Returns:
            Number of discarded entries
        """
        discarded = 0
        while self._entries:
            entry = self._entries.popleft()
            if not entry.future.done():
                entry.future.set_exception(
                    QueueClearedError(f"Request to {entry.endpoint} was cleared from the queue")
                )
                discarded += 1

        if discarded:
            logger.info(f"Cleared {discarded} pending requests")
        return discarded

    async def aclose(self) -> None:
        """Clear pending entries and stop the worker."""
        self.clear()
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"RequestQueue(request_delay={self.request_delay}, "
            f"pending={len(self._entries)}, processing={self._processing})"
        )
