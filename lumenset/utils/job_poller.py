"""Status polling for asynchronous generation jobs."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from tenacity import AsyncRetrying, RetryError, retry_if_result, stop_after_attempt, wait_fixed

from lumenset.core.errors import GenerationTimeoutError, RemoteJobError

logger = logging.getLogger(__name__)

StatusFetcher = Callable[[str], Awaitable[Dict[str, Any]]]
ProgressCallback = Callable[[int, int], Any]

STATUS_COMPLETED = "COMPLETED"
STATUS_ERROR = "ERROR"
STATUS_IN_PROGRESS = "IN_PROGRESS"


def _is_pending(status: Dict[str, Any]) -> bool:
    return status.get("status") != STATUS_COMPLETED


class JobPoller:
    """Polls a job's status URL until it completes, fails or times out.

    COMPLETED returns the job's result, ERROR raises RemoteJobError right
    away, and any other status (IN_PROGRESS or unrecognised) keeps polling.
    A failed status check is not retried: the exception aborts the poll.

    Attributes:
        poll_interval: Seconds between status checks
        max_attempts: Status checks allowed before giving up
    """

    def __init__(
        self,
        fetch_status: StatusFetcher,
        poll_interval: float = 2.0,
        max_attempts: int = 60,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        """Initialize the poller.

        Args:
            fetch_status: Coroutine function returning the decoded status document
            poll_interval: Seconds between checks (default: 2.0)
            max_attempts: Maximum number of checks (default: 60)
            sleep: Coroutine used between checks, replaceable in tests

        Raises:
            ValueError: If poll_interval is negative or max_attempts is not positive
        """
        if poll_interval < 0:
            raise ValueError("poll_interval must not be negative")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self._fetch_status = fetch_status
        self._sleep = sleep

    @property
    def timeout_seconds(self) -> float:
        return self.poll_interval * self.max_attempts

    async def poll(
        self,
        status_url: str,
        on_progress: Optional[ProgressCallback] = None
    ) -> Dict[str, Any]:
        """Wait for a job to reach a terminal state.

        Args:
            status_url: Status URL returned by the submission
            on_progress: Called as on_progress(attempt, max_attempts) for each
                IN_PROGRESS answer

        Returns:
            The job's result payload

        Raises:
            RemoteJobError: If the job reports ERROR
            GenerationTimeoutError: If max_attempts checks pass without completion
            TransportError: If a status check fails
        """
        attempt = 0

        async def check() -> Dict[str, Any]:
            nonlocal attempt
            attempt += 1
            status = await self._fetch_status(status_url)
            state = status.get("status")
            logger.debug(f"Poll {attempt}/{self.max_attempts} for {status_url}: {state}")

            if state == STATUS_ERROR:
                error = status.get("error") or {}
                message = error.get("message") if isinstance(error, dict) else str(error)
                raise RemoteJobError(message or "Generation failed")

            if state == STATUS_IN_PROGRESS:
                if on_progress:
                    on_progress(attempt, self.max_attempts)
            elif state != STATUS_COMPLETED:
                logger.warning(f"Unrecognised job status {state!r}, still waiting")

            return status

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.poll_interval),
            retry=retry_if_result(_is_pending),
            sleep=self._sleep
        )

        try:
            status = await retrying(check)
        except RetryError as e:
            logger.error(f"Job at {status_url} did not finish after {attempt} checks")
            raise GenerationTimeoutError(
                f"Generation timeout ({self.timeout_seconds:g} seconds exceeded)"
            ) from e

        return status.get("result") or {}

    def __repr__(self) -> str:
        """String representation."""
        return f"JobPoller(poll_interval={self.poll_interval}, max_attempts={self.max_attempts})"
