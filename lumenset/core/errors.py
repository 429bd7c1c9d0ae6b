"""Exception hierarchy for dataset generation."""

from typing import Optional


class GenerationError(RuntimeError):
    """Base class for every failure raised while talking to the generation service."""


class TransportError(GenerationError):
    """A job submission or status check failed at the HTTP level.

    Attributes:
        status_code: HTTP status code, or None for network-level failures
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(TransportError):
    """The service rejected the API key (HTTP 401/403)."""


class RemoteJobError(GenerationError):
    """The remote job finished with status ERROR."""


class GenerationTimeoutError(GenerationError, TimeoutError):
    """The job did not reach a terminal state within the poll budget."""


class ContractViolationError(GenerationError):
    """The service answered with a payload missing a required field."""


class QueueClearedError(GenerationError):
    """A pending request was discarded before it was sent."""
