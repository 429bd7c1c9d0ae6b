"""Bria structured-prompt API backend implementation."""

import asyncio
import base64
import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

import httpx

from lumenset.core.base_backend import BaseBackend, ProgressCallback
from lumenset.core.errors import AuthenticationError, ContractViolationError, TransportError
from lumenset.core.models import ImageResult, StructuredPromptResult
from lumenset.utils.job_poller import JobPoller
from lumenset.utils.prompt_mutator import parse_structured_prompt, serialize_structured_prompt
from lumenset.utils.request_queue import RequestQueue

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Pull a readable message out of an error response, falling back to the status code."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        for key in ("message", "detail"):
            if payload.get(key):
                return str(payload[key])

    return f"HTTP {response.status_code}"


class BriaBackend(BaseBackend):
    """Backend for Bria's asynchronous structured-prompt API.

    Every submission goes through one RequestQueue so that at most one
    request is in flight and the service's rate limit is respected; every
    submission returns a status URL that a JobPoller follows to completion.

    Attributes:
        api_key: Bria API token
        base_url: API root, e.g. https://engine.prod.bria-api.com/v2
        client: httpx.AsyncClient shared by submissions and status checks
        queue: Submission queue
        poller: Status poller
    """

    DEFAULT_BASE_URL = "https://engine.prod.bria-api.com/v2"
    AUTH_HEADER = "api_token"

    STRUCTURED_PROMPT_ENDPOINT = "/structured_prompt/generate"
    IMAGE_ENDPOINT = "/image/generate"

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        request_delay: float = 6.0,
        poll_interval: float = 2.0,
        max_poll_attempts: int = 60,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        """Initialize the Bria backend.

        Args:
            api_key: Bria API token
            base_url: Optional API root (defaults to the production v2 API)
            request_delay: Cooldown in seconds after each submission
            poll_interval: Seconds between status checks
            max_poll_attempts: Status checks before a job times out
            timeout: Per-request HTTP timeout in seconds
            transport: Optional httpx transport (used by tests)
            sleep: Coroutine used for cooldowns and poll intervals

        Raises:
            ValueError: If API key is empty
        """
        super().__init__(api_key)

        if not api_key:
            raise ValueError("Bria API key is required")

        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.client = httpx.AsyncClient(
            headers={self.AUTH_HEADER: api_key},
            timeout=timeout,
            transport=transport
        )
        self.queue = RequestQueue(self._post_json, request_delay=request_delay, sleep=sleep)
        self.poller = JobPoller(
            self._get_status,
            poll_interval=poll_interval,
            max_attempts=max_poll_attempts,
            sleep=sleep
        )
        logger.info(f"Initialized Bria backend at {self.base_url}")

    async def _post_json(self, endpoint: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """POST a JSON body to an endpoint, translating failures into TransportError."""
        url = f"{self.base_url}{endpoint}"
        try:
            response = await self.client.post(url, json=body)
        except httpx.HTTPError as e:
            logger.error(f"Request to {endpoint} failed: {e}")
            raise TransportError(f"Request to {endpoint} failed: {e}") from e

        self._raise_for_status(response)
        return self._decode(response)

    async def _get_status(self, status_url: str) -> Dict[str, Any]:
        """GET a job status document."""
        try:
            response = await self.client.get(status_url)
        except httpx.HTTPError as e:
            raise TransportError(f"Status check failed: {e}") from e

        if not response.is_success:
            raise TransportError(
                f"Status check failed: {response.status_code}",
                status_code=response.status_code
            )
        return self._decode(response)

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return

        message = _error_message(response)
        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"Invalid Bria API token ({message}). Please check your BRIA_API_TOKEN.",
                status_code=response.status_code
            )
        raise TransportError(message, status_code=response.status_code)

    @staticmethod
    def _decode(response: httpx.Response) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON from {response.request.url}",
                status_code=response.status_code
            ) from e
        if not isinstance(payload, dict):
            raise ContractViolationError(f"Expected a JSON object from {response.request.url}")
        return payload

    async def _submit(
        self,
        endpoint: str,
        body: Dict[str, Any],
        on_progress: Optional[ProgressCallback]
    ) -> Dict[str, Any]:
        """Queue a job submission and poll it to completion."""
        response = await self.queue.enqueue(endpoint, body)

        status_url = response.get("status_url")
        if not status_url:
            raise ContractViolationError("No status URL in response")

        logger.info(f"Submitted job to {endpoint}, polling {status_url}")
        return await self.poller.poll(status_url, on_progress)

    async def generate_structured_prompt(
        self,
        prompt: str,
        images: Optional[List[Union[bytes, str]]] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> StructuredPromptResult:
        """Derive a structured prompt with the Bria API.

        Args:
            prompt: Free-text description of the object
            images: Optional reference images; bytes are base64-encoded
            on_progress: Called as on_progress(attempt, max_attempts) while polling

        Returns:
            StructuredPromptResult with the parsed document and seed

        Raises:
            TransportError: If the submission or a status check fails
            RemoteJobError: If the job fails remotely
            GenerationTimeoutError: If the job does not finish in time
            ContractViolationError: If the service omits the status URL or prompt
        """
        logger.info(f"Generating structured prompt for: {prompt[:50]}...")
        body: Dict[str, Any] = {"prompt": prompt, "sync": False}
        if images:
            body["images"] = [
                base64.b64encode(image).decode("utf-8") if isinstance(image, bytes) else image
                for image in images
            ]

        result = await self._submit(self.STRUCTURED_PROMPT_ENDPOINT, body, on_progress)

        if not result.get("structured_prompt"):
            raise ContractViolationError("No structured prompt in completed job")

        try:
            structured_prompt = parse_structured_prompt(result["structured_prompt"])
        except json.JSONDecodeError as e:
            raise ContractViolationError(f"Structured prompt is not valid JSON: {e}") from e

        return StructuredPromptResult(structured_prompt=structured_prompt, seed=result.get("seed"))

    async def generate_image(
        self,
        structured_prompt: Union[str, Mapping[str, Any]],
        seed: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> ImageResult:
        """Generate an image from a structured prompt with the Bria API.

        Args:
            structured_prompt: Document or its JSON text
            seed: Seed to reuse; omitted from the request when None
            on_progress: Called as on_progress(attempt, max_attempts) while polling

        Returns:
            ImageResult with the image URL, seed and echoed prompt

        Raises:
            TransportError: If the submission or a status check fails
            RemoteJobError: If the job fails remotely
            GenerationTimeoutError: If the job does not finish in time
            ContractViolationError: If the service omits the status URL or image URL
        """
        if isinstance(structured_prompt, str):
            prompt_text = structured_prompt
        else:
            prompt_text = serialize_structured_prompt(structured_prompt)

        body: Dict[str, Any] = {"structured_prompt": prompt_text, "sync": False}
        if seed is not None:
            body["seed"] = seed

        result = await self._submit(self.IMAGE_ENDPOINT, body, on_progress)

        if not result.get("image_url"):
            raise ContractViolationError("No image URL in completed job")

        echoed = result.get("structured_prompt") or prompt_text
        try:
            echoed_prompt = parse_structured_prompt(echoed)
        except json.JSONDecodeError as e:
            raise ContractViolationError(f"Structured prompt is not valid JSON: {e}") from e

        logger.info(f"Generated image {result['image_url']} (seed {result.get('seed')})")
        return ImageResult(
            image_url=result["image_url"],
            seed=result.get("seed"),
            structured_prompt=echoed_prompt
        )

    def get_queue_length(self) -> int:
        return len(self.queue)

    def clear_queue(self) -> int:
        return self.queue.clear()

    async def aclose(self) -> None:
        """Stop the queue and close the HTTP client."""
        await self.queue.aclose()
        await self.client.aclose()

    async def __aenter__(self) -> "BriaBackend":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    @property
    def name(self) -> str:
        """Get the backend name.

        Returns:
            The string "Bria"
        """
        return "Bria"
