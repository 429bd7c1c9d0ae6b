"""Abstract base class for structured-prompt generation backends."""

from abc import ABC, abstractmethod
from typing import Any, Callable, List, Mapping, Optional, Union

from lumenset.utils.prompt_mutator import mutate_structured_prompt, serialize_structured_prompt

from .models import ImageResult, ModificationRecord, StructuredPromptResult

ProgressCallback = Callable[[int, int], Any]


class BaseBackend(ABC):
    """Abstract interface that generation backends must implement.

    The dataset generator only talks to this contract, so it can run against
    the hosted service or a test double without changes.

    Attributes:
        api_key: API key for the hosted service
    """

    def __init__(self, api_key: Optional[str] = None):
        """Initialize the backend.

        Args:
            api_key: Optional API key for authentication with the service
        """
        self.api_key = api_key

    @abstractmethod
    async def generate_structured_prompt(
        self,
        prompt: str,
        images: Optional[List[Union[bytes, str]]] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> StructuredPromptResult:
        """Derive a structured prompt from a description and optional reference images.

        Args:
            prompt: Free-text description of the object
            images: Optional reference images (raw bytes or base64 text)
            on_progress: Called as on_progress(attempt, max_attempts) while polling

        Returns:
            StructuredPromptResult with the document and the service's seed

        Raises:
            GenerationError: If submission or the job fails
        """
        pass

    @abstractmethod
    async def generate_image(
        self,
        structured_prompt: Union[str, Mapping[str, Any]],
        seed: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> ImageResult:
        """Generate one image from a structured prompt.

        Args:
            structured_prompt: Document or its JSON text
            seed: Seed to reuse; None lets the service pick one
            on_progress: Called as on_progress(attempt, max_attempts) while polling

        Returns:
            ImageResult with the image URL, seed and echoed prompt

        Raises:
            GenerationError: If submission or the job fails
        """
        pass

    def modify_structured_prompt(
        self,
        structured_prompt: Union[str, Mapping[str, Any]],
        modifications: Union[ModificationRecord, Mapping[str, Any], None]
    ) -> str:
        """Apply modifications to a structured prompt and return it as JSON text."""
        return serialize_structured_prompt(
            mutate_structured_prompt(structured_prompt, modifications)
        )

    def get_queue_length(self) -> int:
        """Number of submissions waiting to be sent."""
        return 0

    def clear_queue(self) -> int:
        """Drop submissions that have not been sent yet.

        Returns:
            Number of dropped submissions
        """
        return 0

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the human-readable name of this backend."""
        pass

    def __repr__(self) -> str:
        """String representation of the backend."""
        return f"{self.__class__.__name__}(name='{self.name}')"
