"""Unit tests for base backend abstract class."""

import json

import pytest

from lumenset.core.base_backend import BaseBackend
from lumenset.core.models import ImageResult, StructuredPromptResult


class ConcreteBackend(BaseBackend):
    """Concrete implementation of BaseBackend for testing."""

    async def generate_structured_prompt(self, prompt, images=None, on_progress=None):
        """Mock implementation."""
        return StructuredPromptResult(structured_prompt={"short_description": prompt})

    async def generate_image(self, structured_prompt, seed=None, on_progress=None):
        """Mock implementation."""
        return ImageResult(image_url="https://example.com/image.png", seed=seed)

    @property
    def name(self) -> str:
        """Mock implementation."""
        return "ConcreteBackend"


class TestBaseBackend:
    """Tests for BaseBackend abstract class."""

    def test_cannot_instantiate_abstract_class(self):
        """Test that BaseBackend cannot be instantiated directly."""
        with pytest.raises(TypeError):
            BaseBackend()

    def test_concrete_backend_initialization(self):
        """Test that concrete backend can be initialized."""
        backend = ConcreteBackend(api_key="test_key")

        assert backend.api_key == "test_key"
        assert backend.name == "ConcreteBackend"

    def test_concrete_backend_without_api_key(self):
        backend = ConcreteBackend()

        assert backend.api_key is None

    def test_default_queue_helpers(self):
        """Test that backends without a queue report an empty one."""
        backend = ConcreteBackend()

        assert backend.get_queue_length() == 0
        assert backend.clear_queue() == 0

    def test_modify_structured_prompt(self):
        """Test that modifications come back as JSON text."""
        backend = ConcreteBackend()

        text = backend.modify_structured_prompt(
            '{"short_description": "A mug."}',
            {"rotation_degrees": 90, "mood": ["calm"]}
        )
        document = json.loads(text)

        assert document["composition"]["viewpoint"] == "right profile side view"
        assert document["aesthetics"]["color_scheme"] == "soft, muted color palette"

    @pytest.mark.asyncio
    async def test_generate_image(self):
        backend = ConcreteBackend()

        result = await backend.generate_image({"short_description": "A mug."}, seed=7)

        assert result.seed == 7

    def test_repr(self):
        """Test string representation."""
        assert repr(ConcreteBackend()) == "ConcreteBackend(name='ConcreteBackend')"
