"""Shared test fixtures and configuration."""

import pytest
import os
from typing import Any, Dict, List, Optional

from lumenset.core.base_backend import BaseBackend
from lumenset.core.models import ImageResult, StructuredPromptResult


class FakeBackend(BaseBackend):
    """In-memory backend that records every image request."""

    def __init__(self, seed: int = 4242, fail_on: Optional[List[int]] = None):
        super().__init__(api_key="test_key")
        self.seed = seed
        self.fail_on = set(fail_on or [])
        self.calls: List[Dict[str, Any]] = []

    async def generate_structured_prompt(self, prompt, images=None, on_progress=None):
        return StructuredPromptResult(
            structured_prompt={"short_description": prompt},
            seed=1
        )

    async def generate_image(self, structured_prompt, seed=None, on_progress=None):
        call_number = len(self.calls)
        self.calls.append({"structured_prompt": structured_prompt, "seed": seed})

        if on_progress:
            on_progress(1, 4)
            on_progress(2, 4)

        if call_number in self.fail_on:
            raise RuntimeError(f"Call {call_number} failed")

        return ImageResult(
            image_url=f"https://example.com/{call_number}.png",
            # the service only picks a seed when none was given
            seed=self.seed if seed is None else seed,
            structured_prompt=structured_prompt
        )

    @property
    def name(self) -> str:
        return "Fake"


@pytest.fixture
def sample_structured_prompt():
    """Return a structured prompt shaped like the service's output."""
    return {
        "short_description": "A handmade ceramic mug with a speckled glaze on a table.",
        "objects": [
            {"description": "ceramic mug", "location": "center"}
        ],
        "background_setting": "plain table top",
        "lighting": {
            "conditions": "studio",
            "direction": "soft window light",
            "shadows": "gentle shadows"
        },
        "aesthetics": {
            "composition": "centered",
            "color_scheme": "earthy",
            "mood_atmosphere": "cozy"
        },
        "photographic_characteristics": {
            "depth_of_field": "shallow",
            "focus": "sharp on the mug",
            "camera_angle": "eye-level",
            "lens_focal_length": "50mm"
        },
        "style_medium": "photograph"
    }


@pytest.fixture
def fake_backend():
    """Return a FakeBackend with a fixed seed."""
    return FakeBackend()


@pytest.fixture
def test_api_key():
    """Return a test API key."""
    return "bria_test_token_12345"


# Skip integration tests unless explicitly requested
def pytest_collection_modifyitems(config, items):
    """Automatically skip integration tests unless RUN_INTEGRATION_TESTS is set."""
    skip_integration = pytest.mark.skip(reason="Integration tests disabled (set RUN_INTEGRATION_TESTS=true to enable)")

    for item in items:
        if "integration" in item.keywords:
            if not os.getenv("RUN_INTEGRATION_TESTS", "").lower() == "true":
                item.add_marker(skip_integration)


@pytest.fixture
def make_fake_backend():
    """Return the FakeBackend class for tests that need custom failures."""
    return FakeBackend
