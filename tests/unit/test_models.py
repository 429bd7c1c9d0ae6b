"""Unit tests for data models."""

import json

import pytest
from pydantic import ValidationError

from lumenset.core.errors import (
    AuthenticationError,
    GenerationError,
    GenerationTimeoutError,
    TransportError,
)
from lumenset.core.models import (
    GenerationResult,
    ModificationRecord,
    ProgressEvent,
    ProgressStatus,
    RunStage,
    StructuredPrompt,
    Variation,
)


class TestModificationRecord:
    """Tests for ModificationRecord."""

    def test_empty_record(self):
        record = ModificationRecord()

        assert record.rotation_degrees is None
        assert record.mood == []
        assert record.add_imperfections is False
        assert record.has_camera() is False

    @pytest.mark.parametrize("field", ["rotation_degrees", "tilt_degrees", "zoom_level"])
    def test_has_camera(self, field):
        """Test that any single axis (even 0) counts as a camera change."""
        assert ModificationRecord(**{field: 0}).has_camera() is True

    def test_unknown_fields_ignored(self):
        record = ModificationRecord.model_validate({"rotation_degrees": 45, "sparkle": True})

        assert record.rotation_degrees == 45
        assert not hasattr(record, "sparkle")

    def test_blank_values_are_absent(self):
        """Test that blank form values fall back to the field defaults."""
        record = ModificationRecord.model_validate({
            "zoom_level": "", "rotation_degrees": "", "surface_tone": "",
            "add_imperfections": "", "imperfection_types": "", "mood": ""
        })

        assert record.model_dump() == ModificationRecord().model_dump()
        assert record.has_camera() is False


class TestStructuredPrompt:
    """Tests for the typed structured prompt view."""

    def test_round_trip_keeps_unknown_fields(self, sample_structured_prompt):
        """Test that a load/dump cycle returns the same document."""
        prompt = StructuredPrompt.from_document(sample_structured_prompt)

        assert prompt.to_document() == sample_structured_prompt

    def test_round_trip_keeps_key_order(self, sample_structured_prompt):
        document = dict(reversed(list(sample_structured_prompt.items())))

        dumped = StructuredPrompt.from_document(document).to_document()

        assert list(dumped) == list(document)
        assert list(dumped["lighting"]) == ["conditions", "direction", "shadows"]

    def test_round_trip_keeps_types(self):
        """Test that values keep their original types and shapes."""
        document = {
            "lighting": "soft window light",
            "composition": {"camera_position": {"horizontal_angle": "45", "vertical_angle": True}},
            "aesthetics": {"composition": {"rule": "thirds"}},
        }

        assert StructuredPrompt.from_document(document).to_document() == document

    def test_from_json_text(self, sample_structured_prompt):
        prompt = StructuredPrompt.from_document(json.dumps(sample_structured_prompt))

        assert prompt.lighting.direction == "soft window light"
        assert prompt.aesthetics.color_scheme == "earthy"

    def test_absent_fields_are_not_dumped(self):
        prompt = StructuredPrompt.from_document({"short_description": "A mug"})

        assert prompt.to_document() == {"short_description": "A mug"}

    def test_written_fields_are_dumped(self):
        prompt = StructuredPrompt.from_document({"lighting": {"conditions": "studio"}})
        prompt.lighting.shadows = "none"

        assert prompt.to_document() == {"lighting": {"conditions": "studio", "shadows": "none"}}


class TestVariation:
    """Tests for Variation."""

    def test_valid(self):
        variation = Variation(name="Variation 1: Front, Level, Mid | front-lit")

        assert variation.modifications == ModificationRecord()

    def test_empty_name(self):
        with pytest.raises(ValidationError):
            Variation(name="")


class TestGenerationResult:
    """Tests for GenerationResult."""

    @pytest.fixture
    def result(self):
        return GenerationResult(
            variation_name="Variation 1: Left 45°, Level, Mid | front-lit",
            image_url="https://example.com/image.png",
            seed=123456789,
            structured_prompt={"short_description": "A mug"},
            modifications=ModificationRecord(rotation_degrees=-45)
        )

    def test_timestamp_default(self, result):
        assert result.timestamp is not None

    def test_frozen(self, result):
        with pytest.raises(ValidationError):
            result.seed = 1

    def test_seed_required(self):
        with pytest.raises(ValidationError):
            GenerationResult(
                variation_name="x",
                image_url="https://example.com/image.png",
                seed=None,
                structured_prompt={},
                modifications=ModificationRecord()
            )

    def test_reproduction_params(self, result):
        """Test that the record carries everything needed to regenerate the image."""
        params = result.reproduction_params()

        assert params == {
            "structured_prompt": '{"short_description": "A mug"}',
            "seed": 123456789,
            "sync": False,
        }

    def test_json_dump(self, result):
        data = result.model_dump(mode="json", exclude_none=True)

        assert data["modifications"]["rotation_degrees"] == -45
        assert "tilt_degrees" not in data["modifications"]
        assert isinstance(data["timestamp"], str)


class TestProgressEvent:
    """Tests for ProgressEvent."""

    def test_defaults(self):
        event = ProgressEvent(index=2, total=5, name="Variation 3", status=ProgressStatus.GENERATING)

        assert event.stage == RunStage.VARIATION
        assert event.progress is None
        assert event.result is None
        assert event.error is None

    def test_status_values(self):
        assert ProgressStatus.GENERATING.value == "generating"
        assert ProgressStatus.COMPLETED.value == "completed"
        assert ProgressStatus.ERROR.value == "error"


class TestErrors:
    """Tests for the exception hierarchy."""

    def test_hierarchy(self):
        assert issubclass(AuthenticationError, TransportError)
        assert issubclass(TransportError, GenerationError)
        assert issubclass(GenerationTimeoutError, TimeoutError)

    def test_status_code(self):
        error = TransportError("Bad request", status_code=400)

        assert str(error) == "Bad request"
        assert error.status_code == 400
