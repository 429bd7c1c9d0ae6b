"""Core data models for structured-prompt dataset generation."""

import json
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, Callable, List, Mapping, Union
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationInfo, field_validator, model_validator


class ModificationRecord(BaseModel):
    """Semantic modifications applied to a base structured prompt.

    Every field is optional. A field that is None (or an empty string, as
    submitted by blank form inputs) leaves the matching structured-prompt
    field untouched.

    Attributes:
        rotation_degrees: Camera yaw around the subject (negative = left)
        tilt_degrees: Camera pitch (negative = elevated looking down)
        zoom_level: Distance preset, one of 0 (close), 5 (mid), 10 (far)
        lighting_direction: front-lit, side-lit, back-lit or top-lit
        lighting_contrast: high or low
        shadow_behavior: hard edge or minimal
        color_temperature: neutral-warm, neutral-cool, warm, cool or free text
        background: white-studio, black-studio, wooden-surface, fabric-texture
        background_color_hex: Exact backdrop color, overrides background
        surface_finish: matte, glossy, satin, unglazed or free text
        surface_tone: Free-text tone appended to the surface description
        surface_color_hex: Exact surface color
        add_imperfections: Whether to describe surface imperfections
        imperfection_types: Imperfections to describe
        negative_space: minimal, medium or generous
        mood: Mood keywords
        focal_length: Lens preset recorded with the variation
        aperture: Aperture preset recorded with the variation
    """

    model_config = ConfigDict(extra="ignore")

    rotation_degrees: Optional[int] = Field(default=None, description="Camera yaw in degrees")
    tilt_degrees: Optional[int] = Field(default=None, description="Camera pitch in degrees")
    zoom_level: Optional[int] = Field(default=None, description="Zoom preset (0, 5 or 10)")

    lighting_direction: Optional[str] = None
    lighting_contrast: Optional[str] = None
    shadow_behavior: Optional[str] = None
    color_temperature: Optional[str] = None

    background: Optional[str] = None
    background_color_hex: Optional[str] = None

    surface_finish: Optional[str] = None
    surface_tone: Optional[str] = None
    surface_color_hex: Optional[str] = None

    add_imperfections: bool = False
    imperfection_types: List[str] = Field(default_factory=list)

    negative_space: Optional[str] = None
    mood: List[str] = Field(default_factory=list)

    focal_length: Optional[str] = None
    aperture: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_is_absent(cls, value: Any, info: ValidationInfo) -> Any:
        # form inputs submit "" for untouched fields
        if value == "":
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value

    def has_camera(self) -> bool:
        """Whether any camera axis is set."""
        return any(
            value is not None
            for value in (self.rotation_degrees, self.tilt_degrees, self.zoom_level)
        )


class _Section(BaseModel):
    """Structured-prompt section that keeps fields it does not declare.

    Declared fields are typed `Any` so that values the service sends are
    never coerced, and the input key order is remembered for dumping.
    """

    model_config = ConfigDict(extra="allow")

    _key_order: List[str] = PrivateAttr(default_factory=list)

    @model_validator(mode="wrap")
    @classmethod
    def _remember_key_order(cls, data: Any, handler: Callable[[Any], "_Section"]) -> "_Section":
        section = handler(data)
        if isinstance(data, Mapping):
            section._key_order = list(data)
        return section

    def to_document(self) -> Dict[str, Any]:
        """Dump to a plain mapping with only the fields that were present or written.

        Keys keep their input order; fields written afterwards come last.
        """
        values: Dict[str, Any] = {}
        for name in type(self).model_fields:
            if name not in self.model_fields_set:
                continue
            value = getattr(self, name)
            values[name] = value.to_document() if isinstance(value, _Section) else value
        values.update(self.model_extra or {})

        document = {key: values.pop(key) for key in self._key_order if key in values}
        document.update(values)
        return document


def _section_field() -> Any:
    # a mapping becomes the section model, anything else is kept as is
    return Field(default=None, union_mode="left_to_right")


class CameraPosition(_Section):
    horizontal_angle: Any = None
    vertical_angle: Any = None
    distance: Any = None


class PhotographicCharacteristics(_Section):
    camera_angle: Any = None
    focal_length_mm: Any = None
    lens_type: Any = None
    aperture_f: Any = None
    depth_of_field: Any = None
    distance_descriptor: Any = None


class Composition(_Section):
    camera_position: Union[CameraPosition, Any] = _section_field()
    viewpoint: Any = None


class Lighting(_Section):
    direction: Any = None
    shadows: Any = None
    color_temperature: Any = None


class MaterialsAndTexture(_Section):
    surface_finish: Any = None
    texture_notes: Any = None


class Aesthetics(_Section):
    negative_space: Any = None
    composition: Any = None
    mood_atmosphere: Any = None
    color_scheme: Any = None


class StructuredPrompt(_Section):
    """Typed view over the service's structured prompt document.

    Only the fields this package writes are declared; everything else is kept
    as extra data so that a document survives a load/dump cycle unchanged.
    A section that is not an object (e.g. a plain string) is kept verbatim
    and receives no writes.
    """

    short_description: Any = None
    background_setting: Any = None
    photographic_characteristics: Union[PhotographicCharacteristics, Any] = _section_field()
    composition: Union[Composition, Any] = _section_field()
    lighting: Union[Lighting, Any] = _section_field()
    materials_and_texture: Union[MaterialsAndTexture, Any] = _section_field()
    aesthetics: Union[Aesthetics, Any] = _section_field()

    @classmethod
    def from_document(cls, document: Union[str, Dict[str, Any]]) -> "StructuredPrompt":
        """Build from a mapping or its JSON text."""
        if isinstance(document, str):
            document = json.loads(document)
        return cls.model_validate(document)


class Variation(BaseModel):
    """One point of a parameter sweep."""

    name: str = Field(..., min_length=1, description="Human-readable label")
    modifications: ModificationRecord = Field(default_factory=ModificationRecord)


class StructuredPromptResult(BaseModel):
    """Structured prompt derived by the service from text or reference images."""

    structured_prompt: Dict[str, Any]
    seed: Optional[int] = None


class ImageResult(BaseModel):
    """A finished image generation job."""

    image_url: str
    seed: Optional[int] = None
    structured_prompt: Dict[str, Any] = Field(default_factory=dict)


class GenerationResult(BaseModel):
    """Record of one generated dataset image.

    Attributes:
        variation_name: Label of the variation that produced the image
        image_url: Where the service stored the image
        seed: Seed the image was generated with
        structured_prompt: Mutated prompt as echoed by the service
        modifications: Modification record of the variation
        timestamp: When the image finished
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "variation_name": "Variation 1: Left 90°, Up 45°, Close | front-lit",
                "image_url": "https://example.com/image.png",
                "seed": 123456789,
                "structured_prompt": {"short_description": "A ceramic mug"},
                "modifications": {"rotation_degrees": -90, "tilt_degrees": -45, "zoom_level": 0},
                "timestamp": "2025-11-30T12:00:00"
            }
        }
    )

    variation_name: str
    image_url: str
    seed: int
    structured_prompt: Dict[str, Any]
    modifications: ModificationRecord
    timestamp: datetime = Field(default_factory=datetime.now)

    def reproduction_params(self) -> Dict[str, Any]:
        """Request body that regenerates this exact image."""
        return {
            "structured_prompt": json.dumps(self.structured_prompt),
            "seed": self.seed,
            "sync": False,
        }


class RunStage(str, Enum):
    BASE = "base"
    VARIATION = "variation"


class ProgressStatus(str, Enum):
    GENERATING = "generating"
    COMPLETED = "completed"
    ERROR = "error"


class ProgressEvent(BaseModel):
    """Progress of one dataset run.

    `progress` is the poll fraction (attempt / max attempts) while a job is
    generating; `result` is set on completion and `error` on failure.
    """

    stage: RunStage = RunStage.VARIATION
    index: int
    total: int
    name: str
    status: ProgressStatus
    progress: Optional[float] = None
    result: Optional[GenerationResult] = None
    error: Optional[str] = None
