"""Deterministic rewrites of structured prompts from semantic modifications."""

import copy
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Type, Union

from pydantic import BaseModel

from lumenset.core.models import (
    Aesthetics,
    CameraPosition,
    Composition,
    Lighting,
    MaterialsAndTexture,
    ModificationRecord,
    PhotographicCharacteristics,
    StructuredPrompt,
)
from lumenset.utils.color_descriptor import describe_color

logger = logging.getLogger(__name__)

# Matches a camera sentence previously appended to short_description, with the
# whitespace around it
CAMERA_SENTENCE_PATTERN = re.compile(r"\s*Camera positioned.*?\.\s*")


@dataclass(frozen=True)
class ZoomPreset:
    """Distance wording and focal length for one zoom level."""
    distance: str
    focal_length_mm: int
    lens_type: str


class MutationTables:
    """Fixed vocabularies used by the mutator.

    Lookups fall back as documented on each table: zoom levels fall back to
    the mid preset, every other enum passes an unknown value through verbatim
    unless noted otherwise.
    """

    DEFAULT_ZOOM = 5

    ZOOM_PRESETS = {
        0: ZoomPreset("close-up macro view", 35, "wide-angle lens"),
        5: ZoomPreset("mid-distance standard view", 50, "standard prime lens"),
        10: ZoomPreset("telephoto far view", 85, "telephoto lens"),
    }

    NAMED_AZIMUTHS = {
        0: "Camera positioned directly in front of the subject at 0 degrees azimuth, "
           "capturing the front-facing view",
        -90: "Camera positioned at the LEFT side of the subject at -90 degrees azimuth, "
             "capturing the full left profile side view from the subject's left",
        -45: "Camera positioned at the LEFT FRONT quarter angle at -45 degrees azimuth, "
             "capturing a three-quarter view from the left side",
        45: "Camera positioned at the RIGHT FRONT quarter angle at 45 degrees azimuth, "
            "capturing a three-quarter view from the right side",
        90: "Camera positioned at the RIGHT side of the subject at 90 degrees azimuth, "
            "capturing the full right profile side view from the subject's right",
    }

    # side-lit is resolved against the camera yaw, see PromptMutator._lighting_direction
    LIGHTING_DIRECTIONS = {
        "front-lit": "even frontal lighting reducing shadows",
        "back-lit": "backlighting from behind the subject",
        "top-lit": "top-down lighting from above",
    }

    DEFAULT_SHADOWS = "soft, subtle shadows"

    CONTRAST_SHADOWS = {
        "high": "strong, defined shadows with high contrast",
        "low": "very soft, barely visible shadows",
    }

    SHADOW_BEHAVIORS = {
        "hard edge": "sharp, crisp shadows with hard edges",
        "minimal": "minimal, nearly absent shadows",
    }

    COLOR_TEMPERATURES = {
        "neutral-warm": "neutral-warm color temperature (4500K)",
        "neutral-cool": "neutral-cool color temperature (5500K)",
        "warm": "warm, golden color temperature (3000K)",
        "cool": "cool, blue color temperature (7000K)",
    }

    BACKGROUNDS = {
        "white-studio": "clean, seamless white studio backdrop",
        "black-studio": "dramatic, deep black studio backdrop",
        "wooden-surface": "natural wooden surface with visible grain",
        "fabric-texture": "soft, textured fabric background",
    }

    SURFACE_FINISHES = {
        "matte": "matte, non-reflective",
        "glossy": "glossy, highly reflective",
        "satin": "satin, subtle sheen",
        "unglazed": "unglazed, raw texture",
    }

    # Unknown values map to an empty composition note
    NEGATIVE_SPACE = {
        "minimal": "minimal negative space, subject fills frame",
        "medium": "balanced negative space around subject",
        "generous": "generous negative space with breathing room",
    }

    # Checked in order, first match wins
    MOOD_COLOR_SCHEMES = [
        ("luxurious", "rich, sophisticated color palette"),
        ("calm", "soft, muted color palette"),
        ("dramatic", "high-contrast, bold color palette"),
    ]


def parse_structured_prompt(value: Union[str, Mapping[str, Any]]) -> Dict[str, Any]:
    """Return a structured prompt as a fresh mapping, decoding JSON text if needed."""
    if isinstance(value, str):
        return json.loads(value)
    return copy.deepcopy(dict(value))


def serialize_structured_prompt(document: Mapping[str, Any]) -> str:
    """Encode a structured prompt the way the service expects it in request bodies."""
    return json.dumps(document)


def _ensure_section(
    prompt: StructuredPrompt,
    name: str,
    section_type: Type[BaseModel]
) -> Optional[BaseModel]:
    """Return a writable section, creating it when absent.

    A section the service sent as something other than an object is left as
    it is and None is returned, so no fields are written into it.
    """
    section = getattr(prompt, name)
    if section is None:
        section = section_type()
        setattr(prompt, name, section)
    if not isinstance(section, section_type):
        logger.warning(f"Section {name} is not an object, leaving it unchanged")
        return None
    return section


class PromptMutator:
    """Applies a ModificationRecord to a structured prompt.

    The same camera fact is written to photographic_characteristics,
    composition and the end of short_description, since the generation model
    weighs trailing description text most heavily.
    """

    def __init__(self, tables: type = MutationTables):
        self.tables = tables

    def mutate(
        self,
        base: Union[str, Mapping[str, Any]],
        modifications: Union[ModificationRecord, Mapping[str, Any], None] = None
    ) -> Dict[str, Any]:
        """Produce a modified copy of a structured prompt.

        The base document is deep-copied first, so repeated calls against the
        same base never accumulate changes.

        Args:
            base: Structured prompt mapping or its JSON text
            modifications: Modifications to apply; absent fields are left alone

        Returns:
            The mutated document as a new mapping
        """
        if modifications is None:
            mods = ModificationRecord()
        elif isinstance(modifications, ModificationRecord):
            mods = modifications
        else:
            mods = ModificationRecord.model_validate(modifications)

        prompt = StructuredPrompt.from_document(parse_structured_prompt(base))

        _ensure_section(prompt, "photographic_characteristics", PhotographicCharacteristics)
        _ensure_section(prompt, "lighting", Lighting)
        _ensure_section(prompt, "materials_and_texture", MaterialsAndTexture)
        _ensure_section(prompt, "aesthetics", Aesthetics)

        if mods.has_camera():
            self._apply_camera(prompt, mods)
        self._apply_lighting(prompt, mods)
        self._apply_background(prompt, mods)
        self._apply_surface(prompt, mods)
        self._apply_imperfections(prompt, mods)
        self._apply_negative_space(prompt, mods)
        self._apply_mood(prompt, mods)

        return prompt.to_document()

    def _zoom_preset(self, zoom: int) -> ZoomPreset:
        return self.tables.ZOOM_PRESETS.get(zoom, self.tables.ZOOM_PRESETS[self.tables.DEFAULT_ZOOM])

    def describe_camera(self, yaw: int, pitch: int, zoom: int) -> str:
        """Build the camera sentence for a yaw/pitch/zoom triple.

        Args:
            yaw: Azimuth in degrees, negative to the subject's left
            pitch: Elevation in degrees, negative looks down on the subject
            zoom: Zoom preset; unknown values use the mid-distance preset

        Returns:
            Sentence without a trailing period
        """
        description = self.tables.NAMED_AZIMUTHS.get(yaw)
        if description is None:
            side = "LEFT" if yaw < 0 else "RIGHT"
            description = f"Camera positioned {side} of the subject at {yaw} degrees azimuth"

        if pitch == 0:
            description += ", at eye-level horizontal perspective"
        elif pitch < 0:
            description += f", elevated {abs(pitch)} degrees above the subject looking downward"
        else:
            description += f", lowered {pitch} degrees below the subject looking upward"

        return f"{description}, positioned at {self._zoom_preset(zoom).distance}"

    @staticmethod
    def describe_viewpoint(yaw: int) -> str:
        if abs(yaw) <= 15:
            return "frontal straight-on view"
        if yaw <= -75:
            return "left profile side view"
        if yaw <= -30:
            return "left three-quarter view"
        if yaw >= 75:
            return "right profile side view"
        if yaw >= 30:
            return "right three-quarter view"
        return ""

    def _apply_camera(self, prompt: StructuredPrompt, mods: ModificationRecord) -> None:
        yaw = mods.rotation_degrees if mods.rotation_degrees is not None else 0
        pitch = mods.tilt_degrees if mods.tilt_degrees is not None else 0
        zoom = mods.zoom_level if mods.zoom_level is not None else self.tables.DEFAULT_ZOOM
        preset = self._zoom_preset(zoom)
        camera_sentence = self.describe_camera(yaw, pitch, zoom)

        photo = prompt.photographic_characteristics
        if isinstance(photo, PhotographicCharacteristics):
            photo.camera_angle = camera_sentence
            photo.focal_length_mm = preset.focal_length_mm
            photo.lens_type = preset.lens_type

        composition = _ensure_section(prompt, "composition", Composition)
        if composition is not None:
            composition.camera_position = CameraPosition(
                horizontal_angle=yaw,
                vertical_angle=pitch,
                distance=preset.distance
            )
            composition.viewpoint = self.describe_viewpoint(yaw)

        description = prompt.short_description if isinstance(prompt.short_description, str) else ""
        description = CAMERA_SENTENCE_PATTERN.sub(" ", description).strip().rstrip(".").rstrip()
        if description:
            prompt.short_description = f"{description}. {camera_sentence}."
        else:
            prompt.short_description = f"{camera_sentence}."

        logger.debug(f"Camera set to yaw={yaw}, pitch={pitch}, zoom={zoom}")

    def _lighting_direction(self, direction: str, yaw: int) -> Optional[str]:
        if direction == "side-lit":
            if yaw < 0:
                return "strong directional light from camera-left, casting shadows to the right"
            if yaw > 0:
                return "strong directional light from camera-right, casting shadows to the left"
            return "side lighting creating lateral shadows"
        return self.tables.LIGHTING_DIRECTIONS.get(direction)

    def _apply_lighting(self, prompt: StructuredPrompt, mods: ModificationRecord) -> None:
        lighting = prompt.lighting
        if not isinstance(lighting, Lighting):
            return

        if mods.lighting_direction:
            yaw = mods.rotation_degrees or 0
            direction = self._lighting_direction(mods.lighting_direction, yaw)
            if direction is not None:
                lighting.direction = direction
            else:
                logger.warning(f"Unknown lighting direction: {mods.lighting_direction}")

        if mods.lighting_contrast or mods.shadow_behavior:
            shadows = self.tables.CONTRAST_SHADOWS.get(
                mods.lighting_contrast, self.tables.DEFAULT_SHADOWS
            )
            # shadow behavior overrides contrast
            shadows = self.tables.SHADOW_BEHAVIORS.get(mods.shadow_behavior, shadows)
            lighting.shadows = shadows

        if mods.color_temperature:
            lighting.color_temperature = self.tables.COLOR_TEMPERATURES.get(
                mods.color_temperature, mods.color_temperature
            )

    def _apply_background(self, prompt: StructuredPrompt, mods: ModificationRecord) -> None:
        if mods.background_color_hex:
            color_name = describe_color(mods.background_color_hex)
            prompt.background_setting = (
                f"seamless studio backdrop in {color_name} ({mods.background_color_hex})"
            )
        elif mods.background:
            prompt.background_setting = self.tables.BACKGROUNDS.get(
                mods.background, mods.background
            )

    def _apply_surface(self, prompt: StructuredPrompt, mods: ModificationRecord) -> None:
        parts = []
        if mods.surface_finish:
            parts.append(self.tables.SURFACE_FINISHES.get(mods.surface_finish, mods.surface_finish))
        if mods.surface_tone:
            parts.append(f"with {mods.surface_tone} tones")
        if mods.surface_color_hex:
            parts.append(f"in {describe_color(mods.surface_color_hex)}")

        if parts and isinstance(prompt.materials_and_texture, MaterialsAndTexture):
            prompt.materials_and_texture.surface_finish = " ".join(parts)

    def _apply_imperfections(self, prompt: StructuredPrompt, mods: ModificationRecord) -> None:
        if not isinstance(prompt.materials_and_texture, MaterialsAndTexture):
            return
        if mods.add_imperfections and mods.imperfection_types:
            prompt.materials_and_texture.texture_notes = (
                "realistic imperfections including " + ", ".join(mods.imperfection_types)
            )

    def _apply_negative_space(self, prompt: StructuredPrompt, mods: ModificationRecord) -> None:
        if mods.negative_space and isinstance(prompt.aesthetics, Aesthetics):
            prompt.aesthetics.negative_space = mods.negative_space
            prompt.aesthetics.composition = self.tables.NEGATIVE_SPACE.get(mods.negative_space, "")

    def _apply_mood(self, prompt: StructuredPrompt, mods: ModificationRecord) -> None:
        if not mods.mood or not isinstance(prompt.aesthetics, Aesthetics):
            return

        prompt.aesthetics.mood_atmosphere = ", ".join(mods.mood)
        for keyword, scheme in self.tables.MOOD_COLOR_SCHEMES:
            if keyword in mods.mood:
                prompt.aesthetics.color_scheme = scheme
                break


def mutate_structured_prompt(
    base: Union[str, Mapping[str, Any]],
    modifications: Union[ModificationRecord, Mapping[str, Any], None] = None
) -> Dict[str, Any]:
    """Apply modifications to a structured prompt with the default tables."""
    return PromptMutator().mutate(base, modifications)
