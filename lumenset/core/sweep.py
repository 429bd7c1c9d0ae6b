"""Variation sweep construction."""

import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from .models import ModificationRecord, Variation

logger = logging.getLogger(__name__)

ROTATION_SWEEP = [-90, -45, 0, 45, 90]
TILT_SWEEP = [-45, 0, 45]
ZOOM_SWEEP = [0, 5, 10]

DEFAULT_LIGHTING = "front-lit"


class SweepConfig(BaseModel):
    """Which axes to sweep and the values used for the axes that are not swept.

    Attributes:
        rotation_sweep: Sweep yaw over ROTATION_SWEEP instead of rotation_degrees
        tilt_sweep: Sweep pitch over TILT_SWEEP instead of tilt_degrees
        zoom_sweep: Sweep zoom over ZOOM_SWEEP instead of zoom_level
        lighting_directions: Lighting presets to cross with the camera axes
        background: Background preset shared by every variation
        focal_length: Lens preset shared by every variation
        advanced: Extra modifications merged into every variation
    """

    rotation_sweep: bool = False
    tilt_sweep: bool = False
    zoom_sweep: bool = False

    rotation_degrees: int = 0
    tilt_degrees: int = 0
    zoom_level: int = 5

    lighting_directions: List[str] = Field(default_factory=list)
    background: str = "white-studio"
    focal_length: str = "standard"
    advanced: ModificationRecord = Field(default_factory=ModificationRecord)


def format_rtz(rotation: int, tilt: int, zoom: int) -> str:
    """Short label for a rotation/tilt/zoom triple, e.g. "Left 45°, Up 45°, Close"."""
    if rotation == 0:
        rotation_label = "Front"
    elif rotation < 0:
        rotation_label = f"Left {abs(rotation)}°"
    else:
        rotation_label = f"Right {rotation}°"

    if tilt == 0:
        tilt_label = "Level"
    elif tilt < 0:
        tilt_label = f"Up {abs(tilt)}°"
    else:
        tilt_label = f"Down {tilt}°"

    zoom_label = {0: "Close", 5: "Mid"}.get(zoom, "Far")

    return f"{rotation_label}, {tilt_label}, {zoom_label}"


def build_variations(config: SweepConfig, max_variations: Optional[int] = None) -> List[Variation]:
    """Expand a sweep configuration into the ordered list of variations.

    Axes nest as rotation, tilt, zoom, lighting (lighting varies fastest).
    With no lighting selected a single front-lit entry is used.

    Args:
        config: Sweep configuration
        max_variations: Optional upper bound on the number of variations

    Returns:
        Variations named "Variation {n}: {rotation}, {tilt}, {zoom} | {lighting}"

    Raises:
        ValueError: If the sweep exceeds max_variations
    """
    rotations = ROTATION_SWEEP if config.rotation_sweep else [config.rotation_degrees]
    tilts = TILT_SWEEP if config.tilt_sweep else [config.tilt_degrees]
    zooms = ZOOM_SWEEP if config.zoom_sweep else [config.zoom_level]
    lighting_directions = config.lighting_directions or [DEFAULT_LIGHTING]

    total = len(rotations) * len(tilts) * len(zooms) * len(lighting_directions)
    if max_variations is not None and total > max_variations:
        raise ValueError(
            f"Sweep produces {total} variations, more than the limit of {max_variations}"
        )

    variations = []
    counter = 1
    for rotation in rotations:
        for tilt in tilts:
            for zoom in zooms:
                for lighting_direction in lighting_directions:
                    modifications = config.advanced.model_copy(
                        update={
                            "rotation_degrees": rotation,
                            "tilt_degrees": tilt,
                            "zoom_level": zoom,
                            "lighting_direction": lighting_direction,
                            "background": config.background,
                            "focal_length": config.focal_length,
                        },
                        deep=True
                    )
                    variations.append(Variation(
                        name=f"Variation {counter}: {format_rtz(rotation, tilt, zoom)} | {lighting_direction}",
                        modifications=modifications
                    ))
                    counter += 1

    logger.info(f"Built {len(variations)} variations")
    return variations
