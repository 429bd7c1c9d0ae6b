"""Qualitative color names for hex colors."""

import logging
import math
from typing import Tuple

logger = logging.getLogger(__name__)


# Upper hue bound (exclusive, degrees) for each name; red wraps around 345-15
HUE_NAMES = [
    (45, "orange"),
    (75, "yellow"),
    (165, "green"),
    (255, "blue"),
    (285, "purple"),
    (345, "pink"),
]

# Lightness floor (exclusive, percent) for each grayscale name
GRAYSCALE_NAMES = [
    (90, "pure white"),
    (70, "light gray"),
    (40, "medium gray"),
    (10, "dark gray"),
]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_hex(hex_color: str) -> Tuple[int, int, int]:
    """Parse a 6-digit hex color (leading '#' optional) into 8-bit RGB.

    Channels that cannot be parsed come back as 0, so malformed input yields a
    best-effort color instead of an exception.
    """
    digits = hex_color.replace("#", "")
    channels = []
    for start in (0, 2, 4):
        try:
            channels.append(int(digits[start:start + 2], 16))
        except ValueError:
            logger.debug(f"Unparsable channel in color {hex_color!r}, using 0")
            channels.append(0)
    return channels[0], channels[1], channels[2]


def rgb_to_hsl(r: int, g: int, b: int) -> Tuple[int, int, int]:
    """Convert 8-bit RGB to HSL.

    Returns:
        Tuple of (hue in degrees 0-360, saturation 0-100, lightness 0-100),
        each rounded to the nearest integer
    """
    r_, g_, b_ = r / 255, g / 255, b / 255
    high = max(r_, g_, b_)
    low = min(r_, g_, b_)
    lightness = (high + low) / 2

    if high == low:
        return 0, 0, _round_half_up(lightness * 100)

    delta = high - low
    if high == r_:
        hue = ((g_ - b_) / delta + (6 if g_ < b_ else 0)) / 6
    elif high == g_:
        hue = ((b_ - r_) / delta + 2) / 6
    else:
        hue = ((r_ - g_) / delta + 4) / 6

    if lightness > 0.5:
        saturation = delta / (2 - high - low)
    else:
        saturation = delta / (high + low)

    return (
        _round_half_up(hue * 360),
        _round_half_up(saturation * 100),
        _round_half_up(lightness * 100),
    )


def describe_color(hex_color: str) -> str:
    """Describe a hex color with a human-readable name.

    Low-saturation colors map onto a five-step grayscale ladder. Everything
    else gets a hue name with optional lightness ("light"/"dark") and
    saturation ("muted"/"vibrant") qualifiers, e.g. "muted light red".

    Args:
        hex_color: Color such as "#FF0000" or "ff0000"

    Returns:
        The qualitative color name
    """
    hue, saturation, lightness = rgb_to_hsl(*parse_hex(hex_color))

    if saturation < 10:
        for floor, name in GRAYSCALE_NAMES:
            if lightness > floor:
                return name
        return "black"

    hue_name = "red"
    if 15 <= hue < 345:
        hue_name = next(name for bound, name in HUE_NAMES if hue < bound)

    if lightness > 70:
        color_name = f"light {hue_name}"
    elif lightness < 30:
        color_name = f"dark {hue_name}"
    else:
        color_name = hue_name

    if saturation < 30:
        color_name = f"muted {color_name}"
    elif saturation > 70:
        color_name = f"vibrant {color_name}"

    return color_name
