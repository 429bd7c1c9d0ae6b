"""Unit tests for the color descriptor."""

import pytest

from lumenset.utils.color_descriptor import describe_color, parse_hex, rgb_to_hsl


GRAYSCALE_NAMES = {"pure white", "light gray", "medium gray", "dark gray", "black"}


class TestParseHex:
    """Tests for hex parsing."""

    def test_with_hash(self):
        """Test parsing a color with a leading hash."""
        assert parse_hex("#FF8000") == (255, 128, 0)

    def test_without_hash(self):
        """Test parsing a color without a hash."""
        assert parse_hex("00ff7f") == (0, 255, 127)

    def test_malformed_does_not_raise(self):
        """Test that malformed input degrades to zero channels."""
        assert parse_hex("#zz") == (0, 0, 0)
        assert parse_hex("") == (0, 0, 0)


class TestRgbToHsl:
    """Tests for the HSL conversion."""

    def test_pure_red(self):
        assert rgb_to_hsl(255, 0, 0) == (0, 100, 50)

    def test_pure_blue(self):
        assert rgb_to_hsl(0, 0, 255) == (240, 100, 50)

    def test_gray_has_zero_saturation(self):
        hue, saturation, lightness = rgb_to_hsl(128, 128, 128)

        assert hue == 0
        assert saturation == 0
        assert lightness == 50

    def test_magenta_hue_wraps(self):
        """Test the red-sector wrap when blue exceeds green."""
        hue, _, _ = rgb_to_hsl(255, 0, 128)
        assert hue == 330


class TestDescribeColor:
    """Tests for describe_color."""

    @pytest.mark.parametrize("hex_color, expected", [
        ("#FFFFFF", "pure white"),
        ("#C0C0C0", "light gray"),
        ("#808080", "medium gray"),
        ("#333333", "dark gray"),
        ("#000000", "black"),
    ])
    def test_grayscale_ladder(self, hex_color, expected):
        """Test that unsaturated colors follow the lightness ladder."""
        assert describe_color(hex_color) == expected

    def test_low_saturation_tint_is_grayscale(self):
        """Test that a barely tinted gray is still named as gray."""
        name = describe_color("#817F7F")
        assert name in GRAYSCALE_NAMES

    def test_pure_red(self):
        """Test that pure red is a vibrant red."""
        name = describe_color("#FF0000")

        assert "red" in name
        assert name == "vibrant red"

    @pytest.mark.parametrize("hex_color, hue_name", [
        ("#FF8000", "orange"),
        ("#FFFF00", "yellow"),
        ("#00FF00", "green"),
        ("#0000FF", "blue"),
        ("#8000FF", "purple"),
        ("#FF00AA", "pink"),
    ])
    def test_hue_buckets(self, hex_color, hue_name):
        """Test the hue ranges on fully saturated colors."""
        assert describe_color(hex_color) == f"vibrant {hue_name}"

    def test_light_prefix(self):
        """Test the light qualifier above 70% lightness."""
        assert describe_color("#FF9999") == "vibrant light red"

    def test_dark_prefix(self):
        """Test the dark qualifier below 30% lightness."""
        assert describe_color("#000080") == "vibrant dark blue"

    def test_muted_prefix(self):
        """Test the muted qualifier below 30% saturation."""
        assert describe_color("#9F8060") == "muted orange"

    def test_mid_saturation_has_no_prefix(self):
        """Test that 30-70% saturation adds no saturation qualifier."""
        assert describe_color("#B34D4D") == "red"

    def test_muted_light_composition(self):
        """Test that saturation and lightness qualifiers stack in order."""
        assert describe_color("#D9C6C6") == "muted light red"

    def test_malformed_hex_returns_a_name(self):
        """Test that malformed input still produces a string."""
        assert isinstance(describe_color("not-a-color"), str)
