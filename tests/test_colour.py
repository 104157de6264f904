"""Tests for the Color value type, conversions and distance."""

import numpy as np
import pytest

from imgtoy.colour import BLACK, WHITE, Color, convert, distance
from imgtoy.core_types import hex_to_rgb, rgb_to_hex


class TestColor:
    def test_hue_is_normalised(self):
        assert Color(50.0, 20.0, 370.0).hue == pytest.approx(10.0)
        assert Color(50.0, 20.0, -90.0).hue == pytest.approx(270.0)

    def test_achromatic_hue_pinned_to_zero(self):
        assert Color(40.0, 0.0, 123.0) == Color(40.0, 0.0, 0.0)

    def test_rejects_out_of_range_lightness(self):
        with pytest.raises(ValueError):
            Color(120.0, 0.0, 0.0)
        with pytest.raises(ValueError):
            Color(50.0, -5.0, 0.0)

    def test_rejects_non_finite(self):
        with pytest.raises(ValueError):
            Color(float("nan"), 0.0, 0.0)

    def test_black_and_white_rgb(self):
        assert BLACK.to_rgb8() == (0, 0, 0)
        assert WHITE.to_rgb8() == (255, 255, 255)

    def test_hex_roundtrip(self):
        for hx in ("#ff0000", "#00ff00", "#123456", "#ffffff"):
            assert Color.from_hex(hx).to_hex() == hx

    def test_from_rgb_is_in_gamut(self):
        assert Color.from_rgb(0.2, 0.6, 0.9).in_gamut(1e-4)

    def test_high_chroma_can_leave_gamut(self):
        assert not Color(50.0, 150.0, 140.0).in_gamut()

    def test_convert_spaces(self):
        c = Color.from_hex("#336699")
        assert convert(c, "lch") == c.to_lch()
        L, a, b = convert(c, "lab")
        assert L == pytest.approx(c.lightness)
        assert np.hypot(a, b) == pytest.approx(c.chroma)
        r, g, bl = convert(c, "srgb")
        assert (round(r * 255), round(g * 255), round(bl * 255)) == (0x33, 0x66, 0x99)
        with pytest.raises(ValueError):
            convert(c, "hsv")


class TestDistance:
    def test_zero_for_equal(self):
        c = Color(60.0, 30.0, 200.0)
        assert distance(c, Color(60.0, 30.0, 200.0)) == 0.0

    def test_symmetric(self):
        a = Color.from_hex("#ff8800")
        b = Color.from_hex("#0044cc")
        assert distance(a, b) == pytest.approx(distance(b, a))

    def test_black_white(self):
        assert distance(BLACK, WHITE) == pytest.approx(100.0)

    def test_hue_matters_at_equal_lightness(self):
        a = Color(50.0, 40.0, 0.0)
        b = Color(50.0, 40.0, 180.0)
        assert distance(a, b) == pytest.approx(80.0)

    def test_positive_for_distinct(self):
        assert distance(Color(50.0, 10.0, 10.0), Color(50.0, 10.0, 11.0)) > 0.0


class TestHelpers:
    def test_hex_parsing(self):
        assert hex_to_rgb("#fff") == (255, 255, 255)
        assert hex_to_rgb("00FF7f") == (0, 255, 127)
        with pytest.raises(ValueError):
            hex_to_rgb("#12345")
        with pytest.raises(ValueError):
            hex_to_rgb("#gggggg")

    def test_rgb_to_hex(self):
        assert rgb_to_hex((1, 2, 255)) == "#0102ff"

