"""Tests for formatting, logging and usage-report helpers."""

import numpy as np

from imgtoy.palette import Palette
from imgtoy.surface import Surface
from imgtoy.utils import (
    colour_usage_report,
    debug_log,
    error,
    format_duration,
    format_eta,
    format_share,
    format_value,
    key_value_pairs_to_string,
    print_config_line,
    warn,
)


class TestFormatting:
    def test_duration(self):
        assert format_duration(0.25) == "250.0ms"
        assert format_duration(2.5, precise=True) == "2.500s"
        assert format_duration(3.4) == "3.4s"
        assert format_duration(125.0, precise=True) == "2m 5.0s"
        assert format_duration(61.0) == "1m 1s"

    def test_eta(self):
        assert format_eta(None) == "--:--"
        assert format_eta(float("inf")) == "--:--"
        assert format_eta(-1.0) == "--:--"
        assert format_eta(42.4) == "42s"
        assert format_eta(125) == "2m 5s"
        assert format_eta(7260) == "2h 1m"

    def test_values(self):
        assert format_value(True) == "on"
        assert format_value(False) == "off"
        assert format_value(1234567) == "1,234,567"
        assert format_value(np.int64(12)) == "12"
        assert format_value(0.5) == "0.5"
        assert format_value(2.0) == "2"
        assert format_value("bayer") == "bayer"
        assert format_share(0.125) == "12.5%"

    def test_key_value_pairs(self):
        text = key_value_pairs_to_string([("Kernel", "atkinson"), ("Serpentine", True), ("Colours", 1200)])
        assert text == "Kernel: atkinson  Serpentine: on  Colours: 1,200"


class TestLogging:
    def test_config_line_routes_by_debug(self, capsys):
        print_config_line("ordered", [("Colours", 2)], debug=False)
        print_config_line("ordered", [("Colours", 2)], debug=True)
        out = capsys.readouterr().out.splitlines()
        assert out == ["[ordered] Colours: 2", "[debug] [ordered] Colours: 2"]

    def test_levels(self, capsys):
        debug_log("d")
        warn("w")
        error("e")
        captured = capsys.readouterr()
        assert captured.out.splitlines() == ["[debug] d", "[warn] w"]
        assert captured.err.strip() == "[error] e"


class TestColourUsage:
    def test_counts_visible_palette_pixels(self):
        pal = Palette.from_hex(["#000000", "#ffffff", "#ff0000"])
        rgba = np.zeros((2, 3, 4), dtype=np.uint8)
        rgba[..., 3] = 255
        rgba[0, :, :3] = 255  # white row
        rgba[1, 0, :3] = (255, 0, 0)
        rgba[1, 2, 3] = 0  # hidden black pixel
        report = colour_usage_report(Surface.from_u8(rgba), pal)
        # ties keep lexicographic colour order
        assert report == [("#ffffff", 1, 3), ("#000000", 0, 1), ("#ff0000", 2, 1)]

    def test_fully_transparent(self):
        pal = Palette.from_hex(["#000000"])
        rgba = np.zeros((1, 2, 4), dtype=np.uint8)
        assert colour_usage_report(Surface.from_u8(rgba), pal) == []
