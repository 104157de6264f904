"""Tests for ordered dithering against a palette."""

import numpy as np

from imgtoy.colour import BLACK, WHITE
from imgtoy.ordered import OrderedDither, build_generator, generator_names, ordered_indices
from imgtoy.ordered.generators import bayer
from imgtoy.palette import Palette
from imgtoy.surface import Surface

from .helpers import grey_surface, horizontal_ramp


class TestOrderedDither:
    def test_adjacent_phases_split_mid_grey(self, bw_palette):
        surface = grey_surface(2, 1, 0.5)
        out = OrderedDither(bw_palette, bayer(2)).apply(surface)
        assert out.width == 2 and out.height == 1
        left, right = out.color_at(0, 0), out.color_at(1, 0)
        assert left != right
        assert {left.to_hex(), right.to_hex()} == {"#000000", "#ffffff"}

    def test_single_entry_palette_gives_flat_output(self):
        pal = Palette.from_colours([BLACK])
        surface = horizontal_ramp(12, 5)
        out = OrderedDither(pal, bayer(4)).apply(surface)
        assert np.all(out.to_u8() == 0)

    def test_output_uses_palette_colours_only(self):
        pal = Palette.from_hex(["#000000", "#ff0000", "#ffffff", "#0000ff"])
        rng = np.random.default_rng(11)
        surface = Surface(rng.uniform(0.0, 1.0, (9, 13, 3)))
        allowed = {tuple(row) for row in np.rint(pal.rgb * 255).astype(int).tolist()}
        for name in generator_names():
            out = OrderedDither(pal, build_generator(name, n=4)).apply(surface)
            used = {tuple(row) for row in out.to_u8().reshape(-1, 3).tolist()}
            assert used <= allowed, name

    def test_indices_follow_threshold_rule(self, bw_palette):
        # L 53.4 grey: A = white, B = black, t ~ 0.47
        surface = grey_surface(4, 4, 0.5)
        strategy = bayer(4)
        idx = ordered_indices(surface, bw_palette, strategy)
        tau = strategy.field(4, 4)
        expected = np.where(tau > 0.47, 1, 0)
        assert np.array_equal(idx, expected)

    def test_ramp_gets_brighter_left_to_right(self, bw_palette):
        surface = horizontal_ramp(64, 16)
        out = OrderedDither(bw_palette, bayer(4)).apply(surface)
        white = (out.to_u8()[..., 0] == 255).mean(axis=0)
        assert white[:16].mean() < white[-16:].mean()

    def test_alpha_is_carried(self, bw_palette):
        rgba = np.zeros((3, 3, 4), dtype=np.uint8)
        rgba[..., 3] = 128
        surface = Surface.from_u8(rgba)
        out = OrderedDither(bw_palette, bayer(2)).apply(surface)
        assert np.array_equal(out.alpha, surface.alpha)

    def test_input_not_modified(self, bw_palette):
        surface = horizontal_ramp(8, 4)
        before = surface.rgb.copy()
        OrderedDither(bw_palette, bayer(2)).apply(surface)
        assert np.array_equal(surface.rgb, before)

    def test_parallel_lab_matches_serial(self, bw_palette):
        surface = horizontal_ramp(32, 24)
        serial = OrderedDither(bw_palette, bayer(8), workers=1).apply(surface)
        threaded = OrderedDither(bw_palette, bayer(8), workers=4).apply(horizontal_ramp(32, 24))
        assert serial == threaded

    def test_describe(self, bw_palette):
        pairs = dict(OrderedDither(bw_palette, bayer(2).invert()).describe())
        assert pairs["Colours"] == 2
        assert "invert" in pairs["Strategy"]

    def test_white_on_white(self):
        pal = Palette.from_colours([WHITE, BLACK])
        strategy = bayer(2)
        out = OrderedDither(pal, strategy).apply(grey_surface(4, 4, 1.0))
        # tau == 0 cells fall to the second-nearest entry
        expected = np.where(strategy.field(4, 4) == 0.0, 0, 255)
        assert np.array_equal(out.to_u8()[..., 0], expected)
