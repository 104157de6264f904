"""Tests for nearest / nearest_pair palette lookups."""

import numpy as np
import pytest

from imgtoy.colour import BLACK, WHITE, Color, distance
from imgtoy.core_types import ConfigError
from imgtoy.palette import Palette, build_gradient_lch
from imgtoy.quantize import nearest, nearest_indices, nearest_pair, nearest_pair_indices


class TestPalette:
    def test_empty_palette_rejected(self):
        with pytest.raises(ConfigError):
            Palette.from_colours([])

    def test_hex_codes(self):
        pal = Palette.from_hex(["#000000", "#ff0000"])
        assert pal.hex_codes() == ["#000000", "#ff0000"]
        assert len(pal) == 2

    def test_gradient_shades(self):
        shades = build_gradient_lch(Color.from_hex("#0000ff"), 5)
        assert len(shades) == 5
        assert shades[0].lightness < shades[-1].lightness
        assert all(c.in_gamut(1e-4) for c in shades)


class TestNearest:
    def test_picks_minimal_distance(self):
        pal = Palette.from_hex(["#000000", "#ff0000", "#ffffff"])
        c = Color.from_hex("#ee1111")
        assert nearest(c, pal) == pal[1]

    def test_member_maps_to_itself(self):
        pal = Palette.from_hex(["#102030", "#a0b0c0", "#ffcc00"])
        for entry in pal:
            assert nearest(entry, pal) == entry

    def test_tie_goes_to_earliest_index(self):
        a = Color(40.0, 0.0, 0.0)
        b = Color(60.0, 0.0, 0.0)
        pal = Palette.from_colours([b, a])
        assert nearest(Color(50.0, 0.0, 0.0), pal) == b

    def test_consistent_with_distance(self):
        rng = np.random.default_rng(7)
        pal = Palette.from_colours(
            Color.from_rgb(*rng.uniform(0, 1, 3).tolist()) for _ in range(8)
        )
        for _ in range(20):
            c = Color.from_rgb(*rng.uniform(0, 1, 3).tolist())
            best = min(distance(c, p) for p in pal)
            assert distance(c, nearest(c, pal)) == pytest.approx(best)

    def test_vectorised_matches_scalar(self):
        rng = np.random.default_rng(3)
        pal = Palette.from_hex(["#000000", "#ffffff", "#ff0000", "#00ff00"])
        colours = [Color.from_rgb(*rng.uniform(0, 1, 3).tolist()) for _ in range(12)]
        lab = np.array([c.to_lab() for c in colours])
        idx = nearest_indices(lab, pal)
        assert [pal[int(i)] for i in idx] == [nearest(c, pal) for c in colours]


class TestNearestPair:
    def test_single_entry_palette(self):
        pal = Palette.from_colours([BLACK])
        a, b, t = nearest_pair(Color(70.0, 20.0, 50.0), pal)
        assert a == BLACK and b == BLACK and t == 0.0

    def test_exact_match_has_zero_t(self, bw_palette):
        a, b, t = nearest_pair(WHITE, bw_palette)
        assert a == WHITE
        assert b == BLACK
        assert t == 0.0

    def test_t_is_position_along_segment(self, bw_palette):
        a, b, t = nearest_pair(Color(30.0, 0.0, 0.0), bw_palette)
        assert a == BLACK and b == WHITE
        assert t == pytest.approx(0.3)

    def test_t_stays_in_unit_interval(self):
        pal = Palette.from_hex(["#404040", "#808080"])
        _, _, t = nearest_pair(WHITE, pal)
        assert 0.0 <= t <= 1.0

    def test_a_is_nearest(self):
        pal = Palette.from_hex(["#000000", "#ff0000", "#ffffff", "#0000ff"])
        c = Color.from_hex("#aa2020")
        a, b, _ = nearest_pair(c, pal)
        assert a == nearest(c, pal)
        assert a != b


class TestChunking:
    def _palette_and_lab(self):
        rng = np.random.default_rng(11)
        pal = Palette.from_colours(
            Color.from_rgb(*rng.uniform(0, 1, 3).tolist()) for _ in range(24)
        )
        # duplicated entries force second-place ties
        pal = Palette.from_colours(list(pal) + [pal[3], pal[0]])
        lab = np.stack([c.to_lab() for c in pal], axis=0)
        noise = rng.normal(0.0, 8.0, (40, 37, 3))
        pixels = lab[rng.integers(0, len(pal), (40, 37))] + noise
        return pal, pixels

    def test_nearest_indices_independent_of_chunk(self):
        pal, pixels = self._palette_and_lab()
        whole = nearest_indices(pixels, pal, chunk=pixels.shape[0] * pixels.shape[1])
        for chunk in (1, 7, 256, 1000):
            assert np.array_equal(nearest_indices(pixels, pal, chunk=chunk), whole)

    def test_pair_indices_independent_of_chunk(self):
        pal, pixels = self._palette_and_lab()
        a0, b0, t0 = nearest_pair_indices(pixels, pal, chunk=pixels.shape[0] * pixels.shape[1])
        for chunk in (3, 500):
            a, b, t = nearest_pair_indices(pixels, pal, chunk=chunk)
            assert np.array_equal(a, a0)
            assert np.array_equal(b, b0)
            assert np.array_equal(t, t0)

    def test_pair_matches_stable_sort_order(self):
        pal, pixels = self._palette_and_lab()
        rows = pixels.reshape(-1, 3)
        d2 = np.sum((pal.lab[None, :, :] - rows[:, None, :]) ** 2, axis=2)
        order = np.argsort(d2, axis=1, kind="stable")
        a, b, _ = nearest_pair_indices(pixels, pal, chunk=100)
        assert np.array_equal(a.reshape(-1), order[:, 0])
        assert np.array_equal(b.reshape(-1), order[:, 1])

    def test_duplicate_entries_tie_to_earliest(self):
        pal = Palette.from_colours([BLACK, WHITE, BLACK])
        a, b, t = nearest_pair_indices(np.zeros((2, 2, 3)), pal, chunk=1)
        assert np.all(a == 0)
        assert np.all(b == 2)
        assert np.all(t == 0.0)

    def test_rejects_bad_chunk(self, bw_palette):
        with pytest.raises(ValueError):
            nearest_indices(np.zeros((1, 3)), bw_palette, chunk=0)
