"""Tests for named threshold generators."""

import numpy as np
import pytest

from imgtoy.core_types import ConfigError
from imgtoy.ordered import GENERATORS, Increase, build_generator, generator_names
from imgtoy.ordered.generators import bayer, diagonals_n, modulo_snake, scanline, static


class TestRegistry:
    def test_names_are_unique_and_complete(self):
        names = generator_names()
        assert len(names) == len(set(names)) == len(GENERATORS)
        for expected in ("bayer", "diamonds", "static", "wavy", "zigzag", "modulo-snake"):
            assert expected in names

    def test_unknown_name(self):
        with pytest.raises(ConfigError):
            build_generator("plaid", n=4)

    def test_missing_size_is_config_error(self):
        with pytest.raises(ConfigError):
            build_generator("bayer")


@pytest.mark.parametrize("name", sorted(GENERATORS))
class TestEveryGenerator:
    def test_values_in_unit_interval(self, name):
        strategy = build_generator(name, n=8)
        f = strategy.field(16, 16)
        assert f.shape == (16, 16)
        assert f.min() >= 0.0
        assert f.max() < 1.0

    def test_tiles_with_its_period(self, name):
        strategy = build_generator(name, n=8)
        n = strategy.period
        assert n is not None and n >= 1
        for x, y in [(0, 0), (3, 5), (7, 1), (2, 6)]:
            v = strategy.evaluate(x, y)
            assert strategy.evaluate(x + n, y) == v
            assert strategy.evaluate(x, y + n) == v
            assert strategy.evaluate(x - n, y - 3 * n) == v

    def test_is_deterministic(self, name):
        a = build_generator(name, n=8).field(9, 9)
        b = build_generator(name, n=8).field(9, 9)
        assert np.array_equal(a, b)


class TestMatrixPatterns:
    def test_bayer_two(self):
        assert np.allclose(bayer(2).tile, [[0.0, 0.5], [0.75, 0.25]])

    def test_bayer_is_permutation(self):
        for n in (2, 3, 4, 5, 8):
            values = np.sort(bayer(n).tile.ravel())
            assert np.allclose(values, np.arange(n * n) / (n * n))

    def test_bad_sizes(self):
        with pytest.raises(ConfigError):
            bayer(0)
        with pytest.raises(ConfigError):
            bayer(2.5)
        with pytest.raises(ConfigError):
            bayer(True)
        with pytest.raises(ConfigError):
            build_generator("checkered-diamonds", n=1)

    def test_static_depends_on_seed(self):
        assert np.array_equal(static(8, seed=5).tile, static(8, seed=5).tile)
        assert not np.array_equal(static(8, seed=5).tile, static(8, seed=6).tile)

    def test_scanline_rows(self):
        tile = scanline(4, "horizontal").tile
        assert np.allclose(tile[:, 0], [0.0, 0.25, 0.5, 0.75])
        assert np.allclose(tile, tile[:, :1])
        vertical = scanline(4, "vertical").tile
        assert np.allclose(vertical, tile.T)


class TestParameterisedPatterns:
    def test_diagonals_linear(self):
        tile = diagonals_n(4, "up-right", Increase("linear", 1)).tile
        assert tile[0, 1] == pytest.approx(0.25)
        assert tile[1, 0] == pytest.approx(0.25)

    def test_diagonals_exponential_stays_below_one(self):
        tile = diagonals_n(16, "down-right", Increase("exponential", 3)).tile
        assert tile.min() >= 0.0
        assert tile.max() < 1.0

    def test_increase_validation(self):
        with pytest.raises(ConfigError):
            Increase("quadratic", 2)
        with pytest.raises(ConfigError):
            Increase("linear", 0)

    def test_modulo_snake(self):
        tile = modulo_snake(2, increment_by=1.0, modulo=10, iterations=1).tile
        assert np.allclose(tile, [[0.0, 0.1], [0.3, 0.2]])

    def test_modulo_snake_validation(self):
        with pytest.raises(ConfigError):
            modulo_snake(4, modulo=0)

    def test_broken_spiral_starts_at_centre(self):
        s = build_generator("broken-spiral", n=5)
        assert s.evaluate(2, 2) == 0.0

    def test_zigzag_wrapping_option(self):
        s = build_generator("zigzag", n=6, wrapping="all", magnitude=(1.0, 2.0))
        values = np.sort(s.tile.ravel())
        assert np.allclose(values, np.arange(36) / 36.0)

    def test_bad_halt_threshold(self):
        with pytest.raises(ConfigError):
            build_generator("curve-path", n=4, halt_threshold=0)
