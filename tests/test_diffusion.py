"""Tests for error-diffusion kernels and the sequential diffuser."""

import numpy as np
import pytest

from imgtoy.colour import BLACK
from imgtoy.core_types import ConfigError
from imgtoy.diffusion import PRESETS, DiffusionKernel, ErrorDiffusion, diffuse, kernel_names
from imgtoy.palette import Palette
from imgtoy.surface import Surface

from .helpers import grey_surface, horizontal_ramp

RIGHT_ONLY = DiffusionKernel("right-only", ((1, 0, 1.0),))


def _flat_lab(width: int, height: int, lightness: float) -> np.ndarray:
    lab = np.zeros((height, width, 3), dtype=np.float64)
    lab[..., 0] = lightness
    return lab


class TestKernels:
    def test_floyd_steinberg_weights(self):
        k = DiffusionKernel.named("floyd-steinberg")
        assert k.total_weight == pytest.approx(1.0)
        assert dict(((dx, dy), w) for dx, dy, w in k.taps)[(1, 0)] == pytest.approx(7 / 16)

    def test_atkinson_discards_a_quarter(self):
        assert DiffusionKernel.named("atkinson").total_weight == pytest.approx(0.75)

    @pytest.mark.parametrize("name", sorted(PRESETS))
    def test_presets_point_forward(self, name):
        for dx, dy, w in PRESETS[name].taps:
            assert dy > 0 or (dy == 0 and dx > 0)
            assert w > 0

    def test_aliases_are_case_insensitive(self):
        assert DiffusionKernel.named(" Floyd_Steinberg ") is PRESETS["floyd-steinberg"]
        assert "sierra-lite" in kernel_names()

    def test_unknown_kernel(self):
        with pytest.raises(ConfigError):
            DiffusionKernel.named("riemersma")

    def test_backward_tap_rejected(self):
        with pytest.raises(ConfigError):
            DiffusionKernel("bad", ((-1, 0, 1.0),))
        with pytest.raises(ConfigError):
            DiffusionKernel("bad", ((0, 0, 1.0),))
        with pytest.raises(ConfigError):
            DiffusionKernel("empty", ())

    def test_serpentine_mirrors_dx(self):
        k = RIGHT_ONLY.with_serpentine(True)
        assert k.serpentine
        assert k.taps_for_row(True) == ((-1, 0, 1.0),)
        assert k.taps_for_row(False) == RIGHT_ONLY.taps
        assert not RIGHT_ONLY.serpentine


class TestDiffuse:
    def test_single_entry_palette_gives_flat_output(self):
        pal = Palette.from_colours([BLACK])
        out = ErrorDiffusion(pal, DiffusionKernel.named("stucki")).apply(horizontal_ramp(10, 6))
        assert np.all(out.to_u8() == 0)

    def test_edge_error_is_dropped_not_renormalised(self, bw_palette):
        # one column: only the (0, 1) tap of Floyd-Steinberg lands inside
        result = diffuse(_flat_lab(1, 2, 30.0), bw_palette, DiffusionKernel.named("floyd-steinberg"))
        assert np.all(result.pending[0, 0] == 0.0)
        assert result.pending[1, 0, 0] == pytest.approx(30.0 * 5 / 16)

    def test_right_edge_error_does_not_wrap(self, bw_palette):
        result = diffuse(_flat_lab(2, 2, 30.0), bw_palette, RIGHT_ONLY)
        # (1, 0) quantizes 60 to white; its -40 residual falls off the right edge
        assert result.pending[0, 1, 0] == pytest.approx(30.0)
        assert np.all(result.pending[1, 0] == 0.0)
        assert result.pending[1, 1, 0] == pytest.approx(30.0)
        assert result.indices.tolist() == [[0, 1], [0, 1]]

    def test_serpentine_reverses_odd_rows(self, bw_palette):
        lab = _flat_lab(3, 2, 30.0)
        raster = diffuse(lab, bw_palette, RIGHT_ONLY)
        serp = diffuse(lab, bw_palette, RIGHT_ONLY.with_serpentine(True))
        assert raster.pending[1, 0, 0] == 0.0
        assert serp.pending[1, 1, 0] == pytest.approx(30.0)
        assert serp.pending[1, 0, 0] == pytest.approx(-40.0)
        assert np.array_equal(raster.pending[0], serp.pending[0])

    def test_ramp_preserves_local_lightness(self, bw_palette):
        surface = horizontal_ramp(64, 32)
        out = ErrorDiffusion(bw_palette, DiffusionKernel.named("floyd-steinberg")).apply(surface)
        src_l = surface.lab()[..., 0]
        out_l = out.lab()[..., 0]
        for x0 in range(0, 64, 16):
            window = np.s_[:, x0 : x0 + 16]
            assert abs(out_l[window].mean() - src_l[window].mean()) < 8.0

    def test_mid_grey_mean(self, bw_palette):
        surface = grey_surface(20, 20, 0.5)
        out = ErrorDiffusion(bw_palette, DiffusionKernel.named("burkes")).apply(surface)
        assert abs(out.lab()[..., 0].mean() - surface.lab()[..., 0].mean()) < 5.0

    def test_output_uses_palette_colours_only(self):
        pal = Palette.from_hex(["#000000", "#ff0000", "#00ff00", "#ffffff"])
        rng = np.random.default_rng(5)
        surface = Surface(rng.uniform(0.0, 1.0, (8, 11, 3)))
        out = ErrorDiffusion(pal, DiffusionKernel.named("jarvis-judice-ninke")).apply(surface)
        allowed = {tuple(row) for row in np.rint(pal.rgb * 255).astype(int).tolist()}
        assert {tuple(row) for row in out.to_u8().reshape(-1, 3).tolist()} <= allowed

    def test_deterministic(self, bw_palette):
        kernel = DiffusionKernel.named("sierra").with_serpentine(True)
        a = ErrorDiffusion(bw_palette, kernel).apply(horizontal_ramp(17, 9))
        b = ErrorDiffusion(bw_palette, kernel).apply(horizontal_ramp(17, 9))
        assert a == b

    def test_describe(self, bw_palette):
        effect = ErrorDiffusion(bw_palette, DiffusionKernel.named("atkinson"))
        assert dict(effect.describe()) == {"Kernel": "atkinson", "Serpentine": False, "Colours": 2}
