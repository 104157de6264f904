"""Tests for colour filters, effect chains and the batch runner."""

import numpy as np
import pytest

from imgtoy.colour import Color
from imgtoy.core_types import ConfigError
from imgtoy.diffusion import DiffusionKernel, ErrorDiffusion
from imgtoy.filters import (
    Brighten,
    Contrast,
    GradientMap,
    HueRotate,
    MultiplyHue,
    QuantizeHue,
    Saturate,
)
from imgtoy.ordered import OrderedDither
from imgtoy.ordered.generators import bayer
from imgtoy.pipeline import Effect, Pipeline, run_batch
from imgtoy.surface import Surface

from .helpers import grey_surface, horizontal_ramp


def _colour_surface() -> Surface:
    rng = np.random.default_rng(21)
    return Surface(rng.uniform(0.1, 0.9, (6, 7, 3)))


class Exploding:
    """Raises for surfaces of one particular width."""

    name = "exploding"

    def __init__(self, width: int):
        self.width = width

    def apply(self, surface: Surface) -> Surface:
        if surface.width == self.width:
            raise RuntimeError("boom")
        return surface

    def describe(self):
        return [("Width", self.width)]


class TestSurface:
    def test_immutable(self):
        s = grey_surface(3, 2)
        with pytest.raises(ValueError):
            s.rgb[0, 0, 0] = 1.0

    def test_values_clamped(self):
        s = Surface(np.full((1, 1, 3), 1.5))
        assert s.rgb.max() == 1.0

    def test_shape_validation(self):
        with pytest.raises(TypeError):
            Surface(np.zeros((2, 2)))
        with pytest.raises(ValueError):
            Surface(np.zeros((0, 2, 3)))

    def test_from_u8_alpha(self):
        rgba = np.zeros((2, 2, 4), dtype=np.uint8)
        rgba[..., 3] = 7
        s = Surface.from_u8(rgba)
        assert s.alpha is not None and int(s.alpha[0, 0]) == 7
        assert np.array_equal(s.to_rgba_u8(), rgba)

    def test_filled(self):
        s = Surface.filled(4, 3, Color.from_hex("#ff0000"))
        assert (s.width, s.height) == (4, 3)
        assert s.to_u8()[2, 3].tolist() == [255, 0, 0]


class TestFilters:
    @pytest.mark.parametrize(
        "effect",
        [Brighten(0.0), Contrast(1.0), Saturate(0.0), HueRotate(0.0), HueRotate(360.0), MultiplyHue(1.0)],
    )
    def test_neutral_parameters_return_input(self, effect):
        surface = _colour_surface()
        assert effect.apply(surface) is surface

    def test_brighten_raises_lightness(self):
        surface = grey_surface(2, 2, 0.4)
        out = Brighten(0.2).apply(surface)
        assert out.lab()[..., 0].mean() == pytest.approx(surface.lab()[..., 0].mean() + 20.0, abs=0.5)

    def test_contrast_spreads_from_mid_grey(self):
        surface = horizontal_ramp(16, 1)
        out = Contrast(1.5).apply(surface)
        assert out.lab()[0, 0, 0] <= surface.lab()[0, 0, 0] + 1e-9
        assert out.lab()[0, -1, 0] >= surface.lab()[0, -1, 0] - 1e-6

    def test_saturate_grey_adds_chroma(self):
        out = Saturate(0.2).apply(grey_surface(1, 1, 0.5))
        assert out.color_at(0, 0).chroma > 5.0

    def test_hue_rotate_half_turn(self):
        red = Surface.filled(1, 1, Color(50.0, 15.0, 10.0))
        out = HueRotate(180.0).apply(red).color_at(0, 0)
        assert out.hue == pytest.approx(190.0, abs=1.0)

    def test_quantize_hue(self):
        surface = Surface.filled(1, 1, Color(50.0, 20.0, 100.0))
        out = QuantizeHue((0.0, 120.0, 240.0)).apply(surface).color_at(0, 0)
        assert out.hue == pytest.approx(120.0, abs=1.0)

    def test_quantize_hue_needs_hues(self):
        with pytest.raises(ConfigError):
            QuantizeHue(())

    def test_gradient_map_endpoints(self):
        black_to_red = GradientMap.from_pairs([(Color(0.0), 0.0), (Color.from_hex("#ff0000"), 1.0)])
        out = black_to_red.apply(horizontal_ramp(5, 1)).to_u8()
        assert out[0, 0].tolist() == [0, 0, 0]
        assert out[0, -1].tolist() == [255, 0, 0]

    def test_gradient_map_single_stop(self):
        out = GradientMap.from_pairs([(Color.from_hex("#00ff00"), 0.5)]).apply(horizontal_ramp(4, 2))
        assert np.all(out.to_u8() == [0, 255, 0])

    def test_gradient_map_validation(self):
        with pytest.raises(ConfigError):
            GradientMap.from_pairs([])
        with pytest.raises(ConfigError):
            GradientMap.from_pairs([(Color(50.0), 1.5)])

    def test_alpha_survives_filters(self):
        rgba = np.full((2, 2, 4), 100, dtype=np.uint8)
        rgba[0, 0, 3] = 0
        surface = Surface.from_u8(rgba)
        out = Contrast(2.0).apply(surface)
        assert np.array_equal(out.alpha, surface.alpha)


class TestPipeline:
    def test_empty_pipeline_is_identity(self):
        surface = _colour_surface()
        assert Pipeline().apply(surface) is surface

    def test_effects_apply_in_order(self):
        surface = grey_surface(2, 2, 0.5)
        a = Pipeline.of(Brighten(0.3), Contrast(0.0))
        b = Pipeline.of(Contrast(0.0), Brighten(0.3))
        la = a.apply(surface).lab()[..., 0].mean()
        lb = b.apply(surface).lab()[..., 0].mean()
        assert la == pytest.approx(50.0, abs=0.5)
        assert lb == pytest.approx(80.0, abs=0.5)

    def test_rejects_non_effects(self):
        with pytest.raises(TypeError):
            Pipeline((object(),))

    def test_effects_satisfy_protocol(self, bw_palette):
        for effect in (
            Brighten(0.1),
            GradientMap.from_pairs([(Color(20.0), 0.0)]),
            OrderedDither(bw_palette, bayer(2)),
            ErrorDiffusion(bw_palette, DiffusionKernel.named("atkinson")),
        ):
            assert isinstance(effect, Effect)

    def test_describe(self, bw_palette):
        p = Pipeline.of(HueRotate(90.0), OrderedDither(bw_palette, bayer(2)))
        names = [name for name, _ in p.describe()]
        assert names == ["hue-rotate", "ordered"]
        assert len(p) == 2

    def test_same_input_same_output(self, bw_palette):
        p = Pipeline.of(
            Saturate(0.1),
            ErrorDiffusion(bw_palette, DiffusionKernel.named("floyd-steinberg")),
        )
        surface = _colour_surface()
        assert p.apply(surface) == p.apply(surface)


class TestRunBatch:
    @pytest.mark.parametrize("workers", [1, 3])
    def test_failure_is_isolated(self, workers, bw_palette):
        pipeline = Pipeline.of(Exploding(width=3), OrderedDither(bw_palette, bayer(2)))
        surfaces = [grey_surface(2, 2), grey_surface(3, 2), grey_surface(4, 2)]
        results = run_batch(pipeline, surfaces, workers=workers)
        assert [r.index for r in results] == [0, 1, 2]
        assert [r.ok for r in results] == [True, False, True]
        assert results[1].surface is None
        assert isinstance(results[1].error, RuntimeError)
        assert results[0].surface == pipeline.apply(surfaces[0])
        assert results[2].surface.width == 4

    def test_parallel_matches_serial(self, bw_palette):
        pipeline = Pipeline.of(ErrorDiffusion(bw_palette, DiffusionKernel.named("sierra-lite")))
        surfaces = [horizontal_ramp(w, 4) for w in (5, 6, 7, 8)]
        serial = run_batch(pipeline, surfaces, workers=1)
        parallel = run_batch(pipeline, surfaces, workers=4)
        assert [r.surface for r in serial] == [r.surface for r in parallel]

    def test_empty_batch(self):
        assert run_batch(Pipeline(), [], workers=4) == []
