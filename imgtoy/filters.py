# imgtoy/filters.py
from __future__ import annotations

"""
Simple colour filters working in LCh.

Every filter is an Effect. A filter whose parameters make it a no-op returns
its input surface unchanged.
"""

from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple

import numpy as np

from .colour import Color
from .colour_convert import lab_to_lch, lch_to_lab
from .core_types import ConfigError, Lch
from .surface import Surface


def _map_lch(surface: Surface, lch: Lch) -> Surface:
    lch = lch.copy()
    lch[..., 0] = np.clip(lch[..., 0], 0.0, 100.0)
    lch[..., 1] = np.maximum(lch[..., 1], 0.0)
    return surface.with_lab(lch_to_lab(lch))


def _hue_gap(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Signed shortest hue difference b - a in degrees, in [-180, 180)."""
    return (b - a + 180.0) % 360.0 - 180.0


@dataclass(frozen=True)
class Brighten:
    """Shift lightness by factor * 100."""

    factor: float
    name = "brighten"

    def apply(self, surface: Surface) -> Surface:
        if self.factor == 0.0:
            return surface
        lch = lab_to_lch(surface.lab())
        lch[..., 0] += 100.0 * self.factor
        return _map_lch(surface, lch)

    def describe(self) -> List[Tuple[str, Any]]:
        return [("Factor", float(self.factor))]


@dataclass(frozen=True)
class Contrast:
    """Scale lightness about mid-grey (L = 50) by factor."""

    factor: float
    name = "contrast"

    def apply(self, surface: Surface) -> Surface:
        if self.factor == 1.0:
            return surface
        lch = lab_to_lch(surface.lab())
        lch[..., 0] = 50.0 + (lch[..., 0] - 50.0) * self.factor
        return _map_lch(surface, lch)

    def describe(self) -> List[Tuple[str, Any]]:
        return [("Factor", float(self.factor))]


@dataclass(frozen=True)
class Saturate:
    """Shift chroma by factor * 100 (chroma stays >= 0)."""

    factor: float
    name = "saturate"

    def apply(self, surface: Surface) -> Surface:
        if self.factor == 0.0:
            return surface
        lch = lab_to_lch(surface.lab())
        lch[..., 1] += 100.0 * self.factor
        return _map_lch(surface, lch)

    def describe(self) -> List[Tuple[str, Any]]:
        return [("Factor", float(self.factor))]


@dataclass(frozen=True)
class HueRotate:
    degrees: float
    name = "hue-rotate"

    def apply(self, surface: Surface) -> Surface:
        if self.degrees % 360.0 == 0.0:
            return surface
        lch = lab_to_lch(surface.lab())
        lch[..., 2] = (lch[..., 2] + self.degrees) % 360.0
        return _map_lch(surface, lch)

    def describe(self) -> List[Tuple[str, Any]]:
        return [("Degrees", float(self.degrees))]


@dataclass(frozen=True)
class MultiplyHue:
    factor: float
    name = "multiply-hue"

    def apply(self, surface: Surface) -> Surface:
        if self.factor == 1.0:
            return surface
        lch = lab_to_lch(surface.lab())
        lch[..., 2] = (lch[..., 2] * self.factor) % 360.0
        return _map_lch(surface, lch)

    def describe(self) -> List[Tuple[str, Any]]:
        return [("Factor", float(self.factor))]


@dataclass(frozen=True)
class QuantizeHue:
    """Snap every hue to the circularly nearest of hues (first listed wins ties)."""

    hues: Tuple[float, ...]
    name = "quantize-hue"

    def __post_init__(self) -> None:
        hues = tuple(float(h) % 360.0 for h in self.hues)
        if not hues:
            raise ConfigError("quantize-hue needs at least one hue")
        object.__setattr__(self, "hues", hues)

    def apply(self, surface: Surface) -> Surface:
        lch = lab_to_lch(surface.lab())
        targets = np.asarray(self.hues, dtype=np.float64)
        gaps = np.abs(_hue_gap(lch[..., 2][..., None], targets))
        lch[..., 2] = targets[np.argmin(gaps, axis=-1)]
        return _map_lch(surface, lch)

    def describe(self) -> List[Tuple[str, Any]]:
        return [("Hues", ", ".join(f"{h:.3f}" for h in self.hues))]


@dataclass(frozen=True)
class GradientMap:
    """
    Replace each pixel by a colour picked from its lightness.

    stops are (colour, luma) pairs with luma in [0, 1]; pixel lightness / 100 is
    located between the surrounding stops and the colours are blended in LCh
    (hue along the shorter arc). Lightness beyond the end stops clamps.
    """

    stops: Tuple[Tuple[Color, float], ...]
    name = "gradient-map"

    def __post_init__(self) -> None:
        stops = tuple(sorted(((c, float(l)) for c, l in self.stops), key=lambda s: s[1]))
        if not stops:
            raise ConfigError("gradient-map needs at least one stop")
        for _, luma in stops:
            if not 0.0 <= luma <= 1.0:
                raise ConfigError(f"gradient-map luma must be in [0, 1], got {luma}")
        object.__setattr__(self, "stops", stops)

    @classmethod
    def from_pairs(cls, pairs: Sequence[Tuple[Color, float]]) -> "GradientMap":
        return cls(tuple(pairs))

    def apply(self, surface: Surface) -> Surface:
        luma = np.clip(surface.lab()[..., 0] / 100.0, 0.0, 1.0)
        keys = np.array([l for _, l in self.stops], dtype=np.float64)
        cols = np.array([c.to_lch() for c, _ in self.stops], dtype=np.float64)

        if len(self.stops) == 1:
            lch = np.broadcast_to(cols[0], luma.shape + (3,)).copy()
            return _map_lch(surface, lch)

        hi = np.clip(np.searchsorted(keys, luma, side="right"), 1, len(keys) - 1)
        lo = hi - 1
        span = keys[hi] - keys[lo]
        with np.errstate(divide="ignore", invalid="ignore"):
            w = np.where(span > 0.0, (luma - keys[lo]) / span, 0.0)
        w = np.clip(w, 0.0, 1.0)[..., None]

        a, b = cols[lo], cols[hi]
        lch = a + (b - a) * w
        lch[..., 2] = (a[..., 2] + _hue_gap(a[..., 2], b[..., 2]) * w[..., 0]) % 360.0
        return _map_lch(surface, lch)

    def describe(self) -> List[Tuple[str, Any]]:
        return [(f"{luma:.2f}", str(colour)) for colour, luma in self.stops]


__all__ = [
    "Brighten",
    "Contrast",
    "Saturate",
    "HueRotate",
    "MultiplyHue",
    "QuantizeHue",
    "GradientMap",
]
