# imgtoy/colour.py
from __future__ import annotations

"""
The Color value type: CIE LCh(ab) under D65, with conversions to and from
device sRGB and a perceptual distance.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Tuple

import numpy as np

from .core_types import RGBFloat, RGBTuple, hex_to_rgb, rgb_to_hex
from .colour_convert import lab_distance, lab_to_lch, lab_to_rgb, lch_to_lab, rgb_to_lab

# Rounding slack accepted on lightness / chroma bounds before clamping.
_BOUND_TOLERANCE = 1e-3

SPACES = ("srgb", "lab", "lch")


@dataclass(frozen=True)
class Color:
    """
    Immutable colour in LCh.

    lightness in [0,100], chroma >= 0, hue in [0,360). Hue is pinned to 0 for
    achromatic colours so equal colours compare equal channel by channel.
    """

    lightness: float
    chroma: float = 0.0
    hue: float = 0.0

    def __post_init__(self) -> None:
        L = float(self.lightness)
        C = float(self.chroma)
        h = float(self.hue)
        if not (math.isfinite(L) and math.isfinite(C) and math.isfinite(h)):
            raise ValueError(f"colour channels must be finite, got ({L}, {C}, {h})")
        if L < -_BOUND_TOLERANCE or L > 100.0 + _BOUND_TOLERANCE:
            raise ValueError(f"lightness must be within [0, 100], got {L}")
        if C < -_BOUND_TOLERANCE:
            raise ValueError(f"chroma must be >= 0, got {C}")
        L = min(max(L, 0.0), 100.0)
        C = max(C, 0.0)
        h = h % 360.0
        if C == 0.0 or h >= 360.0:
            h = 0.0
        object.__setattr__(self, "lightness", L)
        object.__setattr__(self, "chroma", C)
        object.__setattr__(self, "hue", h)

    # Constructors

    @classmethod
    def from_lab(cls, lab: Iterable[float]) -> "Color":
        L, C, h = lab_to_lch(np.asarray(list(lab), dtype=np.float64)).tolist()
        return cls(L, C, h)

    @classmethod
    def from_rgb(cls, red: float, green: float, blue: float) -> "Color":
        """From sRGB floats in [0,1]."""
        return cls.from_lab(rgb_to_lab(np.array([red, green, blue], dtype=np.float64)))

    @classmethod
    def from_rgb8(cls, red: int, green: int, blue: int) -> "Color":
        return cls.from_rgb(red / 255.0, green / 255.0, blue / 255.0)

    @classmethod
    def from_hex(cls, hex_str: str) -> "Color":
        return cls.from_rgb8(*hex_to_rgb(hex_str))

    # Conversions

    def to_lch(self) -> Tuple[float, float, float]:
        return (self.lightness, self.chroma, self.hue)

    def to_lab(self) -> np.ndarray:
        """Lab row, shape (3,)."""
        return lch_to_lab(np.array(self.to_lch(), dtype=np.float64))

    def to_rgb(self, clip: bool = True) -> RGBFloat:
        """sRGB floats; out-of-gamut colours clip unless clip=False."""
        r, g, b = lab_to_rgb(self.to_lab(), clip=clip).tolist()
        return (r, g, b)

    def to_rgb8(self) -> RGBTuple:
        r, g, b = np.rint(np.asarray(self.to_rgb()) * 255.0).astype(int).tolist()
        return (r, g, b)

    def to_hex(self) -> str:
        return rgb_to_hex(self.to_rgb8())

    def in_gamut(self, tolerance: float = 1e-6) -> bool:
        rgb = np.asarray(self.to_rgb(clip=False))
        return bool(np.all(rgb >= -tolerance) and np.all(rgb <= 1.0 + tolerance))

    def __str__(self) -> str:
        return f"LCh({self.lightness:.2f}, {self.chroma:.2f}, {self.hue:.2f})"


BLACK = Color(0.0, 0.0, 0.0)
WHITE = Color(100.0, 0.0, 0.0)


def distance(a: Color, b: Color) -> float:
    """
    Perceptual distance in LCh: the polar form of the Lab Euclidean distance,
    sqrt(dL^2 + Ca^2 + Cb^2 - 2 Ca Cb cos(dh)). Symmetric, 0 iff a == b.
    """
    if a == b:
        return 0.0
    return float(lab_distance(a.to_lab(), b.to_lab()))


def convert(color: Color, space: str) -> Tuple[float, float, float]:
    """Channels of color in the named space ('srgb', 'lab' or 'lch')."""
    if space == "srgb":
        return color.to_rgb()
    if space == "lab":
        L, a, b = color.to_lab().tolist()
        return (L, a, b)
    if space == "lch":
        return color.to_lch()
    raise ValueError(f"unknown colour space {space!r}; expected one of {SPACES}")


__all__ = ["Color", "BLACK", "WHITE", "SPACES", "distance", "convert"]
