# imgtoy/palette.py
from __future__ import annotations

"""
Palette: a non-empty, ordered, immutable sequence of Colors with cached
Lab and sRGB arrays for the quantizer.
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Sequence, Tuple

import numpy as np

from .colour import Color
from .core_types import ConfigError, Lab, rgb_to_hex


def snap_to_gamut(color: Color) -> Color:
    """The displayable colour an LCh value renders as (sRGB clip)."""
    return Color.from_rgb(*color.to_rgb(clip=True))


def build_gradient_lch(color: Color, shades: int) -> List[Color]:
    """
    Shades of one colour along a black -> colour -> white path in LCh.

    Lightness is spread evenly over (0, 100) exclusive of the end points; chroma
    ramps linearly up to the colour's own chroma at its lightness and back down
    to zero at white. Hue is kept. Results are snapped into the sRGB gamut.
    """
    if shades < 1:
        raise ConfigError(f"gradient needs at least 1 shade, got {shades}")
    peak = color.lightness
    out: List[Color] = []
    for i in range(shades):
        L = 100.0 * (i + 1) / (shades + 1)
        if L <= peak:
            scale = L / peak if peak > 0.0 else 0.0
        else:
            scale = (100.0 - L) / (100.0 - peak) if peak < 100.0 else 0.0
        out.append(snap_to_gamut(Color(L, color.chroma * scale, color.hue)))
    return out


@dataclass(frozen=True, eq=False)
class Palette:
    """
    Iteration order is tie-break priority for the quantizer.
    Use Palette.from_colours(); an empty palette is a ConfigError.
    """

    colours: Tuple[Color, ...]
    lab: Lab = field(init=False, repr=False)
    rgb: np.ndarray = field(init=False, repr=False)  # (P, 3) float sRGB

    def __post_init__(self) -> None:
        colours = tuple(self.colours)
        if not colours:
            raise ConfigError("palette must contain at least one colour")
        for c in colours:
            if not isinstance(c, Color):
                raise TypeError(f"palette entries must be Color, got {type(c).__name__}")
        lab = np.array([c.to_lab() for c in colours], dtype=np.float64)
        rgb = np.array([c.to_rgb() for c in colours], dtype=np.float64)
        lab.setflags(write=False)
        rgb.setflags(write=False)
        object.__setattr__(self, "colours", colours)
        object.__setattr__(self, "lab", lab)
        object.__setattr__(self, "rgb", rgb)

    @classmethod
    def from_colours(cls, colours: Iterable[Color]) -> "Palette":
        return cls(tuple(colours))

    @classmethod
    def from_hex(cls, hex_list: Sequence[str]) -> "Palette":
        return cls(tuple(Color.from_hex(hx) for hx in hex_list))

    def __len__(self) -> int:
        return len(self.colours)

    def __iter__(self) -> Iterator[Color]:
        return iter(self.colours)

    def __getitem__(self, index: int) -> Color:
        return self.colours[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Palette):
            return NotImplemented
        return self.colours == other.colours

    def __hash__(self) -> int:
        return hash(self.colours)

    def hex_codes(self) -> List[str]:
        rgb8 = np.rint(self.rgb * 255.0).astype(int)
        return [rgb_to_hex((int(r), int(g), int(b))) for r, g, b in rgb8]

    def describe(self) -> List[Tuple[str, str]]:
        """(index, hex) pairs for config logging."""
        return [(f"#{i:03}", hx) for i, hx in enumerate(self.hex_codes())]


__all__ = ["Palette", "build_gradient_lch", "snap_to_gamut"]
