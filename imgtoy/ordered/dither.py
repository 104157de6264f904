# imgtoy/ordered/dither.py
from __future__ import annotations

"""
Ordered dithering: per pixel, pick between the two nearest palette entries
by comparing their mix ratio against the strategy's threshold.
"""

from dataclasses import dataclass
from typing import Any, List, Tuple

import numpy as np

from ..palette import Palette
from ..quantize import nearest_pair_indices
from ..surface import Surface
from .strategy import Strategy


def ordered_indices(surface: Surface, palette: Palette, strategy: Strategy, workers: int = 1) -> np.ndarray:
    """
    Palette index per pixel, shape (H, W).

    (A, B, t) = nearest pair of the pixel colour; tau = strategy at (x, y);
    A if t < tau else B. Pixels are independent, so this is fully vectorised.
    """
    idx_a, idx_b, t = nearest_pair_indices(surface.lab(workers), palette)
    tau = strategy.field(surface.width, surface.height)
    return np.where(t < tau, idx_a, idx_b)


@dataclass(frozen=True)
class OrderedDither:
    """Effect: ordered dithering of a surface to palette with strategy."""

    palette: Palette
    strategy: Strategy
    workers: int = 1

    name = "ordered"

    def apply(self, surface: Surface) -> Surface:
        idx = ordered_indices(surface, self.palette, self.strategy, self.workers)
        return surface.with_rgb(self.palette.rgb[idx])

    def describe(self) -> List[Tuple[str, Any]]:
        return [
            ("Strategy", self.strategy.describe()),
            ("Colours", len(self.palette)),
        ]


__all__ = ["ordered_indices", "OrderedDither"]
