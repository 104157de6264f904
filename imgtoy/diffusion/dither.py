# imgtoy/diffusion/dither.py
from __future__ import annotations

"""
Sequential error diffusion in Lab.

Each pixel's choice depends on every earlier pixel in scan order, so a single
surface is processed by one loop; independent surfaces can run in parallel.
"""

from dataclasses import dataclass
from typing import Any, List, NamedTuple, Tuple

import numpy as np

from ..core_types import IndexMap, Lab
from ..palette import Palette
from ..surface import Surface
from .kernels import DiffusionKernel


class DiffusionResult(NamedTuple):
    indices: IndexMap  # (H, W) palette index per pixel
    pending: Lab  # (H, W, 3) error each pixel received before it was quantized


def diffuse(lab: Lab, palette: Palette, kernel: DiffusionKernel) -> DiffusionResult:
    """
    Quantize lab[H, W, 3] to palette, pushing each residual through kernel.

    Per pixel: combined = source + pending; q = nearest(combined);
    residual = combined - q; every tap inside the surface receives
    weight * residual. Taps landing outside are dropped, not renormalised.
    """
    height, width = int(lab.shape[0]), int(lab.shape[1])
    pal_lab = palette.lab
    pending = np.zeros((height, width, 3), dtype=np.float64)
    indices = np.zeros((height, width), dtype=np.intp)

    for y in range(height):
        reverse = kernel.serpentine and (y % 2) == 1
        xs = range(width - 1, -1, -1) if reverse else range(width)
        taps = kernel.taps_for_row(reverse)
        for x in xs:
            combined = lab[y, x] + pending[y, x]
            diff = pal_lab - combined
            j = int(np.argmin(np.sum(diff * diff, axis=1)))
            indices[y, x] = j

            residual = combined - pal_lab[j]
            for dx, dy, weight in taps:
                nx, ny = x + dx, y + dy
                if 0 <= nx < width and ny < height:
                    pending[ny, nx] += weight * residual

    return DiffusionResult(indices, pending)


@dataclass(frozen=True)
class ErrorDiffusion:
    """Effect: error-diffusion dithering of a surface to palette."""

    palette: Palette
    kernel: DiffusionKernel

    name = "error-diffusion"

    def apply(self, surface: Surface) -> Surface:
        result = diffuse(surface.lab(), self.palette, self.kernel)
        return surface.with_rgb(self.palette.rgb[result.indices])

    def describe(self) -> List[Tuple[str, Any]]:
        return [
            ("Kernel", self.kernel.name),
            ("Serpentine", self.kernel.serpentine),
            ("Colours", len(self.palette)),
        ]


__all__ = ["DiffusionResult", "diffuse", "ErrorDiffusion"]
