# imgtoy/diffusion/kernels.py
from __future__ import annotations

"""
Error-diffusion kernel presets.

A kernel lists (dx, dy, weight) taps relative to the current pixel. Every tap
points at a pixel later in raster order (dy > 0, or dy == 0 and dx > 0); on
serpentine right-to-left rows dx is mirrored.
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Tuple

from ..core_types import ConfigError

Tap = Tuple[int, int, float]


@dataclass(frozen=True)
class DiffusionKernel:
    name: str
    taps: Tuple[Tap, ...]
    serpentine: bool = False

    def __post_init__(self) -> None:
        if not self.taps:
            raise ConfigError(f"{self.name}: kernel needs at least one tap")
        for dx, dy, weight in self.taps:
            if dy < 0 or (dy == 0 and dx <= 0):
                raise ConfigError(
                    f"{self.name}: tap ({dx}, {dy}) does not point at an unvisited pixel"
                )
            if weight < 0:
                raise ConfigError(f"{self.name}: tap weights must be >= 0")

    @property
    def total_weight(self) -> float:
        return float(sum(w for _, _, w in self.taps))

    def with_serpentine(self, serpentine: bool = True) -> "DiffusionKernel":
        return replace(self, serpentine=bool(serpentine))

    def taps_for_row(self, reverse: bool) -> Tuple[Tap, ...]:
        if not reverse:
            return self.taps
        return tuple((-dx, dy, w) for dx, dy, w in self.taps)

    @classmethod
    def named(cls, name: str) -> "DiffusionKernel":
        """Look up a preset by name or alias (case-insensitive)."""
        key = ALIASES.get(name.strip().lower())
        if key is None:
            raise ConfigError(
                f"{name!r} is not a supported error-diffusion kernel. Known kernels: {kernel_names()}"
            )
        return PRESETS[key]


def _scaled(name: str, divisor: float, taps: List[Tuple[int, int, int]]) -> DiffusionKernel:
    return DiffusionKernel(name, tuple((dx, dy, w / divisor) for dx, dy, w in taps))


PRESETS: Dict[str, DiffusionKernel] = {
    k.name: k
    for k in (
        _scaled("floyd-steinberg", 16, [(1, 0, 7), (-1, 1, 3), (0, 1, 5), (1, 1, 1)]),
        _scaled(
            "jarvis-judice-ninke",
            48,
            [
                (1, 0, 7), (2, 0, 5),
                (-2, 1, 3), (-1, 1, 5), (0, 1, 7), (1, 1, 5), (2, 1, 3),
                (-2, 2, 1), (-1, 2, 3), (0, 2, 5), (1, 2, 3), (2, 2, 1),
            ],
        ),
        # weights sum to 6/8; the rest of the error is discarded
        _scaled(
            "atkinson",
            8,
            [(1, 0, 1), (2, 0, 1), (-1, 1, 1), (0, 1, 1), (1, 1, 1), (0, 2, 1)],
        ),
        _scaled(
            "burkes",
            32,
            [(1, 0, 8), (2, 0, 4), (-2, 1, 2), (-1, 1, 4), (0, 1, 8), (1, 1, 4), (2, 1, 2)],
        ),
        _scaled(
            "stucki",
            42,
            [
                (1, 0, 8), (2, 0, 4),
                (-2, 1, 2), (-1, 1, 4), (0, 1, 8), (1, 1, 4), (2, 1, 2),
                (-2, 2, 1), (-1, 2, 2), (0, 2, 4), (1, 2, 2), (2, 2, 1),
            ],
        ),
        _scaled(
            "sierra",
            32,
            [
                (1, 0, 5), (2, 0, 3),
                (-2, 1, 2), (-1, 1, 4), (0, 1, 5), (1, 1, 4), (2, 1, 2),
                (-1, 2, 2), (0, 2, 3), (1, 2, 2),
            ],
        ),
        _scaled(
            "sierra-two-row",
            16,
            [(1, 0, 4), (2, 0, 3), (-2, 1, 1), (-1, 1, 2), (0, 1, 3), (1, 1, 2), (2, 1, 1)],
        ),
        _scaled("sierra-lite", 4, [(1, 0, 2), (-1, 1, 1), (0, 1, 1)]),
    )
}

ALIASES: Dict[str, str] = {
    **{name: name for name in PRESETS},
    "floydsteinberg": "floyd-steinberg",
    "floyd_steinberg": "floyd-steinberg",
    "jarvisjudiceninke": "jarvis-judice-ninke",
    "jarvis_judice_ninke": "jarvis-judice-ninke",
    "sierra_two_row": "sierra-two-row",
    "sierra_lite": "sierra-lite",
}


def kernel_names() -> List[str]:
    return sorted(ALIASES)


__all__ = ["Tap", "DiffusionKernel", "PRESETS", "ALIASES", "kernel_names"]
