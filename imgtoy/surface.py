# imgtoy/surface.py
from __future__ import annotations

"""
Surface: the immutable unit of work passed between effects.

A surface is an (H, W, 3) float64 sRGB grid in [0, 1] plus an optional
uint8 alpha plane that effects carry through untouched.
"""

from dataclasses import dataclass
from functools import cached_property
from typing import Optional, Sequence

import numpy as np

from .colour import Color
from .core_types import FloatImage, Lab, U8Image, U8Mask, assert_u8_image_rgb
from .colour_convert import lab_to_rgb, rgb_to_lab, rgb_to_lab_threaded


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class Surface:
    rgb: FloatImage
    alpha: Optional[U8Mask] = None

    def __post_init__(self) -> None:
        rgb = np.asarray(self.rgb)
        if rgb.ndim != 3 or rgb.shape[-1] != 3:
            raise TypeError(f"expected (H,W,3) rgb array, got shape {rgb.shape}")
        if rgb.shape[0] < 1 or rgb.shape[1] < 1:
            raise ValueError("surface must be at least 1x1")
        rgb = np.clip(rgb.astype(np.float64), 0.0, 1.0)
        object.__setattr__(self, "rgb", _frozen(rgb))

        if self.alpha is not None:
            alpha = np.asarray(self.alpha)
            if alpha.dtype != np.uint8 or alpha.shape != rgb.shape[:2]:
                raise TypeError("alpha must be a uint8 (H,W) plane matching rgb")
            object.__setattr__(self, "alpha", _frozen(alpha.copy()))

    # Constructors

    @classmethod
    def from_u8(cls, image: U8Image) -> "Surface":
        """From a uint8 (H,W,3) or (H,W,4) array; a fourth channel becomes alpha."""
        image = assert_u8_image_rgb(np.asarray(image))
        alpha = image[..., 3].copy() if image.shape[-1] == 4 else None
        return cls(image[..., :3].astype(np.float64) / 255.0, alpha)

    @classmethod
    def from_lab(cls, lab: Lab, alpha: Optional[U8Mask] = None) -> "Surface":
        return cls(lab_to_rgb(lab, clip=True), alpha)

    @classmethod
    def from_colors(cls, rows: Sequence[Sequence[Color]]) -> "Surface":
        """Build from a row-major grid of Colors."""
        rgb = np.array([[c.to_rgb() for c in row] for row in rows], dtype=np.float64)
        return cls(rgb)

    @classmethod
    def filled(cls, width: int, height: int, color: Color) -> "Surface":
        rgb = np.broadcast_to(np.asarray(color.to_rgb()), (height, width, 3))
        return cls(np.array(rgb))

    # Views

    @property
    def height(self) -> int:
        return int(self.rgb.shape[0])

    @property
    def width(self) -> int:
        return int(self.rgb.shape[1])

    @cached_property
    def _lab(self) -> Lab:
        return _frozen(rgb_to_lab(self.rgb))

    def lab(self, workers: int = 1) -> Lab:
        """Lab view of the surface (cached for the single-threaded path)."""
        if workers > 1 and "_lab" not in self.__dict__:
            return _frozen(rgb_to_lab_threaded(self.rgb, workers))
        return self._lab

    def color_at(self, x: int, y: int) -> Color:
        r, g, b = self.rgb[y, x].tolist()
        return Color.from_rgb(r, g, b)

    def with_rgb(self, rgb: FloatImage) -> "Surface":
        """New surface with replaced colours and the same alpha."""
        return Surface(rgb, self.alpha)

    def with_lab(self, lab: Lab) -> "Surface":
        return Surface.from_lab(lab, self.alpha)

    def to_u8(self) -> U8Image:
        return np.rint(self.rgb * 255.0).astype(np.uint8)

    def to_rgba_u8(self) -> U8Image:
        out = np.empty((self.height, self.width, 4), dtype=np.uint8)
        out[..., :3] = self.to_u8()
        out[..., 3] = 255 if self.alpha is None else self.alpha
        return out

    # Equality compares pixel data, not identity.

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Surface):
            return NotImplemented
        if self.rgb.shape != other.rgb.shape or not np.array_equal(self.rgb, other.rgb):
            return False
        if self.alpha is None or other.alpha is None:
            return self.alpha is None and other.alpha is None
        return bool(np.array_equal(self.alpha, other.alpha))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        alpha = "alpha" if self.alpha is not None else "opaque"
        return f"Surface({self.width}x{self.height}, {alpha})"


__all__ = ["Surface"]
