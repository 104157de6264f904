# imgtoy/core_types.py
from __future__ import annotations

"""
Core type aliases, the configuration error type, and lightweight helpers.
"""

from typing import Tuple

import numpy as np
from numpy.typing import NDArray

# Basic aliases

RGBTuple = Tuple[int, int, int]
RGBFloat = Tuple[float, float, float]
HexStr = str

U8Image = NDArray[np.uint8]  # (H, W, 3)
U8Mask = NDArray[np.uint8]  # (H, W)
FloatImage = NDArray[np.float64]  # (H, W, 3) sRGB in [0, 1]
Lab = NDArray[np.float64]  # (..., 3) CIE Lab
Lch = NDArray[np.float64]  # (..., 3) CIE LCh(ab)
Field = NDArray[np.float64]  # (H, W) thresholds in [0, 1)
IndexMap = NDArray[np.intp]  # (H, W) palette indices

# Largest float below 1.0; thresholds are clamped to [0, ONE_BELOW].
ONE_BELOW = float(np.nextafter(1.0, 0.0))


# Errors


class ConfigError(ValueError):
    """Invalid palette, strategy, kernel or effect configuration."""


# Small helpers


def clamp_threshold(values: np.ndarray) -> np.ndarray:
    """Clamp threshold values into [0, 1)."""
    return np.clip(values, 0.0, ONE_BELOW)


def rgb_to_hex(rgb: RGBTuple) -> HexStr:
    """RGB tuple to lowercase hex string '#rrggbb'."""
    return f"#{rgb[0]:02x}{rgb[1]:02x}{rgb[2]:02x}"


def hex_to_rgb(hex_str: str) -> RGBTuple:
    """Parse '#rgb', '#rrggbb' or bare 'rrggbb' (case-insensitive) into an RGB tuple."""
    s = hex_str.strip().lower()
    if not s.startswith("#"):
        s = f"#{s}"
    if len(s) == 4:
        r, g, b = s[1], s[2], s[3]
        s = f"#{r}{r}{g}{g}{b}{b}"
    if len(s) != 7:
        raise ValueError(f"hex must be 'rrggbb' or '#rrggbb', got {hex_str!r}")
    try:
        return (int(s[1:3], 16), int(s[3:5], 16), int(s[5:7], 16))
    except ValueError:
        raise ValueError(f"{hex_str!r} is not a valid hex colour") from None


def assert_u8_image_rgb(image: np.ndarray) -> U8Image:
    """Validate a uint8 (H,W,3 or 4) image and return it typed as U8Image."""
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[-1] < 3:
        raise TypeError("expected uint8 (H,W,3/4) image")
    return image  # type: ignore[return-value]


__all__ = [
    # aliases / types
    "RGBTuple",
    "RGBFloat",
    "HexStr",
    "U8Image",
    "U8Mask",
    "FloatImage",
    "Lab",
    "Lch",
    "Field",
    "IndexMap",
    "ONE_BELOW",
    # errors
    "ConfigError",
    # helpers
    "clamp_threshold",
    "rgb_to_hex",
    "hex_to_rgb",
    "assert_u8_image_rgb",
]
