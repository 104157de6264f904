# imgtoy/colour_convert.py
from __future__ import annotations

"""
Colour conversions and metrics (sRGB, D65).

Exports:
  rgb_to_linear(srgb) / linear_to_rgb(linear)
  rgb_to_lab(rgb) / lab_to_rgb(lab)
  lab_to_lch(lab) / lch_to_lab(lch)
  lab_distance(lab1, lab2)
  rgb_to_lab_threaded(rgb, workers)

All array functions are vectorised over (..., 3) and return float64.
"""

from concurrent.futures import ThreadPoolExecutor

import numpy as np

from .core_types import Lab, Lch


# Linear RGB -> XYZ (D65) and its exact inverse
_RGB_TO_XYZ = np.array(
    [
        [0.4124564, 0.3575761, 0.1804375],
        [0.2126729, 0.7151522, 0.0721750],
        [0.0193339, 0.1191920, 0.9503041],
    ],
    dtype=np.float64,
)
_XYZ_TO_RGB = np.linalg.inv(_RGB_TO_XYZ)

# Reference white (D65)
_WHITE = np.array([0.95047, 1.00000, 1.08883], dtype=np.float64)

_E = 216.0 / 24389.0
_K = 24389.0 / 27.0


def _as_unit_float(rgb: np.ndarray) -> np.ndarray:
    arr = np.asarray(rgb)
    if arr.dtype == np.uint8:
        return arr.astype(np.float64) / 255.0
    return arr.astype(np.float64, copy=False)


# sRGB <-> linear


def rgb_to_linear(srgb: np.ndarray) -> np.ndarray:
    """
    Convert sRGB (non-linear 0..1) to linear RGB (0..1). Vectorised.
    Negative inputs keep their sign so out-of-gamut values survive a round trip.
    """
    s = np.asarray(srgb, dtype=np.float64)
    mag = np.abs(s)
    linear = np.where(mag <= 0.04045, mag / 12.92, ((mag + 0.055) / 1.055) ** 2.4)
    return np.copysign(linear, s)


def linear_to_rgb(linear: np.ndarray) -> np.ndarray:
    """Inverse of rgb_to_linear."""
    lin = np.asarray(linear, dtype=np.float64)
    mag = np.abs(lin)
    srgb = np.where(mag <= 0.0031308, mag * 12.92, 1.055 * mag ** (1.0 / 2.4) - 0.055)
    return np.copysign(srgb, lin)


# sRGB <-> Lab (D65)


def rgb_to_lab(rgb: np.ndarray) -> Lab:
    """
    sRGB to CIE Lab (D65).
    Accepts uint8 [0..255] or float [0..1]. Preserves shape (...,3).
    """
    linear = rgb_to_linear(_as_unit_float(rgb))
    xyz = linear @ _RGB_TO_XYZ.T
    t = xyz / _WHITE

    f = np.where(t > _E, np.cbrt(t), (_K * t + 16.0) / 116.0)
    fx, fy, fz = f[..., 0], f[..., 1], f[..., 2]

    out = np.empty(f.shape, dtype=np.float64)
    out[..., 0] = 116.0 * fy - 16.0
    out[..., 1] = 500.0 * (fx - fy)
    out[..., 2] = 200.0 * (fy - fz)
    return out


def lab_to_rgb(lab: np.ndarray, clip: bool = True) -> np.ndarray:
    """
    CIE Lab (D65) to sRGB floats.
    With clip=True the result is clamped into [0,1] (out-of-gamut colours clip);
    with clip=False the exact inverse of rgb_to_lab is returned.
    """
    lab_f = np.asarray(lab, dtype=np.float64)
    fy = (lab_f[..., 0] + 16.0) / 116.0
    fx = fy + lab_f[..., 1] / 500.0
    fz = fy - lab_f[..., 2] / 200.0
    f = np.stack([fx, fy, fz], axis=-1)

    cube = f**3
    t = np.where(cube > _E, cube, (116.0 * f - 16.0) / _K)
    xyz = t * _WHITE
    linear = xyz @ _XYZ_TO_RGB.T
    if clip:
        linear = np.clip(linear, 0.0, 1.0)
    srgb = linear_to_rgb(linear)
    return np.clip(srgb, 0.0, 1.0) if clip else srgb


# Lab <-> LCh


def lab_to_lch(lab: Lab) -> Lch:
    """
    Lab[...,3] to LCh[...,3] (degrees in [0,360)).
    Shape preserved.
    """
    lab_f = np.asarray(lab, dtype=np.float64)
    L = lab_f[..., 0]
    a = lab_f[..., 1]
    b = lab_f[..., 2]
    C = np.hypot(a, b)
    h = np.degrees(np.arctan2(b, a)) % 360.0
    return np.stack([L, C, h], axis=-1)


def lch_to_lab(lch: Lch) -> Lab:
    """LCh[...,3] (degrees) to Lab[...,3]."""
    lch_f = np.asarray(lch, dtype=np.float64)
    hue = np.radians(lch_f[..., 2])
    C = lch_f[..., 1]
    return np.stack([lch_f[..., 0], C * np.cos(hue), C * np.sin(hue)], axis=-1)


# Distances


def lab_distance(lab1: np.ndarray, lab2: np.ndarray) -> np.ndarray:
    """Euclidean distance in Lab (CIE76). Broadcasts over leading axes."""
    diff = np.asarray(lab1, dtype=np.float64) - np.asarray(lab2, dtype=np.float64)
    return np.sqrt(np.sum(diff * diff, axis=-1))


# Threaded helpers


def split_rows(height: int, parts: int) -> list[tuple[int, int]]:
    """Partition range [0, height) into ~parts contiguous [start, end) row spans."""
    parts = max(1, int(parts))
    step = max(1, (height + parts - 1) // parts)
    return [(i, min(i + step, height)) for i in range(0, height, step)]


def rgb_to_lab_threaded(rgb: np.ndarray, workers: int) -> Lab:
    """
    Threaded RGB->Lab conversion by splitting rows.

    Args:
      rgb: uint8 or float array [H,W,3]
      workers: number of threads; if <=1 or H<256, runs single-threaded
    Returns:
      Lab float64 array [H,W,3]
    """
    height = int(rgb.shape[0])
    if workers <= 1 or height < 256:
        return rgb_to_lab(rgb)

    chunks = split_rows(height, workers)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(rgb_to_lab, rgb[s:e]) for s, e in chunks]
        parts = [f.result() for f in futures]
    return np.vstack(parts)


__all__ = [
    "rgb_to_linear",
    "linear_to_rgb",
    "rgb_to_lab",
    "lab_to_rgb",
    "lab_to_lch",
    "lch_to_lab",
    "lab_distance",
    "split_rows",
    "rgb_to_lab_threaded",
]
