# imgtoy/quantize.py
from __future__ import annotations

"""
Palette quantizer: nearest and two-nearest palette lookups.

Distances are Euclidean in Lab, i.e. colour.distance. Ties go to the earliest
palette index in every function here, scalar or vectorised.
"""

from typing import Tuple

import numpy as np

from .colour import Color
from .core_types import Lab
from .palette import Palette

# Rows per distance block; peak scratch is about CHUNK_ROWS x len(palette) x 3 floats.
CHUNK_ROWS = 32_768


def _check_chunk(chunk: int) -> int:
    chunk = int(chunk)
    if chunk < 1:
        raise ValueError(f"chunk must be >= 1, got {chunk}")
    return chunk


def _squared_distances(lab_rows: Lab, pal_lab: Lab) -> np.ndarray:
    """(N, P) squared Lab distances."""
    diff = pal_lab[None, :, :] - lab_rows[:, None, :]
    return np.sum(diff * diff, axis=2)


def nearest_indices(lab: Lab, palette: Palette, chunk: int = CHUNK_ROWS) -> np.ndarray:
    """Index of the nearest palette entry for every Lab row in lab[..., 3]."""
    chunk = _check_chunk(chunk)
    lab_f = np.asarray(lab, dtype=np.float64)
    rows = lab_f.reshape(-1, 3)
    idx = np.empty(rows.shape[0], dtype=np.intp)
    for i in range(0, rows.shape[0], chunk):
        # argmin returns the first minimum
        idx[i : i + chunk] = np.argmin(_squared_distances(rows[i : i + chunk], palette.lab), axis=1)
    return idx.reshape(lab_f.shape[:-1])


def nearest_pair_indices(
    lab: Lab, palette: Palette, chunk: int = CHUNK_ROWS
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Vectorised nearest_pair over lab[..., 3].

    Returns (index_a, index_b, t) with the shape of lab[..., 0]. A is the nearest
    entry, B the second nearest, t in [0,1] the position of the colour projected
    onto the A -> B segment in Lab.
    """
    chunk = _check_chunk(chunk)
    lab_f = np.asarray(lab, dtype=np.float64)
    rows = lab_f.reshape(-1, 3)
    shape = lab_f.shape[:-1]

    if len(palette) == 1:
        zeros = np.zeros(rows.shape[0], dtype=np.intp)
        return zeros.reshape(shape), zeros.reshape(shape), np.zeros(shape)

    idx_a = np.empty(rows.shape[0], dtype=np.intp)
    idx_b = np.empty(rows.shape[0], dtype=np.intp)
    for i in range(0, rows.shape[0], chunk):
        d2 = _squared_distances(rows[i : i + chunk], palette.lab)
        first = np.argmin(d2, axis=1)
        # masking the winner makes the next argmin the runner-up, earliest index on ties
        d2[np.arange(first.shape[0]), first] = np.inf
        idx_a[i : i + chunk] = first
        idx_b[i : i + chunk] = np.argmin(d2, axis=1)

    a = palette.lab[idx_a]
    b = palette.lab[idx_b]
    axis = b - a
    denom = np.sum(axis * axis, axis=1)
    proj = np.sum((rows - a) * axis, axis=1)
    with np.errstate(divide="ignore", invalid="ignore"):
        t = np.where(denom > 0.0, proj / denom, 0.0)
    t = np.clip(t, 0.0, 1.0)
    return idx_a.reshape(shape), idx_b.reshape(shape), t.reshape(shape)


def nearest(color: Color, palette: Palette) -> Color:
    """Minimal-distance palette entry; earliest index wins ties."""
    idx = nearest_indices(color.to_lab()[None, :], palette)
    return palette[int(idx[0])]


def nearest_pair(color: Color, palette: Palette) -> Tuple[Color, Color, float]:
    """
    The two closest palette entries and the mix ratio t between them.
    A single-entry palette yields (A, A, 0.0).
    """
    idx_a, idx_b, t = nearest_pair_indices(color.to_lab()[None, :], palette)
    return palette[int(idx_a[0])], palette[int(idx_b[0])], float(t[0])


__all__ = ["CHUNK_ROWS", "nearest", "nearest_pair", "nearest_indices", "nearest_pair_indices"]
