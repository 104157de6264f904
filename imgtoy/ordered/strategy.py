# imgtoy/ordered/strategy.py
from __future__ import annotations

"""
Threshold-field strategies.

A Strategy maps integer pixel coordinates to a threshold in [0, 1). Primitive
generators are TileStrategy instances sampling an N x N tile periodically;
modifiers are immutable wrappers holding their inner strategy. Nothing here
carries mutable state, so evaluating the same coordinates always returns the
same value.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple, Union

import numpy as np

from ..core_types import ConfigError, Field, clamp_threshold
from .properties import CheckerConfig, CheckerFrom, CheckerIter, MirrorAxis, Rotation


def _int_coords(values: Any) -> np.ndarray:
    return np.asarray(values, dtype=np.int64)


def _joint_period(period: Optional[int], other: Optional[int]) -> Optional[int]:
    if period is None or other is None:
        return None
    return math.lcm(int(period), int(other))


class Strategy(ABC):
    """Base class: subclasses implement sample() and describe()."""

    @property
    def period(self) -> Optional[int]:
        """Tile size N if evaluate(x, y) == evaluate(x + N, y) == evaluate(x, y + N)."""
        return None

    @property
    def tile_size(self) -> Optional[int]:
        """
        Size of the innermost generator tile. Wrappers keep reporting it even
        when their own field is no longer periodic (fixed-source checker).
        """
        return self.period

    @abstractmethod
    def sample(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """Vectorised evaluate over broadcastable integer coordinate arrays."""

    @abstractmethod
    def describe(self) -> str:
        """One-line description used in run logs."""

    def evaluate(self, x: int, y: int) -> float:
        return float(self.sample(_int_coords([x]), _int_coords([y]))[0])

    def field(self, width: int, height: int) -> Field:
        """Threshold field for a width x height surface, shape (height, width)."""
        ys, xs = np.mgrid[0:height, 0:width]
        return self.sample(xs.astype(np.int64), ys.astype(np.int64))

    # Modifiers

    def invert(self) -> "Strategy":
        return Invert(self)

    def mirror(
        self, axis: Union[MirrorAxis, str], flip: bool = False, thorough: bool = False
    ) -> "Strategy":
        if isinstance(axis, str):
            axis = MirrorAxis.parse(axis)
        return Mirror(self, axis, flip, thorough)

    def blur(self, radius: int) -> "Strategy":
        if int(radius) == 0:
            return self
        return Blur(self, int(radius))

    def exponentiate(self, exponent: float) -> "Strategy":
        return Exponentiate(self, float(exponent))

    def rotate(self, turns: Union[Rotation, str, int]) -> "Strategy":
        if isinstance(turns, str):
            turns = Rotation.parse(turns)
        elif not isinstance(turns, Rotation):
            turns = Rotation.from_turns(turns)
        if turns is Rotation.NONE:
            return self
        return Rotate(self, turns)

    def checker(self, cfg: CheckerConfig) -> "Strategy":
        return Checker(self, cfg)

    def __str__(self) -> str:
        return self.describe()


# Primitive


@dataclass(frozen=True, eq=False)
class TileStrategy(Strategy):
    """Periodic N x N threshold tile."""

    name: str
    tile: np.ndarray
    params: Tuple[Tuple[str, Any], ...] = ()

    def __post_init__(self) -> None:
        tile = np.asarray(self.tile, dtype=np.float64)
        if tile.ndim != 2 or tile.shape[0] != tile.shape[1] or tile.shape[0] < 1:
            raise ConfigError(f"{self.name}: tile must be a non-empty square, got {tile.shape}")
        tile = clamp_threshold(tile)
        tile.setflags(write=False)
        object.__setattr__(self, "tile", tile)

    @property
    def period(self) -> int:
        return int(self.tile.shape[0])

    @property
    def tile_size(self) -> int:
        return self.period

    def sample(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        n = self.period
        return self.tile[np.mod(ys, n), np.mod(xs, n)]

    def describe(self) -> str:
        args = ", ".join(f"{k}={v}" for k, v in self.params)
        return f"{self.name}({args})"


# Modifiers


@dataclass(frozen=True, eq=False)
class Invert(Strategy):
    """1 - tau. Nested inverts collapse into one wrapper; an even stack is a pass-through."""

    inner: Strategy
    odd: bool = True

    def __post_init__(self) -> None:
        inner, odd = self.inner, bool(self.odd)
        while isinstance(inner, Invert):
            inner, odd = inner.inner, odd != inner.odd
        object.__setattr__(self, "inner", inner)
        object.__setattr__(self, "odd", odd)

    @property
    def period(self) -> Optional[int]:
        return self.inner.period

    @property
    def tile_size(self) -> Optional[int]:
        return self.inner.tile_size

    def sample(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        values = self.inner.sample(xs, ys)
        return clamp_threshold(1.0 - values) if self.odd else values

    def invert(self) -> Strategy:
        return self.inner if self.odd else Invert(self.inner)

    def describe(self) -> str:
        if not self.odd:
            return self.inner.describe()
        return f"{self.inner.describe()} | invert"


@dataclass(frozen=True, eq=False)
class Mirror(Strategy):
    """
    Reflect one half of each tile onto the other across axis.

    The source half is the top / left / upper-right triangle; flip uses the
    other half as source. thorough also reflects the value on the mirrored half.
    """

    inner: Strategy
    axis: MirrorAxis
    flip: bool = False
    thorough: bool = False

    def __post_init__(self) -> None:
        if self.inner.tile_size is None:
            raise ConfigError("mirror needs an inner strategy with a tile size")

    @property
    def period(self) -> Optional[int]:
        return _joint_period(self.inner.period, self.inner.tile_size)

    @property
    def tile_size(self) -> Optional[int]:
        return self.inner.tile_size

    def sample(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        n = int(self.inner.tile_size)  # type: ignore[arg-type]
        xs, ys = np.broadcast_arrays(_int_coords(xs), _int_coords(ys))
        lx = np.mod(xs, n)
        ly = np.mod(ys, n)
        base_x = xs - lx
        base_y = ys - ly

        if self.axis is MirrorAxis.HORIZONTAL:
            mirrored = 2 * ly < n - 1 if self.flip else 2 * ly > n - 1
            nx, ny = lx, np.where(mirrored, n - 1 - ly, ly)
        elif self.axis is MirrorAxis.VERTICAL:
            mirrored = 2 * lx < n - 1 if self.flip else 2 * lx > n - 1
            nx, ny = np.where(mirrored, n - 1 - lx, lx), ly
        elif self.axis is MirrorAxis.DOWNRIGHT:
            mirrored = ly < lx if self.flip else ly > lx
            nx, ny = np.where(mirrored, ly, lx), np.where(mirrored, lx, ly)
        else:
            s = lx + ly
            mirrored = s < n - 1 if self.flip else s > n - 1
            nx = np.where(mirrored, n - 1 - ly, lx)
            ny = np.where(mirrored, n - 1 - lx, ly)

        values = self.inner.sample(base_x + nx, base_y + ny)
        if self.thorough:
            values = np.where(mirrored, clamp_threshold(1.0 - values), values)
        return values

    def describe(self) -> str:
        flags = f"flip={'on' if self.flip else 'off'}, thorough={'on' if self.thorough else 'off'}"
        return f"{self.inner.describe()} | mirror({self.axis.value}, {flags})"


@dataclass(frozen=True, eq=False)
class Blur(Strategy):
    """Mean of the inner field over a (2r+1)^2 square neighbourhood."""

    inner: Strategy
    radius: int

    def __post_init__(self) -> None:
        if int(self.radius) < 1:
            raise ConfigError(f"blur radius must be >= 1, got {self.radius}")

    @property
    def period(self) -> Optional[int]:
        return self.inner.period

    @property
    def tile_size(self) -> Optional[int]:
        return self.inner.tile_size

    def sample(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        xs, ys = np.broadcast_arrays(_int_coords(xs), _int_coords(ys))
        r = self.radius
        total = np.zeros(xs.shape, dtype=np.float64)
        for dy in range(-r, r + 1):
            for dx in range(-r, r + 1):
                total += self.inner.sample(xs + dx, ys + dy)
        return clamp_threshold(total / float((2 * r + 1) ** 2))

    def describe(self) -> str:
        return f"{self.inner.describe()} | blur({self.radius})"


@dataclass(frozen=True, eq=False)
class Exponentiate(Strategy):
    inner: Strategy
    exponent: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.exponent) and self.exponent > 0.0):
            raise ConfigError(f"exponent must be a positive number, got {self.exponent}")

    @property
    def period(self) -> Optional[int]:
        return self.inner.period

    @property
    def tile_size(self) -> Optional[int]:
        return self.inner.tile_size

    def sample(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        return clamp_threshold(self.inner.sample(xs, ys) ** self.exponent)

    def describe(self) -> str:
        return f"{self.inner.describe()} | exponentiate({self.exponent:g})"


@dataclass(frozen=True, eq=False)
class Rotate(Strategy):
    """Clockwise quarter-turn coordinate remap."""

    inner: Strategy
    rotation: Rotation

    @property
    def period(self) -> Optional[int]:
        return self.inner.period

    @property
    def tile_size(self) -> Optional[int]:
        return self.inner.tile_size

    def sample(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        xs = _int_coords(xs)
        ys = _int_coords(ys)
        if self.rotation is Rotation.RIGHT:
            return self.inner.sample(ys, -1 - xs)
        if self.rotation is Rotation.HALF:
            return self.inner.sample(-1 - xs, -1 - ys)
        if self.rotation is Rotation.LEFT:
            return self.inner.sample(-1 - ys, xs)
        return self.inner.sample(xs, ys)

    def describe(self) -> str:
        return f"{self.inner.describe()} | rotate({self.rotation.value})"


@dataclass(frozen=True, eq=False)
class Checker(Strategy):
    """
    Parity gate: even cells pass the inner value through, odd cells get the
    alternate rule from cfg (see CheckerIter / CheckerFrom).
    """

    inner: Strategy
    cfg: CheckerConfig
    _center: Optional[int] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if isinstance(self.cfg, CheckerFrom) and self.cfg.source == "center":
            if self.inner.tile_size is None:
                raise ConfigError("checker source 'center' needs an inner strategy with a tile size")
            object.__setattr__(self, "_center", int(self.inner.tile_size) // 2)

    @property
    def period(self) -> Optional[int]:
        if isinstance(self.cfg, CheckerIter):
            return _joint_period(self.inner.period, 2 * int(self.cfg.size))
        if self._center is not None:
            return _joint_period(self.inner.period, self.inner.tile_size)
        return None

    @property
    def tile_size(self) -> Optional[int]:
        return self.inner.tile_size

    def sample(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        xs, ys = np.broadcast_arrays(_int_coords(xs), _int_coords(ys))
        values = self.inner.sample(xs, ys)
        cfg = self.cfg

        if isinstance(cfg, CheckerIter):
            s = int(cfg.size)
            odd = (np.floor_divide(xs, s) + np.floor_divide(ys, s)) % 2 == 1
            return np.where(odd, clamp_threshold(1.0 - values), values)

        if self._center is not None:
            n = int(self.inner.tile_size)  # type: ignore[arg-type]
            px, py = np.mod(xs, n), np.mod(ys, n)
            sx = sy = self._center
        else:
            px, py = xs, ys
            sy, sx = int(cfg.source[0]), int(cfg.source[1])  # type: ignore[index]

        ring = np.maximum(np.abs(px - sx), np.abs(py - sy))
        if cfg.modulo is not None:
            ring = np.mod(ring, int(cfg.modulo))
        odd = ring % 2 == 1
        if cfg.falloff == "linear":
            alternate = clamp_threshold(1.0 - values)
        else:
            alternate = clamp_threshold(values * np.power(float(cfg.factor), ring))
        return np.where(odd, alternate, values)

    def describe(self) -> str:
        cfg = self.cfg
        if isinstance(cfg, CheckerIter):
            detail = f"iter({cfg.size})"
        else:
            detail = f"from({cfg.source}, {cfg.falloff}"
            if cfg.falloff == "exponential":
                detail += f" {cfg.factor:g}"
            detail += f", modulo={cfg.modulo})"
        return f"{self.inner.describe()} | checker({detail})"


__all__ = [
    "Strategy",
    "TileStrategy",
    "Invert",
    "Mirror",
    "Blur",
    "Exponentiate",
    "Rotate",
    "Checker",
]
