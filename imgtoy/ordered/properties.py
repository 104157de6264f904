# imgtoy/ordered/properties.py
from __future__ import annotations

"""
Small value types parameterising generators and modifiers.
Enum values are the names used in configuration files.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from ..core_types import ConfigError


class _Named(Enum):
    @classmethod
    def parse(cls, name: str):
        for member in cls:
            if member.value == name:
                return member
        allowed = [m.value for m in cls]
        raise ConfigError(f"{name!r} is not a valid {cls.__name__}; allowed: {allowed}")


class Orientation(_Named):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class DiagonalDirection(_Named):
    DOWN_RIGHT = "down-right"
    UP_RIGHT = "up-right"


class Wrapping(_Named):
    NONE = "none"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    ALL = "all"

    @property
    def wraps_x(self) -> bool:
        return self in (Wrapping.HORIZONTAL, Wrapping.ALL)

    @property
    def wraps_y(self) -> bool:
        return self in (Wrapping.VERTICAL, Wrapping.ALL)


class MirrorAxis(_Named):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    DOWNRIGHT = "downright"
    UPRIGHT = "upright"


class Rotation(_Named):
    NONE = "none"
    RIGHT = "right"
    HALF = "half"
    LEFT = "left"

    @property
    def turns(self) -> int:
        """Clockwise quarter turns."""
        return {"none": 0, "right": 1, "half": 2, "left": 3}[self.value]

    @classmethod
    def from_turns(cls, turns: int) -> "Rotation":
        return (cls.NONE, cls.RIGHT, cls.HALF, cls.LEFT)[int(turns) % 4]


@dataclass(frozen=True)
class Increase:
    """Diagonal increase law: 'linear' or 'exponential' with an integer factor."""

    kind: str
    factor: int

    def __post_init__(self) -> None:
        if self.kind not in ("linear", "exponential"):
            raise ConfigError(f"increase kind must be linear or exponential, got {self.kind!r}")
        if not 1 <= int(self.factor) <= 255:
            raise ConfigError(f"increase factor must be in 1..255, got {self.factor}")


# Checker configuration


@dataclass(frozen=True)
class CheckerIter:
    """Checkerboard of size x size cells; odd cells use the inverted value."""

    size: int

    def __post_init__(self) -> None:
        if int(self.size) < 1:
            raise ConfigError(f"checker size must be >= 1, got {self.size}")


@dataclass(frozen=True)
class CheckerFrom:
    """
    Square rings around a source point. Odd rings are reinterpreted:
    linear falloff inverts the value, exponential falloff scales it by
    factor ** ring. modulo, when set, wraps the ring index first.

    source is "center" (middle of the inner tile) or a fixed (y, x) point.
    """

    source: Union[str, Tuple[int, int]] = "center"
    falloff: str = "linear"
    factor: float = 0.95
    modulo: Optional[int] = None

    def __post_init__(self) -> None:
        if isinstance(self.source, str) and self.source != "center":
            raise ConfigError(f"checker source must be 'center' or (y, x), got {self.source!r}")
        if self.falloff not in ("linear", "exponential"):
            raise ConfigError(f"checker falloff must be linear or exponential, got {self.falloff!r}")
        if self.falloff == "exponential" and not 0.0 < float(self.factor) <= 1.0:
            raise ConfigError(f"checker factor must be in (0, 1], got {self.factor}")
        if self.modulo is not None and int(self.modulo) < 1:
            raise ConfigError(f"checker modulo must be >= 1, got {self.modulo}")


CheckerConfig = Union[CheckerIter, CheckerFrom]


__all__ = [
    "Orientation",
    "DiagonalDirection",
    "Wrapping",
    "MirrorAxis",
    "Rotation",
    "Increase",
    "CheckerIter",
    "CheckerFrom",
    "CheckerConfig",
]
