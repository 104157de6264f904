# imgtoy/ordered/__init__.py
"""
Ordered dithering API.

Provides:
  Strategy / TileStrategy : threshold fields, evaluate(x, y) -> [0, 1)
  modifiers               : .invert() .mirror() .blur() .exponentiate()
                            .rotate() .checker() on any Strategy
  GENERATORS              : named generator registry, build_generator(name, **params)
  OrderedDither           : Effect applying a Strategy against a Palette
"""

from .properties import (
    CheckerConfig,
    CheckerFrom,
    CheckerIter,
    DiagonalDirection,
    Increase,
    MirrorAxis,
    Orientation,
    Rotation,
    Wrapping,
)
from .strategy import Strategy, TileStrategy
from .generators import GENERATORS, build_generator, generator_names
from .dither import OrderedDither, ordered_indices

__all__ = [
    "CheckerConfig",
    "CheckerFrom",
    "CheckerIter",
    "DiagonalDirection",
    "Increase",
    "MirrorAxis",
    "Orientation",
    "Rotation",
    "Wrapping",
    "Strategy",
    "TileStrategy",
    "GENERATORS",
    "build_generator",
    "generator_names",
    "OrderedDither",
    "ordered_indices",
]
