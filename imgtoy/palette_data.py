# imgtoy/palette_data.py
from __future__ import annotations

"""
Named palette definitions and builders.

Exports:
  NAMED_COLOURS: dict[str, str]          # name -> "#rrggbb"
  PALETTES: dict[str, list[entry]]       # entry is a colour name or (name, shades)
  palette_names() -> list[str]
  build_named_palette(name) -> Palette
"""

from typing import Dict, List, Tuple, Union

from .colour import Color
from .core_types import ConfigError
from .palette import Palette, build_gradient_lch

NAMED_COLOURS: Dict[str, str] = {
    "black": "#000000",
    "white": "#ffffff",
    "red": "#ff0000",
    "green": "#00ff00",
    "blue": "#0000ff",
    "cyan": "#00ffff",
    "magenta": "#ff00ff",
    "yellow": "#ffff00",
    "pink": "#ffc0cb",
    "rose": "#ff007f",
    "gold": "#ffd700",
    "purple": "#800080",
    "orange": "#ffa500",
    "aquamarine": "#7fffd4",
    "dark-red": "#660000",
}

Entry = Union[str, Tuple[str, int]]

PALETTES: Dict[str, List[Entry]] = {
    "pastel": [("cyan", 10), ("pink", 10), "black", "white"],
    "nightlife": [
        ("blue", 10),
        ("cyan", 10),
        ("pink", 10),
        ("rose", 10),
        ("yellow", 10),
        ("gold", 10),
        "black",
        "white",
    ],
    "crisp-nightlife": ["cyan", "pink", "yellow", "gold", "blue", "purple", "white", "black"],
    "carrot": [("orange", 10), ("green", 10), "black", "white"],
    "nb": [("gold", 10), ("purple", 30), "black", "white"],
    "nblofi": ["black", "white", "gold", "yellow", "purple"],
    "sunsky": [("orange", 10), ("blue", 10), "black", "white"],
    "depth": [("blue", 10), ("purple", 10), "black", "white"],
    "refresh": [("blue", 10), ("cyan", 10), ("aquamarine", 10), ("green", 10), "black", "white"],
    "nebula": [("red", 10), ("rose", 10), ("purple", 10), "black", "white"],
    "dragon": [("red", 40), ("dark-red", 10)],
    "minty": [("green", 40), ("gold", 4), "black", "white"],
    "corru": ["black", "white", "cyan", "magenta", "yellow"],
    "zx": ["black", "white", "cyan", "magenta"],
    "mono": ["black", "white"],
    "orangurple": ["black", "white", "purple", "orange"],
    "calmfire": ["white", "rose", "orange", "black"],
    "rcgmby": ["red", "cyan", "green", "magenta", "blue", "yellow"],
    "eight-bit": ["red", "blue", "green", "white", "black"],
    "deep-crushed-ocean": ["black", "purple", "blue", "cyan", "white"],
    "falling-bitsun": ["black", "purple", "red", "orange", "gold", "white"],
    "pixeleaf": [("green", 4), "black", "white"],
}


def palette_names() -> List[str]:
    return sorted(PALETTES)


def _entry_colours(entry: Entry) -> List[Color]:
    name, shades = (entry, None) if isinstance(entry, str) else entry
    colour = Color.from_hex(NAMED_COLOURS[name])
    return [colour] if shades is None else build_gradient_lch(colour, shades)


def build_named_palette(name: str) -> Palette:
    """Build one of the PALETTES by name; unknown names are a ConfigError."""
    entries = PALETTES.get(name)
    if entries is None:
        raise ConfigError(
            f"{name!r} is not a named palette. Known palettes: {palette_names()}"
        )
    colours: List[Color] = []
    for entry in entries:
        colours.extend(_entry_colours(entry))
    return Palette.from_colours(colours)


__all__ = ["NAMED_COLOURS", "PALETTES", "palette_names", "build_named_palette"]
