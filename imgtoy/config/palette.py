# imgtoy/config/palette.py
from __future__ import annotations

"""
Palette construction from config.

Forms accepted for a palette:
  "name"                                  named palette (palette_data)
  {type: named, name: ...}
  {type: specified, colours: [...]}       each colour a name/hex string,
                                          {rgb: "rrggbb" | [r, g, b], shades: n}
                                          or {random: n}
  {type: random_v1}                       light / mid / dark anchors plus extras
  {type: random_v2, config: {...}}        seed-hue driven generator

Generated LCh colours are snapped into the sRGB gamut.
"""

from dataclasses import dataclass
from typing import Any, List, Mapping, Tuple

import numpy as np

from ..colour import BLACK, WHITE, Color
from ..core_types import ConfigError
from ..palette import Palette, build_gradient_lch, snap_to_gamut
from ..palette_data import NAMED_COLOURS, build_named_palette
from ..utils import debug_log, print_config_line
from .params import (
    expect_list,
    expect_mapping,
    expect_str,
    get_number,
    get_str,
    key_path,
    require,
    resolve_number,
)

PALETTE_TYPES = ("named", "specified", "random_v1", "random_v2")
MISC_FLAGS = ("lum_safeguard", "extremes", "single_lum", "grayscale")
CHROMA_MAX = 128.0


def _random_lch(rng: np.random.Generator, lo: float, hi: float) -> Color:
    L = float(rng.uniform(lo, hi))
    C = float(rng.uniform(0.0, CHROMA_MAX))
    h = float(rng.uniform(0.0, 360.0))
    return snap_to_gamut(Color(L, C, h))


# Single colours


def parse_rgb(value: Any, path: str) -> Color:
    """A hex string, or [r, g, b] as 0..255 ints or 0..1 floats."""
    if isinstance(value, str):
        if value in NAMED_COLOURS:
            return Color.from_hex(NAMED_COLOURS[value])
        try:
            return Color.from_hex(value)
        except ValueError as exc:
            raise ConfigError(f"[{path}] {exc}") from exc
    if isinstance(value, list):
        if len(value) != 3:
            raise ConfigError(f"[{path}] needs exactly 3 components, found {len(value)}")
        if any(isinstance(c, bool) or not isinstance(c, (int, float)) for c in value):
            raise ConfigError(f"[{path}] components must be numbers")
        if all(isinstance(c, int) for c in value):
            if not all(0 <= c <= 255 for c in value):
                raise ConfigError(f"[{path}] integer components must be within 0..255")
            return Color.from_rgb8(*value)
        if not all(0.0 <= float(c) <= 1.0 for c in value):
            raise ConfigError(f"[{path}] float components must be within 0..1")
        return Color.from_rgb(*(float(c) for c in value))
    raise ConfigError(f"[{path}] must be a hex string or an [r, g, b] list")


def parse_colour(value: Any, rng: np.random.Generator, path: str) -> List[Color]:
    """One colour entry; gradients and {random: n} expand to several colours."""
    if isinstance(value, (str, list)):
        return [parse_rgb(value, path)]
    spec = expect_mapping(value, path)
    if "rgb" in spec:
        colour = parse_rgb(spec["rgb"], key_path(path, "rgb"))
        if "shades" not in spec:
            return [colour]
        shades = int(get_number(spec, "shades", rng, path, integer=True))
        return build_gradient_lch(colour, shades)
    if "random" in spec:
        amount = int(get_number(spec, "random", rng, path, integer=True))
        if amount < 1:
            raise ConfigError(f"[{key_path(path, 'random')}] must be >= 1, got {amount}")
        return [Color.from_rgb(*rng.uniform(0.0, 1.0, 3).tolist()) for _ in range(amount)]
    raise ConfigError(f"[{path}] must have an 'rgb' or a 'random' key")


def parse_colour_list(values: Any, rng: np.random.Generator, path: str) -> List[Color]:
    colours: List[Color] = []
    for i, entry in enumerate(expect_list(values, path)):
        colours.extend(parse_colour(entry, rng, key_path(path, i)))
    return colours


# random_v1


def generate_random_v1(rng: np.random.Generator) -> List[Color]:
    """
    One light (L 80..100), one mid (20..80) and one dark (0..20) colour plus up
    to nine random ones. Each colour has a 10% chance of expanding into a
    2..10 shade gradient; black and white are appended 75% of the time.
    """
    anchors = [
        _random_lch(rng, 80.0, 100.0),
        _random_lch(rng, 20.0, 80.0),
        _random_lch(rng, 0.0, 20.0),
    ]
    for _ in range(int(rng.integers(0, 10))):
        anchors.append(_random_lch(rng, 0.0, 100.0))

    colours: List[Color] = []
    for colour in anchors:
        if rng.random() < 0.10:
            colours.extend(build_gradient_lch(colour, int(rng.integers(2, 11))))
        else:
            colours.append(colour)
    if rng.random() < 0.75:
        colours.extend([BLACK, WHITE])
    return colours


# random_v2


def _neighbourhood(
    centre: float, size: float, count: int, dist: str, rng: np.random.Generator
) -> List[float]:
    lo, hi = centre - size, centre + size
    if dist == "linear":
        if count == 1:
            return [centre]
        return [lo + 2.0 * size * i / (count - 1) for i in range(count)]
    return [float(rng.uniform(lo, hi)) if hi > lo else centre for _ in range(count)]


def _hues(seed: float, cfg: Mapping[str, Any], rng: np.random.Generator, path: str) -> List[float]:
    hues = [seed]
    strategies = expect_list(require(cfg, "hue-strategies", path), key_path(path, "hue-strategies"))
    for i, raw in enumerate(strategies):
        sub = key_path(key_path(path, "hue-strategies"), i)
        strategy = expect_mapping(raw, sub)
        kind = expect_str(require(strategy, "type", sub), key_path(sub, "type"))
        iterations = int(get_number(strategy, "iterations", rng, sub, 1, integer=True))
        for _ in range(iterations):
            count = int(get_number(strategy, "count", rng, sub, integer=True))
            if count < 0:
                raise ConfigError(f"[{key_path(sub, 'count')}] must be >= 0")
            if kind == "cycle":
                hues.extend(seed + k * 360.0 / (count + 1) for k in range(1, count + 1))
                continue
            size = float(get_number(strategy, "size", rng, sub))
            dist = get_str(strategy, "dist", rng, sub, "linear")
            if dist not in ("linear", "random"):
                raise ConfigError(f"[{key_path(sub, 'dist')}] must be linear or random, got {dist!r}")
            if kind == "neighbour":
                centre = seed
            elif kind == "contrast":
                centre = seed + 180.0
            elif kind == "penpal":
                centre = seed + float(get_number(strategy, "distance", rng, sub))
            else:
                raise ConfigError(
                    f"[{key_path(sub, 'type')}] {kind!r} is not a hue strategy; "
                    "allowed: neighbour, contrast, penpal, cycle"
                )
            hues.extend(_neighbourhood(centre, size, count, dist, rng))
    return hues


LUM_STRATEGIES = ("exact", "random", "distributed", "distributed/area", "distributed/nudge")


@dataclass(frozen=True)
class LumStrategy:
    """Resolved lum strategy; draws lightness values for one hue at a time."""

    kind: str
    count: int
    lums: Tuple[float, ...] = ()
    overlap: float = 0.0
    nudge: float = 0.0

    @classmethod
    def parse(cls, cfg: Mapping[str, Any], rng: np.random.Generator, path: str) -> "LumStrategy":
        sub = key_path(path, "lum-strategy")
        strategy = expect_mapping(require(cfg, "lum-strategy", path), sub)
        kind = expect_str(require(strategy, "type", sub), key_path(sub, "type"))
        if kind not in LUM_STRATEGIES:
            raise ConfigError(
                f"[{key_path(sub, 'type')}] {kind!r} is not a lum strategy; allowed: {list(LUM_STRATEGIES)}"
            )
        if kind == "exact":
            lums_path = key_path(sub, "lums")
            raw = expect_list(require(strategy, "lums", sub), lums_path)
            lums = tuple(float(resolve_number(v, rng, key_path(lums_path, i))) for i, v in enumerate(raw))
            if not lums:
                raise ConfigError(f"[{lums_path}] must not be empty")
            if not all(0.0 <= v <= 100.0 for v in lums):
                raise ConfigError(f"[{lums_path}] lightness values must be within [0, 100]")
            return cls(kind, len(lums), lums)

        count = int(get_number(strategy, "count", rng, sub, integer=True))
        if count < 1:
            raise ConfigError(f"[{key_path(sub, 'count')}] must be >= 1, got {count}")
        overlap = float(get_number(strategy, "overlap", rng, sub, 0.0)) if kind == "distributed/area" else 0.0
        nudge = float(get_number(strategy, "nudge-size", rng, sub)) if kind == "distributed/nudge" else 0.0
        return cls(kind, count, (), overlap, nudge)

    def generate(
        self, rng: np.random.Generator, min_lum: float, max_lum: float, single: bool
    ) -> List[float]:
        if self.kind == "exact":
            if single:
                return [self.lums[int(rng.integers(len(self.lums)))]]
            return list(self.lums)

        n = self.count
        slots = [int(rng.integers(n))] if single else list(range(n))
        span = max_lum - min_lum

        def spread(i: int) -> float:
            return min_lum + span * i / (n - 1) if n > 1 else float(rng.uniform(min_lum, max_lum))

        if self.kind == "random":
            return [float(rng.uniform(min_lum, max_lum)) for _ in slots]
        if self.kind == "distributed":
            return [spread(i) for i in slots]
        if self.kind == "distributed/area":
            step = span / n
            out = []
            for i in slots:
                start = max(min_lum + i * step - self.overlap, min_lum)
                end = min(min_lum + (i + 1) * step + self.overlap, max_lum)
                out.append(float(rng.uniform(start, end)))
            return out
        return [
            float(np.clip(spread(i) + rng.uniform(-self.nudge, self.nudge), 0.0, 100.0))
            for i in slots
        ]


def generate_random_v2(cfg: Mapping[str, Any], rng: np.random.Generator, path: str) -> List[Color]:
    """
    Seeded generator: a random seed hue grows a hue set through the stacked
    hue strategies; every hue gets the lightness values of the lum strategy
    and a chroma from the chroma strategy. Flags and injected colours append.
    """
    max_lum = float(get_number(cfg, "max-lum", rng, path, 100.0))
    min_lum = float(get_number(cfg, "min-lum", rng, path, 0.0))
    if not 0.0 <= min_lum <= max_lum <= 100.0:
        raise ConfigError(f"[{path}] need 0 <= min-lum <= max-lum <= 100, got {min_lum}..{max_lum}")

    raw_flags = expect_list(cfg.get("misc_flags", []), key_path(path, "misc_flags"))
    flags = set()
    for flag in raw_flags:
        if flag not in MISC_FLAGS:
            raise ConfigError(f"[{key_path(path, 'misc_flags')}] unknown flag {flag!r}; allowed: {list(MISC_FLAGS)}")
        flags.add(flag)

    chroma_sub = key_path(path, "chroma-strategy")
    chroma_cfg = expect_mapping(cfg.get("chroma-strategy", {"type": "random"}), chroma_sub)
    chroma_kind = chroma_cfg.get("type", "random")
    if chroma_kind != "random":
        raise ConfigError(f"[{key_path(chroma_sub, 'type')}] {chroma_kind!r} is not a chroma strategy; allowed: random")
    c_lo = float(get_number(chroma_cfg, "range-start", rng, chroma_sub, 0.0))
    c_hi = float(get_number(chroma_cfg, "range-end", rng, chroma_sub, CHROMA_MAX))
    if not 0.0 <= c_lo <= c_hi:
        raise ConfigError(f"[{chroma_sub}] need 0 <= range-start <= range-end")

    lum_strategy = LumStrategy.parse(cfg, rng, path)
    seed = float(rng.uniform(0.0, 360.0))
    hues = _hues(seed, cfg, rng, path)

    colours: List[Color] = []
    for hue in hues:
        for lum in lum_strategy.generate(rng, min_lum, max_lum, "single_lum" in flags):
            chroma = 0.0 if "grayscale" in flags else float(rng.uniform(c_lo, c_hi))
            colours.append(snap_to_gamut(Color(lum, chroma, hue)))

    if "lum_safeguard" in flags:
        colours.append(_random_lch(rng, 80.0, 100.0))
        colours.append(_random_lch(rng, 20.0, 80.0))
        colours.append(_random_lch(rng, 0.0, 20.0))
    if "extremes" in flags:
        colours.extend([BLACK, WHITE])
    if "inject" in cfg:
        inject_sub = key_path(path, "inject")
        inject = expect_mapping(cfg["inject"], inject_sub)
        colours.extend(parse_colour_list(require(inject, "colours", inject_sub), rng, key_path(inject_sub, "colours")))
    return colours


# Entry point


def build_palette(
    spec: Any, rng: np.random.Generator, path: str = "palette", debug: bool = False
) -> Palette:
    """Resolve a palette spec into a Palette (see module docstring for forms)."""
    if isinstance(spec, str):
        spec = {"type": "named", "name": spec}
    spec = expect_mapping(spec, path)
    kind = expect_str(require(spec, "type", path), key_path(path, "type"))

    if kind == "named":
        name = get_str(spec, "name", rng, path)
        palette = build_named_palette(name)
    elif kind == "specified":
        palette = Palette.from_colours(
            parse_colour_list(require(spec, "colours", path), rng, key_path(path, "colours"))
        )
    elif kind == "random_v1":
        palette = Palette.from_colours(generate_random_v1(rng))
    elif kind == "random_v2":
        sub = key_path(path, "config")
        cfg = expect_mapping(require(spec, "config", path), sub)
        palette = Palette.from_colours(generate_random_v2(cfg, rng, sub))
    else:
        raise ConfigError(
            f"[{key_path(path, 'type')}] {kind!r} is not a palette type; allowed: {list(PALETTE_TYPES)}"
        )

    print_config_line("palette", [("Type", kind), ("Colours", len(palette))], debug)
    if debug:
        debug_log("palette: " + " ".join(palette.hex_codes()))
    return palette


__all__ = [
    "PALETTE_TYPES",
    "build_palette",
    "parse_colour",
    "parse_colour_list",
    "parse_rgb",
    "generate_random_v1",
    "generate_random_v2",
    "LumStrategy",
]
