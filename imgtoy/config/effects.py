# imgtoy/config/effects.py
from __future__ import annotations

"""
Effect-chain construction from config.

  effects:
    - hue-rotate: {min: 0, max: 360}
    - contrast: 1.2
    - gradient-map: {amnt: 4, noise: 10, noise-chance: 0.5}
    - quantize-hue: [0, 120, 240]
    - ordered: {palette: ..., strategies: [...]}
    - floyd-steinberg: {palette: ..., serpentine: true}

Each entry is a single-key mapping; any name that is not a filter or
"ordered" is looked up as an error-diffusion kernel.
"""

from typing import Any, Callable, Dict, List, Mapping, Tuple

import numpy as np

from ..colour import Color
from ..core_types import ConfigError
from ..diffusion import ALIASES, DiffusionKernel, ErrorDiffusion
from ..filters import (
    Brighten,
    Contrast,
    GradientMap,
    HueRotate,
    MultiplyHue,
    QuantizeHue,
    Saturate,
)
from ..palette import snap_to_gamut
from ..pipeline import Effect, Pipeline
from ..utils import print_config_line
from .ordered import build_ordered
from .palette import CHROMA_MAX, build_palette, parse_colour
from .params import (
    choose,
    expect_list,
    expect_mapping,
    get_bool,
    get_number,
    key_path,
    require,
    resolve_number,
)


def _factor(value: Any, rng: np.random.Generator, path: str) -> float:
    """A filter parameter: a number / range / list, or a mapping with 'factor'."""
    if isinstance(value, Mapping) and "factor" in value:
        return float(get_number(value, "factor", rng, path))
    return float(resolve_number(value, rng, path))


def _simple(cls: Callable[[float], Effect]) -> Callable[[Any, np.random.Generator, str], Effect]:
    def build(value: Any, rng: np.random.Generator, path: str) -> Effect:
        return cls(_factor(value, rng, path))

    return build


# Gradient map


def generate_gradient_stops(
    rng: np.random.Generator,
    amount: int,
    noise: float = 0.0,
    noise_chance: float = 1.0,
    min_brightness: float = 0.0,
    max_brightness: float = 100.0,
) -> List[Tuple[Color, float]]:
    """
    amount stops evenly spaced from min to max brightness, each a random-hue,
    random-chroma colour at the stop's lightness. noise nudges a stop's
    lightness (not its position) by up to +-noise with probability noise_chance.
    """
    if amount < 1:
        raise ConfigError(f"gradient-map needs amnt >= 1, got {amount}")
    if not 0.0 <= min_brightness <= max_brightness <= 100.0:
        raise ConfigError(
            f"gradient-map brightness must satisfy 0 <= min <= max <= 100, got {min_brightness}..{max_brightness}"
        )
    step = (max_brightness - min_brightness) / (amount - 1) if amount > 1 else 0.0
    raw: List[Tuple[float, float, float]] = []
    for i in range(amount):
        L = min_brightness + i * step
        raw.append((L, float(rng.uniform(0.0, CHROMA_MAX)), float(rng.uniform(0.0, 360.0))))

    stops: List[Tuple[Color, float]] = []
    for L, C, h in raw:
        luma = L / 100.0
        if noise != 0.0 and noise_chance != 0.0 and rng.random() <= noise_chance:
            L = float(np.clip(L + rng.uniform(-noise, noise), 0.0, 100.0))
        stops.append((snap_to_gamut(Color(L, C, h)), luma))
    return stops


def _gradient_map(value: Any, rng: np.random.Generator, path: str) -> GradientMap:
    if isinstance(value, Mapping):
        amount = int(get_number(value, "amnt", rng, path, integer=True))
        return GradientMap.from_pairs(
            generate_gradient_stops(
                rng,
                amount,
                noise=float(get_number(value, "noise", rng, path, 0.0)),
                noise_chance=float(get_number(value, "noise-chance", rng, path, 1.0)),
                min_brightness=float(get_number(value, "min-brightness", rng, path, 0.0)),
                max_brightness=float(get_number(value, "max-brightness", rng, path, 100.0)),
            )
        )
    stops: List[Tuple[Color, float]] = []
    for i, raw in enumerate(expect_list(value, path)):
        sub = key_path(path, i)
        entry = expect_mapping(raw, sub)
        luma = float(get_number(entry, "luma", rng, sub))
        colours = parse_colour(require(entry, "colour", sub), rng, key_path(sub, "colour"))
        stops.append((choose(colours, rng, key_path(sub, "colour")), luma))
    return GradientMap.from_pairs(stops)


def _quantize_hue(value: Any, rng: np.random.Generator, path: str) -> QuantizeHue:
    if isinstance(value, Mapping):
        value, path = require(value, "hues", path), key_path(path, "hues")
    hues = [
        float(resolve_number(h, rng, key_path(path, i)))
        for i, h in enumerate(expect_list(value, path))
    ]
    return QuantizeHue(tuple(hues))


FILTERS: Dict[str, Callable[[Any, np.random.Generator, str], Effect]] = {
    "hue-rotate": _simple(HueRotate),
    "contrast": _simple(Contrast),
    "brighten": _simple(Brighten),
    "saturate": _simple(Saturate),
    "multiply-hue": _simple(MultiplyHue),
    "gradient-map": _gradient_map,
    "quantize-hue": _quantize_hue,
}


def effect_names() -> List[str]:
    return sorted(FILTERS) + ["ordered"] + sorted(ALIASES)


def _diffusion(
    name: str, value: Any, rng: np.random.Generator, path: str, debug: bool
) -> ErrorDiffusion:
    spec = expect_mapping(value, path)
    kernel = DiffusionKernel.named(name)
    palette = build_palette(require(spec, "palette", path), rng, key_path(path, "palette"), debug)
    if get_bool(spec, "serpentine", path, False):
        kernel = kernel.with_serpentine(True)
    return ErrorDiffusion(palette, kernel)


def build_effect(
    entry: Any,
    rng: np.random.Generator,
    path: str,
    debug: bool = False,
    workers: int = 1,
) -> Effect:
    entry = expect_mapping(entry, path)
    if len(entry) != 1:
        raise ConfigError(f"[{path}] only one key (the effect name) is accepted, found {len(entry)}")
    name, value = next(iter(entry.items()))
    sub = key_path(path, name)

    if name in FILTERS:
        effect = FILTERS[name](value, rng, sub)
    elif name == "ordered":
        effect = build_ordered(value, rng, sub, debug, workers)
    elif isinstance(name, str) and name.strip().lower() in ALIASES:
        effect = _diffusion(name, value, rng, sub, debug)
    else:
        raise ConfigError(f"[{path}] {name!r} is not a supported effect. Known effects: {effect_names()}")

    print_config_line(effect.name, effect.describe(), debug)
    return effect


def build_effect_chain(
    spec: Any,
    rng: np.random.Generator,
    path: str = "effects",
    debug: bool = False,
    workers: int = 1,
) -> Pipeline:
    """
    Resolve an effects list (or a config mapping holding one under 'effects')
    into a Pipeline. Every random choice is drawn here, in list order.
    """
    if isinstance(spec, Mapping):
        spec = require(spec, "effects", "")
    entries = expect_list(spec, path)
    effects = [
        build_effect(entry, rng, key_path(path, i), debug, workers)
        for i, entry in enumerate(entries)
    ]
    return Pipeline(tuple(effects))


__all__ = [
    "FILTERS",
    "effect_names",
    "generate_gradient_stops",
    "build_effect",
    "build_effect_chain",
]
