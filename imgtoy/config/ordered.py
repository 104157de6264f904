# imgtoy/config/ordered.py
from __future__ import annotations

"""
Ordered-dither construction from config.

  ordered:
    palette: ...
    strategies:                 # one entry is chosen uniformly
      - bayer: {matrix-size: {min: 2, max: 9}}
      - wavy: {orientation: {horizontal: 1, vertical: 3}}
    mirror: {chance: 0.5, directions: [[horizontal], [downright, upright]], flip: 0.5, thorough: 0.1}
    blur: {chance: 0.2, factor: 1}
    exponentiate: {chance: 0.2, factor: {min: 0.5, max: 2.0}}
    rotation: {chance: 0.5, values: [right, half, left]}
    checker: {chance: 0.3, type: iter, factor: 4}
    invert: 0.5

Modifiers are applied in that order (mirror set, blur, exponentiate,
rotation, checker, invert), each only when its chance roll succeeds.
"""

from typing import Any, Dict, Mapping, Optional

import numpy as np

from ..core_types import ConfigError
from ..ordered import (
    CheckerConfig,
    CheckerFrom,
    CheckerIter,
    DiagonalDirection,
    Increase,
    MirrorAxis,
    OrderedDither,
    Orientation,
    Rotation,
    Strategy,
    Wrapping,
    build_generator,
    generator_names,
)
from ..utils import debug_log
from .palette import build_palette
from .params import (
    choose,
    choose_weighted,
    expect_list,
    expect_mapping,
    expect_str,
    get_number,
    get_pair,
    key_path,
    require,
    roll,
    single_entry,
)

# Generators that need an explicit matrix-size; the rest have a natural size.
SIZED_GENERATORS = frozenset(
    {
        "bayer",
        "diamonds",
        "checkered-diamonds",
        "diagonals-n",
        "diagonal-tiles",
        "bouncing-bowtie",
        "scanline",
        "starburst",
        "shiny-bowtie",
        "marble-tile",
        "curve-path",
        "zigzag",
        "broken-spiral",
        "modulo-snake",
    }
)


def _pick_option(
    body: Mapping[str, Any],
    key: str,
    rng: np.random.Generator,
    path: str,
    default: Optional[str] = None,
) -> str:
    """A named option given as a string, a list (uniform) or {name: ratio} mapping."""
    sub = key_path(path, key)
    if key not in body:
        if default is None:
            raise ConfigError(f"[{sub}] is required")
        return default
    value = body[key]
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return expect_str(choose(value, rng, sub), sub)
    if isinstance(value, Mapping):
        return choose_weighted(value, rng, sub)
    raise ConfigError(f"[{sub}] must be a name, a list of names or a mapping of ratios")


def _increase(body: Mapping[str, Any], rng: np.random.Generator, path: str) -> Increase:
    sub = key_path(path, "increase-strategy")
    spec = expect_mapping(require(body, "increase-strategy", path), sub)
    kind = _pick_option(spec, "type", rng, sub)
    factor = int(get_number(spec, "factor", rng, sub, integer=True))
    return Increase(kind, factor)


def _wrapping(body: Mapping[str, Any], rng: np.random.Generator, path: str) -> Wrapping:
    sub = key_path(path, "wrappings")
    raw = expect_list(body.get("wrappings", ["none"]), sub)
    options = [Wrapping.parse(expect_str(w, key_path(sub, i))) for i, w in enumerate(raw)]
    return choose(options, rng, sub)


def strategy_params(
    name: str, body: Mapping[str, Any], rng: np.random.Generator, path: str
) -> Dict[str, Any]:
    """Resolve the keyword arguments of generator `name` from its config body."""
    params: Dict[str, Any] = {}
    if name in SIZED_GENERATORS or "matrix-size" in body:
        params["n"] = get_number(body, "matrix-size", rng, path, integer=True)

    if name == "static":
        params["seed"] = int(rng.integers(0, 2**31 - 1))
    elif name in ("wavy", "scanline"):
        params["orientation"] = Orientation.parse(_pick_option(body, "orientation", rng, path))
    elif name == "diagonals-n":
        params["direction"] = DiagonalDirection.parse(
            _pick_option(body, "diagonal-direction", rng, path)
        )
        params["increase"] = _increase(body, rng, path)
    elif name == "curve-path":
        params["amplitude"] = get_number(body, "amplitude", rng, path, 1.0)
        params["promotion"] = get_number(body, "promotion", rng, path, 0.0)
        params["halt_threshold"] = get_number(body, "halt-threshold", rng, path, 100, integer=True)
    elif name == "zigzag":
        params["halt_threshold"] = get_number(body, "halt-threshold", rng, path, 100, integer=True)
        params["wrapping"] = _wrapping(body, rng, path)
        params["magnitude"] = get_pair(body, "magnitude", rng, path, (1.0, 1.0))
        params["promotion"] = get_pair(body, "promotion", rng, path, (0.0, 0.0))
    elif name == "broken-spiral":
        params["base_step"] = get_pair(body, "base-step", rng, path, (1.0, 1.0))
        if "oob-threshold" in body:
            params["oob_threshold"] = get_number(body, "oob-threshold", rng, path, integer=True)
        params["increment_by"] = get_number(body, "increment-by", rng, path, 0.0)
        params["increment_in"] = get_number(body, "increment-in", rng, path, 1, integer=True)
    elif name == "modulo-snake":
        params["increment_by"] = get_number(body, "increment-by", rng, path, 1.0)
        params["modulo"] = get_number(body, "modulo", rng, path, 10, integer=True)
        params["iterations"] = get_number(body, "iterations", rng, path, 1, integer=True)
    return params


def parse_strategy(entry: Any, rng: np.random.Generator, path: str) -> Strategy:
    name, body = single_entry(entry, path)
    if name not in generator_names():
        raise ConfigError(
            f"[{path}] {name!r} is not a valid ordered strategy. "
            f"Allowed strategies are: {generator_names()}"
        )
    return build_generator(name, **strategy_params(name, body, rng, key_path(path, name)))


# Modifiers


def _mirror(strategy: Strategy, spec: Any, rng: np.random.Generator, path: str) -> Strategy:
    spec = expect_mapping(spec, path)
    if not roll(spec.get("chance", 0.0), rng, key_path(path, "chance")):
        return strategy
    dir_path = key_path(path, "directions")
    sets = expect_list(require(spec, "directions", path), dir_path)
    chosen = choose(sets, rng, dir_path)
    if isinstance(chosen, str):
        chosen = [chosen]
    flip_chance = spec.get("flip", 0.0)
    thorough_chance = spec.get("thorough", 0.0)
    for i, axis_name in enumerate(expect_list(chosen, dir_path)):
        axis = MirrorAxis.parse(expect_str(axis_name, key_path(dir_path, i)))
        flip = roll(flip_chance, rng, key_path(path, "flip"))
        thorough = roll(thorough_chance, rng, key_path(path, "thorough"))
        strategy = strategy.mirror(axis, flip=flip, thorough=thorough)
    return strategy


def _checker_config(spec: Mapping[str, Any], rng: np.random.Generator, path: str) -> CheckerConfig:
    kind = expect_str(require(spec, "type", path), key_path(path, "type"))
    if kind == "iter":
        return CheckerIter(int(get_number(spec, "factor", rng, path, integer=True)))
    if kind != "from":
        raise ConfigError(f"[{key_path(path, 'type')}] must be iter or from, got {kind!r}")

    src_path = key_path(path, "source")
    source_spec = spec.get("source", {"type": "center"})
    if isinstance(source_spec, str):
        source_spec = {"type": source_spec}
    source_spec = expect_mapping(source_spec, src_path)
    source_kind = expect_str(source_spec.get("type", "center"), key_path(src_path, "type"))
    source: Any
    if source_kind == "center":
        source = "center"
    elif source_kind == "fixed":
        source = (
            int(get_number(source_spec, "y", rng, src_path, integer=True)),
            int(get_number(source_spec, "x", rng, src_path, integer=True)),
        )
    else:
        raise ConfigError(f"[{key_path(src_path, 'type')}] must be center or fixed, got {source_kind!r}")

    fac_path = key_path(path, "factor")
    factor_spec = spec.get("factor", {"type": "linear"})
    if isinstance(factor_spec, str):
        factor_spec = {"type": factor_spec}
    factor_spec = expect_mapping(factor_spec, fac_path)
    falloff = expect_str(factor_spec.get("type", "linear"), key_path(fac_path, "type"))
    factor = float(get_number(factor_spec, "factor", rng, fac_path, 0.95))
    modulo = None
    if "modulo" in spec:
        modulo = int(get_number(spec, "modulo", rng, path, integer=True))
    return CheckerFrom(source=source, falloff=falloff, factor=factor, modulo=modulo)


def apply_modifiers(
    strategy: Strategy, spec: Mapping[str, Any], rng: np.random.Generator, path: str
) -> Strategy:
    """Apply the chance-gated modifiers of an ordered config block to strategy."""
    if "mirror" in spec:
        strategy = _mirror(strategy, spec["mirror"], rng, key_path(path, "mirror"))

    if "blur" in spec:
        sub = key_path(path, "blur")
        blur = expect_mapping(spec["blur"], sub)
        if roll(blur.get("chance", 0.0), rng, key_path(sub, "chance")):
            strategy = strategy.blur(int(get_number(blur, "factor", rng, sub, integer=True)))

    if "exponentiate" in spec:
        sub = key_path(path, "exponentiate")
        expo = expect_mapping(spec["exponentiate"], sub)
        if roll(expo.get("chance", 0.0), rng, key_path(sub, "chance")):
            strategy = strategy.exponentiate(float(get_number(expo, "factor", rng, sub)))

    if "rotation" in spec:
        sub = key_path(path, "rotation")
        rot = expect_mapping(spec["rotation"], sub)
        if roll(rot.get("chance", 0.0), rng, key_path(sub, "chance")):
            values = expect_list(require(rot, "values", sub), key_path(sub, "values"))
            name = expect_str(choose(values, rng, key_path(sub, "values")), key_path(sub, "values"))
            strategy = strategy.rotate(Rotation.parse(name))

    if "checker" in spec:
        sub = key_path(path, "checker")
        checker = expect_mapping(spec["checker"], sub)
        if roll(checker.get("chance", 0.0), rng, key_path(sub, "chance")):
            strategy = strategy.checker(_checker_config(checker, rng, sub))

    if roll(spec.get("invert", 0.0), rng, key_path(path, "invert")):
        strategy = strategy.invert()
    return strategy


def build_strategy(
    spec: Any, rng: np.random.Generator, path: str = "ordered", debug: bool = False
) -> Strategy:
    """Choose one configured strategy and wrap it in the rolled modifiers."""
    spec = expect_mapping(spec, path)
    sub = key_path(path, "strategies")
    entries = expect_list(require(spec, "strategies", path), sub)
    idx = int(rng.integers(len(entries))) if entries else -1
    if idx < 0:
        raise ConfigError(f"[{sub}] must list at least one strategy")
    strategy = parse_strategy(entries[idx], rng, key_path(sub, idx))
    strategy = apply_modifiers(strategy, spec, rng, path)
    if debug:
        debug_log(f"ordered: picked strategies[{idx}] of {len(entries)}")
    return strategy


def build_ordered(
    spec: Any,
    rng: np.random.Generator,
    path: str = "ordered",
    debug: bool = False,
    workers: int = 1,
) -> OrderedDither:
    spec = expect_mapping(spec, path)
    palette = build_palette(require(spec, "palette", path), rng, key_path(path, "palette"), debug)
    strategy = build_strategy(spec, rng, path, debug)
    return OrderedDither(palette, strategy, workers)


__all__ = [
    "SIZED_GENERATORS",
    "strategy_params",
    "parse_strategy",
    "apply_modifiers",
    "build_strategy",
    "build_ordered",
]
