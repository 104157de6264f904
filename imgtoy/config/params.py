# imgtoy/config/params.py
from __future__ import annotations

"""
Parameter resolution for YAML configs.

A numeric parameter is written as a scalar, a {min, max} range (uniform draw,
max exclusive) or a list (uniform choice, items resolved recursively). Every
draw goes through one numpy Generator so a config plus a seed always resolves
to the same effects. Errors are ConfigError carrying the dotted key path.
"""

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import yaml

from ..core_types import ConfigError

Number = Union[int, float]


def key_path(path: str, key: Any) -> str:
    if isinstance(key, int):
        return f"{path}[{key}]"
    return f"{path}.{key}" if path else str(key)


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a YAML config; the root must be a mapping."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"{path}: invalid YAML: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: config root must be a mapping, got {type(data).__name__}")
    return data


# Shape checks


def expect_mapping(value: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigError(f"[{path}] must be a mapping, got {type(value).__name__}")
    return value


def expect_list(value: Any, path: str) -> List[Any]:
    if not isinstance(value, list):
        raise ConfigError(f"[{path}] must be a list, got {type(value).__name__}")
    return value


def expect_str(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"[{path}] must be a string, got {type(value).__name__}")
    return value


def require(spec: Mapping[str, Any], key: str, path: str) -> Any:
    if key not in spec:
        raise ConfigError(f"[{key_path(path, key)}] is required")
    return spec[key]


def single_entry(entry: Any, path: str) -> Tuple[str, Mapping[str, Any]]:
    """
    Split a list entry written either as a bare name or a single-key mapping
    {name: {params}} into (name, params).
    """
    if isinstance(entry, str):
        return entry, {}
    if isinstance(entry, Mapping) and len(entry) == 1:
        name, body = next(iter(entry.items()))
        name = expect_str(name, path)
        if body is None:
            body = {}
        return name, expect_mapping(body, key_path(path, name))
    raise ConfigError(f"[{path}] must be a name or a single-key mapping")


# Random draws


def roll(chance: Any, rng: np.random.Generator, path: str) -> bool:
    """True with probability chance (0..1). Always draws, so the stream stays aligned."""
    p = float(resolve_number(chance, rng, path))
    if not 0.0 <= p <= 1.0:
        raise ConfigError(f"[{path}] chance must be within [0, 1], got {p}")
    return bool(rng.random() < p)


def choose(options: Sequence[Any], rng: np.random.Generator, path: str) -> Any:
    if len(options) == 0:
        raise ConfigError(f"[{path}] has nothing to choose from")
    return options[int(rng.integers(len(options)))]


def choose_weighted(
    ratios: Mapping[str, Any], rng: np.random.Generator, path: str
) -> str:
    """Pick a key with probability proportional to its (non-negative) ratio."""
    names = list(ratios)
    weights = np.array(
        [float(resolve_number(ratios[n], rng, key_path(path, n))) for n in names],
        dtype=np.float64,
    )
    if not names or np.any(weights < 0.0) or weights.sum() <= 0.0:
        raise ConfigError(f"[{path}] ratios must be non-negative with a positive sum")
    return names[int(rng.choice(len(names), p=weights / weights.sum()))]


def resolve_number(
    value: Any, rng: np.random.Generator, path: str, integer: bool = False
) -> Number:
    """Resolve a scalar, {min, max} range or list into one number."""
    if isinstance(value, bool):
        raise ConfigError(f"[{path}] must be a number, got a boolean")
    if isinstance(value, (int, float)):
        if integer:
            if isinstance(value, float) and not value.is_integer():
                raise ConfigError(f"[{path}] must be an integer, got {value}")
            return int(value)
        return float(value)
    if isinstance(value, Mapping):
        if "min" not in value or "max" not in value:
            raise ConfigError(f"[{path}] range needs both min and max")
        lo = resolve_number(value["min"], rng, key_path(path, "min"), integer)
        hi = resolve_number(value["max"], rng, key_path(path, "max"), integer)
        if hi < lo:
            raise ConfigError(f"[{path}] range max ({hi}) is below min ({lo})")
        if hi == lo:
            return lo
        if integer:
            return int(rng.integers(int(lo), int(hi)))
        return float(rng.uniform(float(lo), float(hi)))
    if isinstance(value, list):
        idx = int(rng.integers(len(value))) if value else -1
        if idx < 0:
            raise ConfigError(f"[{path}] list must not be empty")
        return resolve_number(value[idx], rng, key_path(path, idx), integer)
    raise ConfigError(f"[{path}] must be a number, a {{min, max}} range or a list")


def get_number(
    spec: Mapping[str, Any],
    key: str,
    rng: np.random.Generator,
    path: str,
    default: Optional[Number] = None,
    integer: bool = False,
) -> Number:
    if key not in spec:
        if default is None:
            raise ConfigError(f"[{key_path(path, key)}] is required")
        return default
    return resolve_number(spec[key], rng, key_path(path, key), integer)


def get_pair(
    spec: Mapping[str, Any],
    key: str,
    rng: np.random.Generator,
    path: str,
    default: Tuple[Number, Number],
    integer: bool = False,
) -> Tuple[Number, Number]:
    """
    Resolve a (y, x) pair written as {y, x}; a plain number or range applies
    to both axes.
    """
    if key not in spec:
        return default
    value = spec[key]
    sub = key_path(path, key)
    if isinstance(value, Mapping) and ("y" in value or "x" in value):
        y = get_number(value, "y", rng, sub, default[0], integer)
        x = get_number(value, "x", rng, sub, default[1], integer)
        return (y, x)
    v = resolve_number(value, rng, sub, integer)
    return (v, v)


def get_str(
    spec: Mapping[str, Any],
    key: str,
    rng: np.random.Generator,
    path: str,
    default: Optional[str] = None,
) -> str:
    """A string parameter; a list of strings means a uniform choice."""
    if key not in spec:
        if default is None:
            raise ConfigError(f"[{key_path(path, key)}] is required")
        return default
    value = spec[key]
    sub = key_path(path, key)
    if isinstance(value, list):
        return expect_str(choose(value, rng, sub), sub)
    return expect_str(value, sub)


def get_bool(spec: Mapping[str, Any], key: str, path: str, default: bool = False) -> bool:
    value = spec.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"[{key_path(path, key)}] must be true or false")
    return value


__all__ = [
    "Number",
    "key_path",
    "load_config",
    "expect_mapping",
    "expect_list",
    "expect_str",
    "require",
    "single_entry",
    "roll",
    "choose",
    "choose_weighted",
    "resolve_number",
    "get_number",
    "get_pair",
    "get_str",
    "get_bool",
]
