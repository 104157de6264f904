# imgtoy/config/__init__.py
"""
YAML configuration layer.

Provides:
  load_config(path)                 : YAML -> dict (yaml.safe_load)
  build_palette(spec, rng)          : palette from a named / specified / random spec
  build_strategy(spec, rng)         : ordered threshold strategy plus rolled modifiers
  build_effect_chain(spec, rng)     : effects list -> Pipeline

Every random choice is drawn from the numpy Generator passed in, so a config
and a seed always resolve to the same chain.
"""

from .params import load_config, resolve_number
from .palette import build_palette
from .ordered import build_ordered, build_strategy
from .effects import build_effect, build_effect_chain, effect_names

__all__ = [
    "load_config",
    "resolve_number",
    "build_palette",
    "build_strategy",
    "build_ordered",
    "build_effect",
    "build_effect_chain",
    "effect_names",
]
