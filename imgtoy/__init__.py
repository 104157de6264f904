# imgtoy/__init__.py
"""
imgtoy package.

Purpose:
  Palette dithering and colour effect chains for still and animated images.
  See imgtoy.cli for the command line driver.

Public API:
  Color, distance    : LCh colour value type and perceptual distance.
  Palette            : ordered, immutable colour list.
  nearest, nearest_pair : palette quantizer.
  Surface            : immutable pixel grid passed between effects.
  OrderedDither      : threshold-field dithering (see imgtoy.ordered).
  ErrorDiffusion     : kernel error diffusion (see imgtoy.diffusion).
  Pipeline, run_batch: effect chains and per-surface batch runs.
  config             : YAML -> seeded palettes, strategies and effect chains.

Quick start:
  from imgtoy import Palette, Surface, OrderedDither
  from imgtoy.ordered import build_generator
"""

__version__ = "0.1.0"

# Re-export namespaces for convenience.
from . import colour_convert
from . import core_types
from . import palette_data
from . import ordered
from . import diffusion
from . import filters
from . import config
from . import utils

from .colour import BLACK, WHITE, Color, convert, distance  # noqa: E402
from .core_types import ConfigError  # noqa: E402
from .palette import Palette  # noqa: E402
from .quantize import nearest, nearest_pair  # noqa: E402
from .surface import Surface  # noqa: E402
from .ordered import OrderedDither  # noqa: E402
from .diffusion import ErrorDiffusion  # noqa: E402
from .pipeline import Effect, Pipeline, run_batch  # noqa: E402

__all__ = [
    "__version__",
    "colour_convert",
    "core_types",
    "palette_data",
    "ordered",
    "diffusion",
    "filters",
    "config",
    "utils",
    "BLACK",
    "WHITE",
    "Color",
    "convert",
    "distance",
    "ConfigError",
    "Palette",
    "nearest",
    "nearest_pair",
    "Surface",
    "OrderedDither",
    "ErrorDiffusion",
    "Effect",
    "Pipeline",
    "run_batch",
]
