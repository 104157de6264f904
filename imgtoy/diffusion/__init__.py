# imgtoy/diffusion/__init__.py
"""
Error-diffusion API.

Provides:
  DiffusionKernel.named(name) : preset lookup (floyd-steinberg, atkinson, ...)
  diffuse(lab, palette, kernel) -> DiffusionResult(indices, pending)
  ErrorDiffusion              : Effect wrapping diffuse() for surfaces
"""

from .kernels import ALIASES, PRESETS, DiffusionKernel, kernel_names
from .dither import DiffusionResult, ErrorDiffusion, diffuse

__all__ = [
    "ALIASES",
    "PRESETS",
    "DiffusionKernel",
    "kernel_names",
    "DiffusionResult",
    "ErrorDiffusion",
    "diffuse",
]
