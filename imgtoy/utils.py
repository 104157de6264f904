# imgtoy/utils.py
from __future__ import annotations

"""
Shared helpers for imgtoy: value and duration formatting, palette usage
counts, and the tagged print logging used by the config builders, the batch
runner and the CLI.

Log lines go to stdout as '[tag] message' (plain log lines carry no tag);
errors go to stderr.
"""

import contextlib
import sys
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, TextIO, Tuple

import numpy as np

if TYPE_CHECKING:
    from .palette import Palette
    from .surface import Surface


# Formatting


def format_duration(seconds: float, precise: bool = False) -> str:
    """
    Elapsed time for log lines: '812.0ms', '4.2s', '3m 7s'.
    precise keeps milliseconds on the seconds and minutes forms.
    """
    if seconds < 1.0:
        return f"{1000.0 * seconds:.1f}ms"
    if seconds < 60.0:
        return f"{seconds:.3f}s" if precise else f"{seconds:.1f}s"
    mins, secs = divmod(seconds, 60.0)
    if precise:
        return f"{int(mins)}m {secs:.1f}s"
    return f"{int(mins)}m {int(round(secs))}s"


def format_eta(seconds: Optional[float]) -> str:
    """Remaining time, whole seconds; '--:--' when unknown."""
    if seconds is None or not np.isfinite(seconds) or seconds < 0:
        return "--:--"
    mins, secs = divmod(int(round(seconds)), 60)
    hours, mins = divmod(mins, 60)
    if hours:
        return f"{hours}h {mins}m"
    return f"{mins}m {secs}s" if mins else f"{secs}s"


def format_value(value: Any) -> str:
    """on / off for booleans, grouped digits for ints, trimmed floats, str() for the rest."""
    if isinstance(value, bool):
        return "on" if value else "off"
    if isinstance(value, (int, np.integer)):
        return f"{int(value):,}"
    if isinstance(value, (float, np.floating)):
        return f"{float(value):.3f}".rstrip("0").rstrip(".")
    return str(value)


def format_share(fraction: float, decimals: int = 1) -> str:
    return f"{100.0 * fraction:.{decimals}f}%"


def key_value_pairs_to_string(pairs: Iterable[Tuple[str, Any]], sep: str = "  ") -> str:
    """'Name: value' blocks joined by sep, values through format_value()."""
    return sep.join(f"{name}: {format_value(value)}" for name, value in pairs)


# Palette usage


def colour_usage_report(surface: "Surface", palette: "Palette") -> List[Tuple[str, int, int]]:
    """
    How often each palette entry appears among the visible pixels of surface.

    Rows are (hex, palette_index, count), most used first; unused entries and
    pixels matching no entry are left out.
    """
    rgb8 = surface.to_u8().reshape(-1, 3)
    if surface.alpha is not None:
        rgb8 = rgb8[surface.alpha.reshape(-1) > 0]
    if rgb8.shape[0] == 0:
        return []
    uniques, counts = np.unique(rgb8, axis=0, return_counts=True)
    pal8 = np.rint(palette.rgb * 255.0).astype(np.int64)
    hexes = palette.hex_codes()

    report: List[Tuple[str, int, int]] = []
    for row, count in zip(uniques.astype(np.int64), counts):
        hits = np.flatnonzero(np.all(pal8 == row, axis=1))
        if hits.size:
            report.append((hexes[int(hits[0])], int(hits[0]), int(count)))
    report.sort(key=lambda r: -r[2])
    return report


# Console output


def enable_line_buffered_stdout() -> None:
    """Flush stdout per line where the stream supports reconfigure()."""
    reconfigure = getattr(sys.stdout, "reconfigure", None)
    if reconfigure is None:
        return
    with contextlib.suppress(OSError, ValueError):
        reconfigure(line_buffering=True, write_through=True)


def _emit(message: str, tag: str = "", stream: Optional[TextIO] = None) -> None:
    prefix = f"[{tag}] " if tag else ""
    print(prefix + message, file=stream or sys.stdout, flush=True)


def log(message: str) -> None:
    _emit(message)


def debug_log(message: str) -> None:
    _emit(message, "debug")


def warn(message: str) -> None:
    _emit(message, "warn")


def error(message: str) -> None:
    _emit(message, "error", sys.stderr)


def print_config_line(section: str, pairs: Iterable[Tuple[str, Any]], debug: bool) -> None:
    """
    One resolved-config line, e.g.
      [ordered] Strategy: bayer(n=4) | invert  Colours: 12
    Debug runs route it through debug_log().
    """
    line = f"[{section}] {key_value_pairs_to_string(pairs)}"
    if debug:
        debug_log(line)
    else:
        log(line)


def print_banner(title: str) -> None:
    _emit(f"\n--- {title} ---")


def print_progress_line(message: str, done: bool = False) -> None:
    """Rewrite the current terminal line; done ends it with a newline."""
    sys.stdout.write(f"\r\033[K{message}" + ("\n" if done else ""))
    sys.stdout.flush()


__all__ = [
    "format_duration",
    "format_eta",
    "format_value",
    "format_share",
    "key_value_pairs_to_string",
    "colour_usage_report",
    "enable_line_buffered_stdout",
    "log",
    "debug_log",
    "warn",
    "error",
    "print_config_line",
    "print_banner",
    "print_progress_line",
]
