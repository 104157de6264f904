# imgtoy/cli.py
"""
imgtoy command line driver.

Usage:
  imgtoy CONFIG [--seed S] [--workers W] [--outdir DIR] [--n N] [--debug]

Config (YAML):
  source:  {path: in.png, max-dim: 512}
  output:  {path: out/, n: 4}
  effects: [...]            # see imgtoy.config.effects

For each of n iterations a fresh effect chain is resolved from the seeded
generator and applied to every frame of the source. Outputs are written as
<out>/<iiiii>.png (still) or .gif (animated); log.txt records the seed and
the resolved chain of every iteration so a run can be reproduced.
"""

from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple

import numpy as np

from .config import build_effect_chain, load_config
from .config.params import expect_mapping, get_number, key_path, require
from .core_types import ConfigError
from .image_io import encode, is_image_file, load_media
from .pipeline import Pipeline, run_batch
from .utils import (
    colour_usage_report,
    debug_log,
    enable_line_buffered_stdout,
    error,
    format_duration,
    format_eta,
    format_share,
    key_value_pairs_to_string,
    log,
    print_banner,
    print_config_line,
    print_progress_line,
    warn,
)

# CLI args & small helpers


def _default_workers() -> int:
    """Frame workers: every core except a small reserve that grows with the core count."""
    cores = os.cpu_count() or 4
    reserve = 1 if cores <= 6 else 2 if cores <= 12 else 3 if cores <= 18 else 4
    return max(1, cores - reserve)


def parse_cli_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments.

    Returns:
      Namespace fields:
        config: Path to the YAML config
        seed: optional int; a fresh one is drawn when omitted
        workers: threads for batch frames
        outdir: optional Path overriding output.path
        n: optional int overriding output.n
        debug: bool for verbose resolution details
    """
    parser = argparse.ArgumentParser(
        prog="imgtoy",
        description="Apply randomised palette effect chains (dithering, filters) to an image.",
    )
    parser.add_argument("config", type=Path, help="YAML config file")
    parser.add_argument("--seed", type=int, default=None, help="Seed for every random choice")
    parser.add_argument(
        "--workers", type=int, default=_default_workers(), help="Frames processed in parallel"
    )
    parser.add_argument(
        "--outdir", type=Path, default=None, help="Output directory (overrides output.path)"
    )
    parser.add_argument("--n", type=int, default=None, help="Iterations (overrides output.n)")
    parser.add_argument("--debug", action="store_true", help="Verbose resolution details")
    return parser.parse_args(argv)


def _resolve_path(raw: Any, base: Path, path: str) -> Path:
    if not isinstance(raw, str) or not raw:
        raise ConfigError(f"[{path}] must be a non-empty path string")
    p = Path(raw).expanduser()
    return p if p.is_absolute() else base / p


def _read_run_settings(
    config: Mapping[str, Any], base: Path, rng: np.random.Generator
) -> Tuple[Path, Optional[int], Path, int]:
    source = expect_mapping(require(config, "source", ""), "source")
    src_path = _resolve_path(require(source, "path", "source"), base, "source.path")
    max_dim = None
    if "max-dim" in source:
        max_dim = int(get_number(source, "max-dim", rng, "source", integer=True))

    output = expect_mapping(config.get("output", {}), "output")
    out_path = _resolve_path(output.get("path", "output"), base, key_path("output", "path"))
    n = int(get_number(output, "n", rng, "output", 1, integer=True))
    return src_path, max_dim, out_path, n


def _palette_of(pipeline: Pipeline) -> Any:
    """Palette of the last effect that carries one (for usage reports)."""
    for effect in reversed(pipeline.effects):
        palette = getattr(effect, "palette", None)
        if palette is not None:
            return palette
    return None


def _log_block(index: int, pipeline: Pipeline) -> List[str]:
    lines = [f"[iteration {index:05}]"]
    for name, pairs in pipeline.describe():
        lines.append(f"  {name}: {key_value_pairs_to_string(pairs)}")
    return lines


def run(args: argparse.Namespace) -> int:
    """Run the configured iterations; returns a process exit code."""
    seed = args.seed if args.seed is not None else int(np.random.SeedSequence().entropy % (2**63))
    rng = np.random.default_rng(seed)

    try:
        config = load_config(args.config)
        src_path, max_dim, out_path, n = _read_run_settings(config, args.config.parent, rng)
    except (ConfigError, OSError) as exc:
        error(str(exc))
        return 2
    if args.outdir is not None:
        out_path = args.outdir
    if args.n is not None:
        n = args.n

    if not src_path.exists() or not is_image_file(src_path):
        error(f"not a readable image: {src_path}")
        return 2
    try:
        media = load_media(src_path, max_dim)
    except (OSError, ValueError) as exc:
        error(f"could not decode {src_path}: {exc}")
        return 2
    out_path.mkdir(parents=True, exist_ok=True)

    print_config_line(
        "run",
        [
            ("Seed", str(seed)),
            ("Frames", len(media.frames)),
            ("Iterations", n),
            ("Workers", args.workers),
        ],
        debug=False,
    )
    if args.debug:
        first = media.frames[0]
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Source", str(src_path)),
                    ("Size", f"{first.width}x{first.height}"),
                    ("Max dim", max_dim or "-"),
                    ("Output", str(out_path)),
                ]
            )
        )

    log_lines = [f"seed: {seed}", f"source: {src_path}", f"frames: {len(media.frames)}", ""]
    failures = 0
    status = 0
    t_start = time.perf_counter()

    for i in range(n):
        print_banner(f"iteration {i:05}")
        t0 = time.perf_counter()
        try:
            pipeline = build_effect_chain(config, rng, debug=args.debug, workers=1)
        except ConfigError as exc:
            error(str(exc))
            log_lines.extend([f"[iteration {i:05}]", f"  (config error: {exc})"])
            status = 2
            break
        if len(pipeline) == 0:
            warn("no effects configured; output equals input")

        results = run_batch(pipeline, media.frames, workers=args.workers, debug=args.debug)
        log_lines.extend(_log_block(i, pipeline))
        failed = [r for r in results if not r.ok]
        if failed:
            failures += 1
            error(f"iteration {i:05}: {len(failed)}/{len(results)} frame(s) failed; nothing written")
            log_lines.append("  (failed)")
            continue

        surfaces = [r.surface for r in results]
        written = encode(surfaces, out_path / f"{i:05}", media.durations)  # type: ignore[arg-type]

        if args.debug:
            palette = _palette_of(pipeline)
            if palette is not None:
                first = surfaces[0]
                total = float(first.width * first.height)
                for hx, idx, count in colour_usage_report(first, palette)[:8]:  # type: ignore[arg-type]
                    debug_log(f"#{idx:03} {hx}  {format_share(count / total)}")

        elapsed = time.perf_counter() - t_start
        remaining = (elapsed / (i + 1)) * (n - i - 1)
        log(f"wrote {written.name} in {format_duration(time.perf_counter() - t0, precise=True)}")
        print_progress_line(f"{i + 1}/{n}  eta {format_eta(remaining)}", done=True)

    (out_path / "log.txt").write_text("\n".join(log_lines) + "\n", encoding="utf-8")
    log(f"done in {format_duration(time.perf_counter() - t_start)}")
    if status:
        return status
    return 1 if failures else 0


# Entry point


def main(argv: Optional[List[str]] = None) -> None:
    enable_line_buffered_stdout()
    args = parse_cli_args(argv)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
