# imgtoy/ordered/generators.py
from __future__ import annotations

"""
Named threshold generators.

Each generator builds an N x N tile once and returns a TileStrategy sampling
it periodically. Shape-driven patterns assign a scalar to every tile cell and
rank the cells (ties in raster order), so the tile is a permutation of
k / N^2. Path-traced patterns walk a cursor over the tile and threshold cells
by first-visit order; cells the walk never reaches follow in raster order.

GENERATORS maps configuration names to builders.
"""

import math
from typing import Any, Callable, Dict, Iterator, Tuple

import numpy as np

from ..core_types import ConfigError
from .properties import DiagonalDirection, Increase, Orientation, Wrapping
from .strategy import TileStrategy

Position = Tuple[float, float]  # (x, y)


# Tile helpers


def _check_size(name: str, n: Any, minimum: int = 1) -> int:
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
        raise ConfigError(f"{name}: matrix size must be an integer, got {n!r}")
    if int(n) < minimum:
        raise ConfigError(f"{name}: matrix size must be >= {minimum}, got {n}")
    return int(n)


def _grid(n: int) -> Tuple[np.ndarray, np.ndarray]:
    """(xs, ys) float grids of shape (n, n)."""
    ys, xs = np.mgrid[0:n, 0:n]
    return xs.astype(np.float64), ys.astype(np.float64)


def _rank(values: np.ndarray) -> np.ndarray:
    """Rank cells by value (ties in raster order) and scale into [0, 1)."""
    flat = np.asarray(values, dtype=np.float64).ravel()
    order = np.argsort(flat, kind="stable")
    ranks = np.empty(flat.size, dtype=np.float64)
    ranks[order] = np.arange(flat.size, dtype=np.float64)
    return (ranks / flat.size).reshape(values.shape)


def _tile(name: str, tile: np.ndarray, **params: Any) -> TileStrategy:
    return TileStrategy(name, tile, tuple(params.items()))


def _centre_offsets(n: int) -> Tuple[np.ndarray, np.ndarray]:
    """Absolute offsets of each cell from the tile centre."""
    xs, ys = _grid(n)
    c = (n - 1) / 2.0
    return np.abs(xs - c), np.abs(ys - c)


# Matrix patterns


def _bayer_matrix(size: int) -> np.ndarray:
    m = np.zeros((1, 1), dtype=np.int64)
    while m.shape[0] < size:
        m = np.block([[4 * m, 4 * m + 2], [4 * m + 3, 4 * m + 1]])
    return m


def bayer(n: int) -> TileStrategy:
    """Classic recursive Bayer matrix; sizes that are not powers of two are cropped."""
    n = _check_size("bayer", n)
    full = 1 << max(0, (n - 1).bit_length())
    return _tile("bayer", _rank(_bayer_matrix(full)[:n, :n]), n=n)


def bootleg_bayer(n: int = 4) -> TileStrategy:
    """Bayer-like ordering from plain bit interleaving (Z-order)."""
    n = _check_size("bootleg-bayer", n)
    ys, xs = np.mgrid[0:n, 0:n]
    code = np.zeros((n, n), dtype=np.int64)
    for bit in range(max(1, (n - 1).bit_length())):
        code |= ((xs >> bit) & 1) << (2 * bit)
        code |= ((ys >> bit) & 1) << (2 * bit + 1)
    return _tile("bootleg-bayer", _rank(code), n=n)


def diamonds(n: int) -> TileStrategy:
    n = _check_size("diamonds", n)
    ax, ay = _centre_offsets(n)
    return _tile("diamonds", _rank(ax + ay), n=n)


def checkered_diamonds(n: int) -> TileStrategy:
    """Diamonds with the value inverted in alternating quadrants."""
    n = _check_size("checkered-diamonds", n, minimum=2)
    xs, ys = _grid(n)
    ax, ay = _centre_offsets(n)
    v = ax + ay
    flipped = (xs < n / 2.0) ^ (ys < n / 2.0)
    return _tile("checkered-diamonds", _rank(np.where(flipped, v.max() - v, v)), n=n)


def stars(n: int = 8) -> TileStrategy:
    n = _check_size("stars", n)
    ax, ay = _centre_offsets(n)
    v = 2.0 * np.minimum(ax, ay) + 0.5 * np.maximum(ax, ay)
    return _tile("stars", _rank(v), n=n)


def new_stars(n: int = 8) -> TileStrategy:
    """Eight-armed stars: arms along both axes and both diagonals."""
    n = _check_size("new-stars", n)
    ax, ay = _centre_offsets(n)
    arm = np.minimum(np.minimum(ax, ay), np.abs(ax - ay))
    return _tile("new-stars", _rank(2.0 * arm + 0.25 * np.hypot(ax, ay)), n=n)


def grid(n: int = 4) -> TileStrategy:
    n = _check_size("grid", n)
    xs, ys = _grid(n)
    return _tile("grid", _rank(np.minimum(xs, ys) + (xs + ys) / (4.0 * n)), n=n)


def trail(n: int = 8) -> TileStrategy:
    n = _check_size("trail", n)
    xs, ys = _grid(n)
    return _tile("trail", _rank(np.mod(xs + 3.0 * ys, n) + ys / n), n=n)


def criss_cross(n: int = 8) -> TileStrategy:
    n = _check_size("criss-cross", n)
    xs, ys = _grid(n)
    ax, ay = _centre_offsets(n)
    v = np.minimum(np.abs(xs - ys), np.abs(xs + ys - (n - 1))) + 0.01 * np.hypot(ax, ay)
    return _tile("criss-cross", _rank(v), n=n)


def static(n: int = 8, seed: int = 0) -> TileStrategy:
    """White-noise tile: a random permutation drawn once from seed."""
    n = _check_size("static", n)
    perm = np.random.default_rng(int(seed)).permutation(n * n).reshape(n, n)
    return _tile("static", perm / float(n * n), n=n, seed=int(seed))


def wavy(orientation: Orientation | str = Orientation.HORIZONTAL, n: int = 8) -> TileStrategy:
    if isinstance(orientation, str):
        orientation = Orientation.parse(orientation)
    n = _check_size("wavy", n)
    xs, ys = _grid(n)
    if orientation is Orientation.VERTICAL:
        xs, ys = ys, xs
    offset = np.rint((n / 4.0) * np.sin(2.0 * math.pi * xs / n))
    v = np.mod(ys + offset, n) + xs / (n * n)
    return _tile("wavy", _rank(v), n=n, orientation=orientation.value)


def diagonals(n: int = 4) -> TileStrategy:
    n = _check_size("diagonals", n)
    xs, ys = _grid(n)
    return _tile("diagonals", _rank(np.mod(xs + ys, n) + ys / n), n=n)


def diagonals_big(n: int = 8) -> TileStrategy:
    tile = diagonals(n).tile
    return _tile("diagonals-big", tile, n=int(tile.shape[0]))


def diamond_grid(n: int = 8) -> TileStrategy:
    """Distance to the nearest point of a diamond lattice (tile corners and centre)."""
    n = _check_size("diamond-grid", n)
    xs, ys = _grid(n)
    cx, cy = xs + 0.5, ys + 0.5
    centre = np.abs(cx - n / 2.0) + np.abs(cy - n / 2.0)
    corner = np.minimum(cx, n - cx) + np.minimum(cy, n - cy)
    return _tile("diamond-grid", _rank(np.minimum(centre, corner)), n=n)


def speckle_squares(n: int = 6) -> TileStrategy:
    n = _check_size("speckle-squares", n, minimum=2)
    sub = max(1, n // 2)
    ys, xs = np.mgrid[0:n, 0:n]
    half = (sub - 1) / 2.0
    d = np.maximum(np.abs(np.mod(xs, sub) - half), np.abs(np.mod(ys, sub) - half))
    parity = (xs // sub + ys // sub) % 2 == 1
    return _tile("speckle-squares", _rank(np.where(parity, d.max() - d, d)), n=n)


def _scale_distance(xs: np.ndarray, ys: np.ndarray, n: int) -> np.ndarray:
    centres = [(n / 2.0, float(n)), (0.0, n / 2.0), (float(n), n / 2.0), (n / 2.0, 0.0)]
    cx, cy = xs + 0.5, ys + 0.5
    return np.min([np.hypot(cx - px, cy - py) for px, py in centres], axis=0)


def scales(n: int = 8) -> TileStrategy:
    """Overlapping fish scales: distance to the nearest staggered circle centre."""
    n = _check_size("scales", n, minimum=2)
    xs, ys = _grid(n)
    return _tile("scales", _rank(_scale_distance(xs, ys, n)), n=n)


def trail_scales(n: int = 8) -> TileStrategy:
    n = _check_size("trail-scales", n, minimum=2)
    xs, ys = _grid(n)
    shifted = np.mod(xs + np.floor(ys / 2.0), n)
    return _tile("trail-scales", _rank(_scale_distance(shifted, ys, n)), n=n)


# Parameterised patterns


def _increase_values(k: np.ndarray, n: int, increase: Increase) -> np.ndarray:
    f = int(increase.factor)
    if increase.kind == "linear":
        return np.mod(k * f, n) / float(n)
    if f == 1:
        return k / float(n)
    # (f^k - 1) / (f^n - 1), written to stay finite for large n
    lnf = math.log(f)
    return np.exp((k - n) * lnf) * (-np.expm1(-k * lnf)) / (-math.expm1(-n * lnf))


def diagonals_n(
    n: int,
    direction: DiagonalDirection | str = DiagonalDirection.DOWN_RIGHT,
    increase: Increase | None = None,
) -> TileStrategy:
    """Diagonal bands whose thresholds grow by a linear or exponential law."""
    n = _check_size("diagonals-n", n)
    if isinstance(direction, str):
        direction = DiagonalDirection.parse(direction)
    increase = increase or Increase("linear", 1)
    xs, ys = _grid(n)
    if direction is DiagonalDirection.DOWN_RIGHT:
        k = np.mod(xs - ys, n)
    else:
        k = np.mod(xs + ys, n)
    return _tile(
        "diagonals-n",
        _increase_values(k, n, increase),
        n=n,
        direction=direction.value,
        increase=f"{increase.kind}({increase.factor})",
    )


def diagonal_tiles(n: int) -> TileStrategy:
    """Quadrants of diagonals alternating direction."""
    n = _check_size("diagonal-tiles", n, minimum=2)
    xs, ys = _grid(n)
    m = max(1, n // 2)
    quadrant = ((xs >= n / 2.0).astype(int) + (ys >= n / 2.0).astype(int)) % 2
    v = np.where(quadrant == 0, np.mod(xs + ys, m), np.mod(xs - ys, m))
    return _tile("diagonal-tiles", _rank(v), n=n)


def bouncing_bowtie(n: int) -> TileStrategy:
    n = _check_size("bouncing-bowtie", n)
    ax, ay = _centre_offsets(n)
    return _tile("bouncing-bowtie", _rank((ay - ax) + 0.01 * ax), n=n)


def scanline(n: int, orientation: Orientation | str = Orientation.HORIZONTAL) -> TileStrategy:
    """One threshold per line: k / n for row (or column) k."""
    n = _check_size("scanline", n)
    if isinstance(orientation, str):
        orientation = Orientation.parse(orientation)
    xs, ys = _grid(n)
    lines = ys if orientation is Orientation.HORIZONTAL else xs
    return _tile("scanline", lines / float(n), n=n, orientation=orientation.value)


def starburst(n: int) -> TileStrategy:
    n = _check_size("starburst", n)
    xs, ys = _grid(n)
    c = (n - 1) / 2.0
    theta = np.arctan2(ys - c, xs - c)
    v = np.abs(np.sin(4.0 * theta)) + 0.05 * np.hypot(xs - c, ys - c)
    return _tile("starburst", _rank(v), n=n)


def shiny_bowtie(n: int) -> TileStrategy:
    n = _check_size("shiny-bowtie", n)
    ax, ay = _centre_offsets(n)
    return _tile("shiny-bowtie", _rank((ay - ax) * (1.0 + np.hypot(ax, ay))), n=n)


def marble_tile(n: int) -> TileStrategy:
    n = _check_size("marble-tile", n)
    xs, ys = _grid(n)
    w = 2.0 * math.pi / n
    v = np.sin(w * (xs + 2.0 * np.sin(w * ys))) + 0.5 * np.sin(w * (xs + ys))
    return _tile("marble-tile", _rank(v), n=n)


# Path-traced patterns


def _trace(n: int, path: Iterator[Position], halt_threshold: int) -> np.ndarray:
    """
    Threshold tile from first-visit order along path.

    The walk stops once halt_threshold consecutive positions add no new cell or
    every cell has been visited. Positions outside [0, n) are ignored.
    """
    order = np.full((n, n), -1, dtype=np.int64)
    visited = 0
    idle = 0
    for x, y in path:
        cx, cy = int(math.floor(x)), int(math.floor(y))
        if 0 <= cx < n and 0 <= cy < n and order[cy, cx] < 0:
            order[cy, cx] = visited
            visited += 1
            idle = 0
            if visited == n * n:
                break
        else:
            idle += 1
            if idle >= halt_threshold:
                break
    rest = order < 0
    order[rest] = np.arange(visited, n * n)
    return order / float(n * n)


def _check_halt(name: str, halt_threshold: Any) -> int:
    if int(halt_threshold) < 1:
        raise ConfigError(f"{name}: halt-threshold must be >= 1, got {halt_threshold}")
    return int(halt_threshold)


def curve_path(
    n: int, amplitude: float = 1.0, promotion: float = 0.0, halt_threshold: int = 100
) -> TileStrategy:
    """
    A cursor sweeping across the tile on a sine-bent heading. The swing grows by
    promotion every step and the path drifts one row per lap; positions wrap.
    """
    n = _check_size("curve-path", n)
    halt = _check_halt("curve-path", halt_threshold)

    def path() -> Iterator[Position]:
        x = y = 0.0
        swing = float(amplitude)
        step = 0
        while True:
            yield (x % n, y % n)
            heading = swing * math.sin(2.0 * math.pi * step / n)
            x += math.cos(heading)
            y += math.sin(heading) + 1.0 / n
            swing += float(promotion)
            step += 1

    return _tile(
        "curve-path",
        _trace(n, path(), halt),
        n=n,
        amplitude=float(amplitude),
        promotion=float(promotion),
        halt_threshold=halt,
    )


def zigzag(
    n: int,
    halt_threshold: int = 100,
    wrapping: Wrapping | str = Wrapping.NONE,
    magnitude: Tuple[float, float] = (1.0, 1.0),
    promotion: Tuple[float, float] = (0.0, 0.0),
) -> TileStrategy:
    """
    Row-wise zigzag. The cursor moves magnitude.x per step, bouncing off (or
    wrapping around, per wrapping) the tile edges; each edge hit advances it
    magnitude.y rows and grows both magnitudes by promotion. Tuples are (y, x).
    """
    n = _check_size("zigzag", n)
    halt = _check_halt("zigzag", halt_threshold)
    if isinstance(wrapping, str):
        wrapping = Wrapping.parse(wrapping)
    mag_y, mag_x = float(magnitude[0]), float(magnitude[1])
    pro_y, pro_x = float(promotion[0]), float(promotion[1])

    def reflect(value: float, direction: int) -> Tuple[float, int]:
        if value < 0.0:
            return -value, -direction
        if value >= n:
            return 2.0 * n - value - 1e-9, -direction
        return value, direction

    def path() -> Iterator[Position]:
        x = y = 0.0
        dx = dy = 1
        my, mx = mag_y, mag_x
        while True:
            yield (x, y)
            x += dx * mx
            if 0.0 <= x < n:
                continue
            if wrapping.wraps_x:
                x %= n
            else:
                x, dx = reflect(x, dx)
                x = min(max(x, 0.0), n - 1e-9)
            y += dy * my
            if wrapping.wraps_y:
                y %= n
            else:
                y, dy = reflect(y, dy)
                y = min(max(y, 0.0), n - 1e-9)
            mx += pro_x
            my += pro_y

    return _tile(
        "zigzag",
        _trace(n, path(), halt),
        n=n,
        halt_threshold=halt,
        wrapping=wrapping.value,
        magnitude=(mag_y, mag_x),
        promotion=(pro_y, pro_x),
    )


def broken_spiral(
    n: int,
    base_step: Tuple[float, float] = (1.0, 1.0),
    oob_threshold: int | None = None,
    increment_by: float = 0.0,
    increment_in: int = 1,
) -> TileStrategy:
    """
    Square spiral out of the tile centre with legs of growing length. Steps are
    base_step (y, x) cells and grow by increment_by every increment_in legs, so
    larger steps leave gaps. The walk ends after oob_threshold consecutive legs
    that reach no new cell.
    """
    n = _check_size("broken-spiral", n)
    step_y, step_x = float(base_step[0]), float(base_step[1])
    if step_y <= 0.0 or step_x <= 0.0:
        raise ConfigError(f"broken-spiral: base-step must be positive, got {base_step}")
    if oob_threshold is None:
        oob_threshold = int(n / min(step_y, step_x))
    oob_threshold = max(1, int(oob_threshold))
    if int(increment_in) < 1:
        raise ConfigError(f"broken-spiral: increment-in must be >= 1, got {increment_in}")

    order = np.full((n, n), -1, dtype=np.int64)
    visited = 0
    x = y = float(n // 2)
    sx, sy = step_x, step_y
    directions = ((1, 0), (0, 1), (-1, 0), (0, -1))
    idle_legs = 0
    order[int(y), int(x)] = visited
    visited += 1

    leg = 0
    max_legs = 4 * n * n + 16
    while visited < n * n and idle_legs < oob_threshold and leg < max_legs:
        dx, dy = directions[leg % 4]
        found = False
        for _ in range(leg // 2 + 1):
            x += dx * sx
            y += dy * sy
            cx, cy = int(math.floor(x)), int(math.floor(y))
            if 0 <= cx < n and 0 <= cy < n and order[cy, cx] < 0:
                order[cy, cx] = visited
                visited += 1
                found = True
        idle_legs = 0 if found else idle_legs + 1
        leg += 1
        if leg % int(increment_in) == 0:
            sx = max(sx + float(increment_by), 1e-3)
            sy = max(sy + float(increment_by), 1e-3)

    rest = order < 0
    order[rest] = np.arange(visited, n * n)
    return _tile(
        "broken-spiral",
        order / float(n * n),
        n=n,
        base_step=(step_y, step_x),
        oob_threshold=oob_threshold,
        increment_by=float(increment_by),
        increment_in=int(increment_in),
    )


def modulo_snake(
    n: int, increment_by: float = 1.0, modulo: int = 10, iterations: int = 1
) -> TileStrategy:
    """
    Boustrophedon walk with a running counter taken modulo `modulo`; later
    passes overwrite earlier ones but continue the count.
    """
    n = _check_size("modulo-snake", n)
    if int(modulo) < 1:
        raise ConfigError(f"modulo-snake: modulo must be >= 1, got {modulo}")
    if int(iterations) < 1:
        raise ConfigError(f"modulo-snake: iterations must be >= 1, got {iterations}")
    modulo = int(modulo)

    tile = np.zeros((n, n), dtype=np.float64)
    counter = 0.0
    for _ in range(int(iterations)):
        for y in range(n):
            xs = range(n) if y % 2 == 0 else range(n - 1, -1, -1)
            for x in xs:
                tile[y, x] = (counter % modulo) / modulo
                counter += float(increment_by)
    return _tile(
        "modulo-snake",
        tile,
        n=n,
        increment_by=float(increment_by),
        modulo=modulo,
        iterations=int(iterations),
    )


# Registry

GENERATORS: Dict[str, Callable[..., TileStrategy]] = {
    "bayer": bayer,
    "diamonds": diamonds,
    "checkered-diamonds": checkered_diamonds,
    "stars": stars,
    "new-stars": new_stars,
    "grid": grid,
    "trail": trail,
    "criss-cross": criss_cross,
    "static": static,
    "wavy": wavy,
    "bootleg-bayer": bootleg_bayer,
    "diagonals": diagonals,
    "diagonals-big": diagonals_big,
    "diamond-grid": diamond_grid,
    "speckle-squares": speckle_squares,
    "scales": scales,
    "trail-scales": trail_scales,
    "diagonals-n": diagonals_n,
    "diagonal-tiles": diagonal_tiles,
    "bouncing-bowtie": bouncing_bowtie,
    "scanline": scanline,
    "starburst": starburst,
    "shiny-bowtie": shiny_bowtie,
    "marble-tile": marble_tile,
    "curve-path": curve_path,
    "zigzag": zigzag,
    "broken-spiral": broken_spiral,
    "modulo-snake": modulo_snake,
}


def generator_names() -> list[str]:
    return list(GENERATORS)


def build_generator(name: str, **params: Any) -> TileStrategy:
    """Look up a generator by name and build it; unknown names are a ConfigError."""
    builder = GENERATORS.get(name)
    if builder is None:
        raise ConfigError(
            f"{name!r} is not a valid ordered strategy. Allowed strategies are: {generator_names()}"
        )
    try:
        return builder(**params)
    except TypeError as exc:
        raise ConfigError(f"{name}: bad parameters {sorted(params)}: {exc}") from exc


__all__ = [
    # registry
    "GENERATORS",
    "generator_names",
    "build_generator",
    # matrix patterns
    "bayer",
    "bootleg_bayer",
    "diamonds",
    "checkered_diamonds",
    "stars",
    "new_stars",
    "grid",
    "trail",
    "criss_cross",
    "static",
    "wavy",
    "diagonals",
    "diagonals_big",
    "diamond_grid",
    "speckle_squares",
    "scales",
    "trail_scales",
    # parameterised patterns
    "diagonals_n",
    "diagonal_tiles",
    "bouncing_bowtie",
    "scanline",
    "starburst",
    "shiny_bowtie",
    "marble_tile",
    # path-traced patterns
    "curve_path",
    "zigzag",
    "broken_spiral",
    "modulo_snake",
]
