import numpy as np

from imgtoy.surface import Surface


def grey_surface(width: int, height: int, level: float = 0.5) -> Surface:
    return Surface(np.full((height, width, 3), level, dtype=np.float64))


def horizontal_ramp(width: int, height: int) -> Surface:
    row = np.linspace(0.0, 1.0, width)
    rgb = np.repeat(np.repeat(row[None, :, None], height, axis=0), 3, axis=2)
    return Surface(rgb)
