import numpy as np
import pytest

from imgtoy.colour import BLACK, WHITE
from imgtoy.palette import Palette


@pytest.fixture
def bw_palette():
    return Palette.from_colours([BLACK, WHITE])


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
