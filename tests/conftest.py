import io

import numpy as np
import pytest
from PIL import Image

from pixel_tile.core_types import Raster


def solid(width, height, rgba):
    arr = np.empty((height, width, 4), dtype=np.uint8)
    arr[...] = np.asarray(rgba, dtype=np.uint8)
    return Raster.from_array(arr)


def png_bytes(arr):
    buf = io.BytesIO()
    Image.fromarray(np.ascontiguousarray(arr, dtype=np.uint8)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def noisy_raster():
    rng = np.random.default_rng(1234)
    return Raster.from_array(rng.integers(0, 256, size=(32, 32, 3), dtype=np.uint8))


@pytest.fixture
def midtone_raster():
    # no channel ever reaches the near-black or near-white bands
    rng = np.random.default_rng(99)
    return Raster.from_array(rng.integers(60, 200, size=(24, 24, 3), dtype=np.uint8))
