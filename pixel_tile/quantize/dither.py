# pixel_tile/quantize/dither.py
from __future__ import annotations

"""
Floyd-Steinberg error diffusion onto an explicit palette.

- Row-major scan (no serpentine), weighted RGB distance for the nearest pick.
- The palette colour goes to the output buffer; the error is diffused into a
  float working copy, so only unvisited pixels ever receive error.
- Working values are clamped to [0, 255] after each accumulation.
"""

from typing import Tuple

import numpy as np

from ..colour_convert import rgb_distance_weighted_vec
from ..core_types import U8Image

# Error diffusion kernel: (dx, dy, weight). Weights sum to 16/16.
KERNEL_FS: Tuple[Tuple[int, int, float], ...] = (
    (1, 0, 7 / 16),
    (-1, 1, 3 / 16),
    (0, 1, 5 / 16),
    (1, 1, 1 / 16),
)


def diffuse_error(work: np.ndarray, x: int, y: int, err: np.ndarray) -> None:
    """
    Spread err (per-channel, working value minus chosen) from (x, y) to its
    unvisited neighbours in work, in place.
    """
    height, width = work.shape[0], work.shape[1]
    for dx, dy, weight in KERNEL_FS:
        nx, ny = x + dx, y + dy
        if 0 <= nx < width and 0 <= ny < height:
            work[ny, nx, :3] = np.clip(work[ny, nx, :3] + err * weight, 0.0, 255.0)


def dither_floyd_steinberg(rgba: U8Image, pal_rgb: np.ndarray) -> U8Image:
    """
    Map an (H,W,4) image onto the palette with Floyd-Steinberg diffusion.

    Args:
      rgba: uint8 [H,W,4]
      pal_rgb: uint8 [P,3], P >= 1
    Returns:
      uint8 [H,W,4]; every RGB is a palette entry, alpha is copied through
    """
    height, width = rgba.shape[0], rgba.shape[1]
    pal = np.asarray(pal_rgb, dtype=np.uint8)
    pal_f = pal.astype(np.float64)

    work = rgba.astype(np.float64)
    out = np.empty_like(rgba, dtype=np.uint8)
    out[..., 3] = rgba[..., 3]

    for y in range(height):
        for x in range(width):
            here = work[y, x, :3]
            j = int(np.argmin(rgb_distance_weighted_vec(here[None, :], pal_f)[0]))
            out[y, x, :3] = pal[j]
            diffuse_error(work, x, y, here - pal_f[j])

    return out


__all__ = ["KERNEL_FS", "diffuse_error", "dither_floyd_steinberg"]
