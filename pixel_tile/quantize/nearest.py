# pixel_tile/quantize/nearest.py
from __future__ import annotations

"""
Direct nearest-colour mapping (no diffusion).

Every pixel takes the palette entry with the smallest weighted RGB distance;
ties keep the earlier entry. Alpha is copied through unchanged.
"""

import numpy as np

from ..colour_convert import rgb_distance_weighted_vec
from ..core_types import U8Image


def nearest_indices(rgb: np.ndarray, pal_rgb: np.ndarray) -> np.ndarray:
    """Palette index per [N,3] row. argmin keeps the first of equal distances."""
    if rgb.shape[0] == 0:
        return np.zeros((0,), dtype=np.int64)
    return np.argmin(rgb_distance_weighted_vec(rgb, pal_rgb), axis=1)


def map_nearest(rgba: U8Image, pal_rgb: np.ndarray) -> U8Image:
    """
    Map an (H,W,4) image onto the palette.

    Args:
      rgba: uint8 [H,W,4]
      pal_rgb: uint8 [P,3], P >= 1
    Returns:
      uint8 [H,W,4]; RGB from the palette, alpha from the input
    """
    height, width = rgba.shape[0], rgba.shape[1]
    flat = rgba.reshape(-1, 4)
    idx = nearest_indices(flat[:, :3], pal_rgb)

    out = np.empty_like(flat, dtype=np.uint8)
    out[:, :3] = np.asarray(pal_rgb, dtype=np.uint8)[idx]
    out[:, 3] = flat[:, 3]
    return out.reshape(height, width, 4)


__all__ = ["nearest_indices", "map_nearest"]
