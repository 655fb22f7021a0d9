# pixel_tile/colour_convert.py
from __future__ import annotations

"""
Colour conversions and metrics.

Exports:
  rgb_to_hsl(r, g, b)
  hsl_to_rgb(h, s, l)
  hsl_distance(hsl1, hsl2)
  perceptual_distance(c1, c2)
  rgb_distance_weighted(c1, c2)
  rgb_distance_weighted_vec(pixels, palette)
  nearest_palette_index(rgb, palette)
  luminance(rgb)
"""

from typing import Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from .constants import RGB_WEIGHTS
from .core_types import RGBTuple, round_half_up

HSL = Tuple[float, float, float]


# RGB <-> HSL


def rgb_to_hsl(r: float, g: float, b: float) -> HSL:
    """
    RGB (0..255) to HSL with h in [0, 360), s and l in [0, 100].
    Hue is 0 for achromatic input.
    """
    rf, gf, bf = r / 255.0, g / 255.0, b / 255.0
    c_max = max(rf, gf, bf)
    c_min = min(rf, gf, bf)
    light = (c_max + c_min) / 2.0

    if c_max == c_min:
        return 0.0, 0.0, light * 100.0

    d = c_max - c_min
    sat = d / (2.0 - c_max - c_min) if light > 0.5 else d / (c_max + c_min)
    if c_max == rf:
        hue = (gf - bf) / d + (6.0 if gf < bf else 0.0)
    elif c_max == gf:
        hue = (bf - rf) / d + 2.0
    else:
        hue = (rf - gf) / d + 4.0
    hue /= 6.0
    return (hue * 360.0) % 360.0, sat * 100.0, light * 100.0


def _hue_to_channel(p: float, q: float, t: float) -> float:
    if t < 0.0:
        t += 1.0
    if t > 1.0:
        t -= 1.0
    if t < 1.0 / 6.0:
        return p + (q - p) * 6.0 * t
    if t < 1.0 / 2.0:
        return q
    if t < 2.0 / 3.0:
        return p + (q - p) * (2.0 / 3.0 - t) * 6.0
    return p


def hsl_to_rgb(h: float, s: float, l: float) -> RGBTuple:
    """HSL (h degrees, s and l in 0..100) to rounded RGB (0..255)."""
    hf = (h % 360.0) / 360.0
    sf = s / 100.0
    lf = l / 100.0

    if sf == 0.0:
        r = g = b = lf
    else:
        q = lf * (1.0 + sf) if lf < 0.5 else lf + sf - lf * sf
        p = 2.0 * lf - q
        r = _hue_to_channel(p, q, hf + 1.0 / 3.0)
        g = _hue_to_channel(p, q, hf)
        b = _hue_to_channel(p, q, hf - 1.0 / 3.0)

    return (
        round_half_up(r * 255.0),
        round_half_up(g * 255.0),
        round_half_up(b * 255.0),
    )


# Distances


def hsl_distance(hsl1: Sequence[float], hsl2: Sequence[float]) -> float:
    """
    Perceptual distance between two HSL colours.

    Hue counts more when both colours are saturated, saturation counts more
    at mid lightness, lightness always has a fixed weight. Unbounded above;
    only meaningful for ranking.
    """
    h1, s1, l1 = float(hsl1[0]), float(hsl1[1]), float(hsl1[2])
    h2, s2, l2 = float(hsl2[0]), float(hsl2[1]), float(hsl2[2])

    hue_diff = abs(h1 - h2)
    if hue_diff > 180.0:
        hue_diff = 360.0 - hue_diff

    hue_w = (s1 + s2) / 200.0 * 2.0
    sat_w = (1.0 - abs(l1 - 50.0) / 50.0) * 1.5
    light_w = 2.0

    total = (
        hue_w * (hue_diff / 180.0) ** 2
        + sat_w * ((s1 - s2) / 100.0) ** 2
        + light_w * ((l1 - l2) / 100.0) ** 2
    )
    return float(np.sqrt(max(total, 0.0)))


def perceptual_distance(c1: Sequence[int], c2: Sequence[int]) -> float:
    """hsl_distance() for two RGB colours."""
    return hsl_distance(rgb_to_hsl(*c1[:3]), rgb_to_hsl(*c2[:3]))


def rgb_distance_weighted(c1: Sequence[float], c2: Sequence[float]) -> float:
    """0.3*dr^2 + 0.59*dg^2 + 0.11*db^2."""
    wr, wg, wb = RGB_WEIGHTS
    dr = float(c1[0]) - float(c2[0])
    dg = float(c1[1]) - float(c2[1])
    db = float(c1[2]) - float(c2[2])
    return wr * dr * dr + wg * dg * dg + wb * db * db


def rgb_distance_weighted_vec(
    pixels: np.ndarray, palette: np.ndarray
) -> NDArray[np.float64]:
    """
    Weighted squared distance between every pixel and every palette row.

    Args:
      pixels: [N,3] (any numeric dtype)
      palette: [P,3]
    Returns:
      float64 array [N,P]
    """
    px = np.asarray(pixels, dtype=np.float64).reshape(-1, 3)
    pal = np.asarray(palette, dtype=np.float64).reshape(-1, 3)
    diff = px[:, None, :] - pal[None, :, :]
    weights = np.asarray(RGB_WEIGHTS, dtype=np.float64)
    return np.sum(diff * diff * weights, axis=2)


def nearest_palette_index(rgb: Sequence[float], palette: np.ndarray) -> int:
    """
    Index of the nearest palette row by weighted RGB distance.
    Ties keep the earliest row.
    """
    dist = rgb_distance_weighted_vec(np.asarray(rgb[:3])[None, :], palette)[0]
    # argmin returns the first minimum, which gives the earliest-wins tie rule.
    return int(np.argmin(dist))


def luminance(rgb: np.ndarray) -> NDArray[np.float64]:
    """Perceived brightness 0.299r + 0.587g + 0.114b. Vectorised over (...,3)."""
    arr = np.asarray(rgb, dtype=np.float64)
    return 0.299 * arr[..., 0] + 0.587 * arr[..., 1] + 0.114 * arr[..., 2]


__all__ = [
    "HSL",
    "rgb_to_hsl",
    "hsl_to_rgb",
    "hsl_distance",
    "perceptual_distance",
    "rgb_distance_weighted",
    "rgb_distance_weighted_vec",
    "nearest_palette_index",
    "luminance",
]
