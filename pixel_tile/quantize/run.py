# pixel_tile/quantize/run.py
from __future__ import annotations

"""
Pixelation pipeline.

raster -> palette (full resolution) -> 16x16 area resample -> palette mapping.
Large palettes are dithered, small ones mapped directly.
"""

import time
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from ..constants import BLACK, DITHER_MIN_PALETTE, GRID_SIZE, WHITE
from ..core_types import Palette, PixelGrid, Raster, coerce_to_rgb_tuple
from ..errors import InvalidColourCountError
from ..image_io import resize_to_grid
from ..palette import extract_palette
from ..utils import debug_log, format_seconds_compact, key_value_pairs_to_string, warn
from .dither import dither_floyd_steinberg
from .nearest import map_nearest


@dataclass(frozen=True)
class PixelateResult:
    """Output of one pixelation run."""

    grid: PixelGrid
    palette: Palette
    dithered: bool


def _palette_array(palette: Sequence[Sequence[int]]) -> np.ndarray:
    rows = [coerce_to_rgb_tuple(c) for c in palette]
    return np.array(rows, dtype=np.uint8).reshape(-1, 3)


def apply_palette(
    raster: Union[Raster, np.ndarray],
    palette: Sequence[Sequence[int]],
    *,
    debug: bool = False,
) -> PixelGrid:
    """
    Recolour a raster onto palette and return a 16x16 grid.

    Input that is not already 16x16 is area-resampled first. An empty
    palette is replaced by [black, white]. Palettes of 128+ colours use
    Floyd-Steinberg diffusion; smaller ones use direct nearest mapping.
    """
    src = raster if isinstance(raster, Raster) else Raster.from_array(np.asarray(raster))
    small = resize_to_grid(src, GRID_SIZE)

    if len(palette) == 0:
        warn("empty palette; using black and white")
        palette = [BLACK, WHITE]
    pal_rgb = _palette_array(palette)

    rgba = np.array(small.pixels, dtype=np.uint8)
    if pal_rgb.shape[0] >= DITHER_MIN_PALETTE:
        grid = dither_floyd_steinberg(rgba, pal_rgb)
    else:
        grid = map_nearest(rgba, pal_rgb)
    # fully transparent cells carry no colour, same as an erased cell
    grid[grid[..., 3] == 0] = 0

    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Palette", int(pal_rgb.shape[0])),
                    (
                        "Mapping",
                        "floyd-steinberg"
                        if pal_rgb.shape[0] >= DITHER_MIN_PALETTE
                        else "nearest",
                    ),
                ]
            )
        )
    return np.ascontiguousarray(grid, dtype=np.uint8)


def pixelate(
    raster: Raster,
    k: int,
    *,
    palette: Optional[Sequence[Sequence[int]]] = None,
    debug: bool = False,
) -> PixelateResult:
    """
    Full pipeline for one (raster, k) pair.

    The palette is extracted from the full-resolution raster unless given,
    then truncated to k and applied to the 16x16 downsample.
    """
    if int(k) < 1:
        raise InvalidColourCountError(f"colour count must be positive, got {k}")
    t_start = time.perf_counter()

    if palette is None:
        pal = extract_palette(raster, k, debug=debug)
    else:
        pal = [coerce_to_rgb_tuple(c) for c in palette]
    if len(pal) > k:
        if debug:
            debug_log(f"palette has {len(pal)} colours, limiting to {k}")
        pal = pal[:k]
    t_palette = time.perf_counter()

    grid = apply_palette(raster, pal, debug=debug)
    t_done = time.perf_counter()

    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Source", f"{raster.width}x{raster.height}"),
                    ("Extract", format_seconds_compact(t_palette - t_start)),
                    ("Map", format_seconds_compact(t_done - t_palette)),
                ]
            )
        )
    used = pal if pal else [BLACK, WHITE]
    return PixelateResult(
        grid=grid, palette=list(used), dithered=len(used) >= DITHER_MIN_PALETTE
    )


__all__ = ["PixelateResult", "apply_palette", "pixelate"]
