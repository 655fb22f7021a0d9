# pixel_tile/palette/extract.py
from __future__ import annotations

"""
Palette extraction.

Exports:
  extract_palette(raster, k, *, debug=False) -> Palette
  two_colour_palette(pixels) -> Palette
  frequency_palette(pixels, k, step) -> Palette
  adaptive_palette(pixels, target=256) -> Palette
  palette_from_grid(grid) -> list of RGBA swatches

Branches on the requested size k:
  k <= 2        : luminance bisection with black/white push
  2 < k < 64    : frequency buckets, 3..6 levels per channel
  64 <= k < 256 : frequency buckets, step 16
  k >= 256      : adaptive per-channel buckets plus an HSL diversity filter
"""

import math
from typing import List, Sequence, Tuple, Union

import numpy as np

from ..colour_convert import hsl_distance, hsl_to_rgb, luminance, rgb_to_hsl
from ..constants import (
    ADAPTIVE_FREQUENT_SHARE,
    ADAPTIVE_LEVEL_SPAN,
    ADAPTIVE_MIN_DISTANCE,
    ADAPTIVE_MIN_GRAY_STEP,
    ADAPTIVE_MIN_LEVELS,
    ADAPTIVE_SAMPLE_STRIDE,
    ADAPTIVE_TARGET,
    ALPHA_THRESHOLD,
    BLACK,
    CONTRAST_GUARANTEE_MAX_K,
    MEDIUM_QUANT_STEP,
    NEAR_BLACK_MAX,
    NEAR_WHITE_MIN,
    TWO_COLOUR_DARK_MAX,
    TWO_COLOUR_LIGHT_MIN,
    TWO_COLOUR_PUSH,
    WHITE,
)
from ..core_types import (
    ColourBucket,
    Palette,
    PixelGrid,
    Raster,
    RGBATuple,
    RGBTuple,
    is_near_black,
    is_near_white,
    round_half_up,
)
from ..errors import ExtractionError, InvalidColourCountError
from ..utils import (
    debug_log,
    key_value_pairs_to_string,
    opaque_pixels,
    palette_to_string,
    unique_visible_rgba,
    warn,
)
from .fallback import PaletteBuilder, create_diverse_palette


# Bucketing


def levels_for_count(k: int) -> int:
    """Per-channel bucket count for the small-palette frequency path."""
    if k <= 8:
        return 3
    if k <= 16:
        return 4
    if k <= 32:
        return 5
    return 6


def _bucket_colours(pixels: np.ndarray, keys: np.ndarray) -> List[ColourBucket]:
    """
    Group pixels by key row and average each group.

    Returns buckets in first-seen (row-major) order; averages are rounded half up.
    """
    if pixels.shape[0] == 0:
        return []
    _uniq, first_idx, inverse, counts = np.unique(
        keys, axis=0, return_index=True, return_inverse=True, return_counts=True
    )
    inverse = inverse.reshape(-1)
    n_buckets = counts.shape[0]
    px = pixels.astype(np.float64, copy=False)
    sums = np.zeros((n_buckets, 3), dtype=np.float64)
    for ch in range(3):
        sums[:, ch] = np.bincount(inverse, weights=px[:, ch], minlength=n_buckets)
    means = np.floor(sums / counts[:, None] + 0.5).astype(np.int64)

    order = np.argsort(first_idx, kind="stable")
    return [
        ColourBucket(
            rgb=(int(means[j, 0]), int(means[j, 1]), int(means[j, 2])),
            count=int(counts[j]),
        )
        for j in order
    ]


def _by_frequency(buckets: List[ColourBucket]) -> List[ColourBucket]:
    """Stable sort by count descending; ties keep first-seen order."""
    return sorted(buckets, key=lambda b: -b.count)


def _ensure_contrast(colours: List[RGBTuple], counts: List[int], k: int) -> None:
    """
    Make sure colours holds a near-black and a near-white entry, in place.

    Missing anchors are appended while there is room, otherwise they replace
    the least frequent entry that is not the sole remaining anchor.
    """
    for anchor, is_anchor in (
        (BLACK, lambda c: is_near_black(c, NEAR_BLACK_MAX)),
        (WHITE, lambda c: is_near_white(c, NEAR_WHITE_MIN)),
    ):
        if any(is_anchor(c) for c in colours):
            continue
        if len(colours) < k:
            colours.append(anchor)
            counts.append(0)
            continue

        protected = set()
        for check in (
            lambda c: is_near_black(c, NEAR_BLACK_MAX),
            lambda c: is_near_white(c, NEAR_WHITE_MIN),
        ):
            for i, c in enumerate(colours):
                if check(c):
                    protected.add(i)
                    break
        victim = -1
        for i in range(len(colours) - 1, -1, -1):
            if i in protected:
                continue
            if victim < 0 or counts[i] < counts[victim]:
                victim = i
        colours[victim] = anchor
        counts[victim] = 0


# Branches


def two_colour_palette(pixels: np.ndarray) -> Palette:
    """
    Split opaque pixels at the mean luminance and average each side.

    The dark side is pushed towards black and the light side towards white
    when they are not already extreme enough.
    """
    if pixels.shape[0] == 0:
        raise ExtractionError("no opaque pixels")
    lum = luminance(pixels)
    mean_lum = float(lum.mean())
    dark_mask = lum < mean_lum

    dark: RGBTuple = BLACK
    light: RGBTuple = WHITE
    push = TWO_COLOUR_PUSH

    dark_px = pixels[dark_mask]
    if dark_px.shape[0] > 0:
        avg = dark_px.astype(np.float64).mean(axis=0)
        dark = (round_half_up(avg[0]), round_half_up(avg[1]), round_half_up(avg[2]))
        if max(dark) > TWO_COLOUR_DARK_MAX:
            dark = (max(0, dark[0] - push), max(0, dark[1] - push), max(0, dark[2] - push))

    light_px = pixels[~dark_mask]
    if light_px.shape[0] > 0:
        avg = light_px.astype(np.float64).mean(axis=0)
        light = (round_half_up(avg[0]), round_half_up(avg[1]), round_half_up(avg[2]))
        if min(light) < TWO_COLOUR_LIGHT_MIN:
            light = (
                min(255, light[0] + push),
                min(255, light[1] + push),
                min(255, light[2] + push),
            )
    return [dark, light]


def frequency_palette(
    pixels: np.ndarray, k: int, step: float, *, ensure_contrast: bool
) -> Palette:
    """
    Most frequent bucket averages after flooring each channel to `step`.

    If the image has k buckets or fewer they are all returned in first-seen
    order; otherwise the top k by count.
    """
    if pixels.shape[0] == 0:
        raise ExtractionError("no opaque pixels")
    keys = np.floor(pixels.astype(np.float64) / float(step)).astype(np.int64)
    buckets = _bucket_colours(pixels, keys)

    if len(buckets) > k:
        buckets = _by_frequency(buckets)[:k]

    colours = [b.rgb for b in buckets]
    counts = [b.count for b in buckets]
    if ensure_contrast:
        _ensure_contrast(colours, counts, k)
    return colours[:k]


def _channel_stats(sample: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Per-channel min, max and mean of a pixel sample."""
    lo = sample.min(axis=0).astype(np.int64)
    hi = sample.max(axis=0).astype(np.int64)
    mean = sample.astype(np.float64).mean(axis=0)
    return lo, hi, mean


def adaptive_palette(
    pixels: np.ndarray,
    target: int = ADAPTIVE_TARGET,
    *,
    sample: np.ndarray | None = None,
    debug: bool = False,
) -> Palette:
    """
    High-precision extraction for large palettes.

    Each channel is split into max(6, ceil(range/42)) levels over its own
    observed range. The most frequent two thirds are kept outright, the rest
    only if they are far enough (in HSL terms) from everything selected.
    Short palettes are padded with a gray ramp and then an HSL sweep.
    """
    if pixels.shape[0] == 0:
        raise ExtractionError("no opaque pixels")

    if sample is None or sample.shape[0] == 0:
        sample = pixels[::ADAPTIVE_SAMPLE_STRIDE]
    lo, hi, mean = _channel_stats(sample)
    span = hi - lo
    levels = np.maximum(ADAPTIVE_MIN_LEVELS, np.ceil(span / ADAPTIVE_LEVEL_SPAN)).astype(
        np.int64
    )
    step = span.astype(np.float64) / (levels - 1).astype(np.float64)
    step[step == 0] = 1.0

    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Range", f"R({lo[0]}-{hi[0]}) G({lo[1]}-{hi[1]}) B({lo[2]}-{hi[2]})"),
                    ("Mean", "({:.1f}, {:.1f}, {:.1f})".format(*mean.tolist())),
                    ("Levels", "x".join(str(int(v)) for v in levels)),
                ]
            )
        )

    norm = pixels.astype(np.float64) - lo.astype(np.float64)
    snapped = np.floor(norm / step + 0.5) * step + lo.astype(np.float64)
    keys = np.floor(snapped + 0.5).astype(np.int64)
    buckets = _by_frequency(_bucket_colours(pixels, keys))

    frequent = int(math.floor(target * ADAPTIVE_FREQUENT_SHARE))
    builder = PaletteBuilder(target)
    selected_hsl = []
    for b in buckets[:frequent]:
        if builder.push(b.rgb):
            selected_hsl.append(rgb_to_hsl(*b.rgb))

    for b in buckets[frequent:]:
        if builder.full:
            break
        cand = rgb_to_hsl(*b.rgb)
        if all(hsl_distance(cand, s) >= ADAPTIVE_MIN_DISTANCE for s in selected_hsl):
            builder.push(b.rgb)
            selected_hsl.append(cand)

    if not builder.full:
        if debug:
            debug_log(f"padding adaptive palette from {len(builder)} to {target}")
        needed = target - len(builder)
        gray_step = max(ADAPTIVE_MIN_GRAY_STEP, 255 // needed)
        for v in range(0, 255, gray_step):
            if builder.full:
                break
            builder.push((v, v, v))
        for h in range(0, 360, 20):
            for s in (100, 75, 50, 25):
                for l in (25, 50, 75):
                    builder.push(hsl_to_rgb(h, s, l))

    return builder.result()


# Entry point


def _coerce_raster(raster: Union[Raster, np.ndarray]) -> Raster:
    if isinstance(raster, Raster):
        return raster
    return Raster.from_array(np.asarray(raster))


def extract_palette(
    raster: Union[Raster, np.ndarray], k: int, *, debug: bool = False
) -> Palette:
    """
    Derive an ordered palette of at most k representative colours.

    Raises InvalidImageError for a zero-size raster and
    InvalidColourCountError for k < 1. Any other failure falls back to
    create_diverse_palette(k).
    """
    src = _coerce_raster(raster)
    k = int(k)
    if k < 1:
        raise InvalidColourCountError(f"colour count must be positive, got {k}")

    pixels = opaque_pixels(src.pixels, ALPHA_THRESHOLD)
    try:
        if k <= 2:
            mode = "luminance split"
            palette = two_colour_palette(pixels)
        elif k < 64:
            levels = levels_for_count(k)
            mode = f"frequency ({levels} levels)"
            palette = frequency_palette(
                pixels,
                k,
                256.0 / levels,
                ensure_contrast=k <= CONTRAST_GUARANTEE_MAX_K,
            )
        elif k < ADAPTIVE_TARGET:
            mode = f"frequency (step {MEDIUM_QUANT_STEP})"
            palette = frequency_palette(
                pixels, k, float(MEDIUM_QUANT_STEP), ensure_contrast=False
            )
        else:
            mode = "adaptive"
            stride_sample = opaque_pixels(
                src.pixels.reshape(-1, 4)[::ADAPTIVE_SAMPLE_STRIDE], ALPHA_THRESHOLD
            )
            palette = adaptive_palette(
                pixels, ADAPTIVE_TARGET, sample=stride_sample, debug=debug
            )
        if not palette:
            raise ExtractionError("extraction produced an empty palette")
    except Exception as exc:
        warn(f"palette extraction failed ({exc}); using synthetic palette")
        return create_diverse_palette(k)

    palette = palette[:k]
    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Extract", mode),
                    ("Opaque pixels", int(pixels.shape[0])),
                    ("Requested", k),
                    ("Got", len(palette)),
                ]
            )
        )
        debug_log(f"palette: {palette_to_string(palette)}")
    return palette


def palette_from_grid(grid: PixelGrid) -> List[RGBATuple]:
    """Swatches for the editor: unique visible RGBA cells in first-seen order."""
    return unique_visible_rgba(grid, ALPHA_THRESHOLD)


def palette_has_contrast(palette: Sequence[Sequence[int]]) -> bool:
    """True if the palette holds both a near-black and a near-white entry."""
    return any(is_near_black(c, NEAR_BLACK_MAX) for c in palette) and any(
        is_near_white(c, NEAR_WHITE_MIN) for c in palette
    )


__all__ = [
    "levels_for_count",
    "two_colour_palette",
    "frequency_palette",
    "adaptive_palette",
    "extract_palette",
    "palette_from_grid",
    "palette_has_contrast",
]
