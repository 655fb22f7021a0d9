# pixel_tile/utils.py
from __future__ import annotations

"""
Shared utilities for pixel_tile.

Includes time formatting, visible-colour counting, colour usage reports,
and tidy print-based logging used by the engine and the CLI.
"""

import sys
from typing import Any, Iterable, List, Tuple

import numpy as np

from .constants import ALPHA_THRESHOLD
from .core_types import PixelGrid, RGBTuple, U8Image, rgb_to_hex


#  Time formatting


def format_seconds_compact(seconds: float) -> str:
    """Human-friendly seconds: '<ms>ms', '<s>s', or 'Mm Ss'."""
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f}ms"
    if seconds < 60.0:
        return f"{seconds:.3f}s"
    minutes = int(seconds // 60)
    return f"{minutes}m {seconds - 60 * minutes:.1f}s"


# Colour helpers


def opaque_pixels(rgba: U8Image, threshold: int = ALPHA_THRESHOLD) -> np.ndarray:
    """Row-major [N,3] uint8 RGB rows of pixels with alpha >= threshold."""
    flat = np.asarray(rgba, dtype=np.uint8).reshape(-1, 4)
    return flat[flat[:, 3] >= threshold, :3]


def unique_visible_rgba(
    grid: PixelGrid, threshold: int = ALPHA_THRESHOLD
) -> List[Tuple[int, int, int, int]]:
    """Unique RGBA values among visible cells, in row-major first-seen order."""
    seen: dict = {}
    for r, g, b, a in np.asarray(grid, dtype=np.uint8).reshape(-1, 4).tolist():
        if a < threshold:
            continue
        seen.setdefault((r, g, b, a), None)
    return list(seen.keys())


def colour_usage_report(
    grid: PixelGrid, threshold: int = ALPHA_THRESHOLD
) -> List[Tuple[str, int]]:
    """
    Simple colour usage report for visible cells.

    Returns a list of (hex, count) sorted by count descending.
    """
    flat = np.asarray(grid, dtype=np.uint8).reshape(-1, 4)
    visible = flat[flat[:, 3] >= threshold, :3]
    if visible.shape[0] == 0:
        return []
    uniques, counts = np.unique(visible, axis=0, return_counts=True)
    report: List[Tuple[str, int]] = []
    for rgb_row, count in sorted(zip(uniques, counts), key=lambda x: -int(x[1])):
        report.append((rgb_to_hex(rgb_row), int(count)))
    return report


def palette_to_string(palette: Iterable[RGBTuple], limit: int = 8) -> str:
    """Compact palette preview, e.g. '#000000 #ffffff ... (+14)'."""
    items = list(palette)
    head = " ".join(rgb_to_hex(c) for c in items[:limit])
    extra = len(items) - limit
    return f"{head} ... (+{extra})" if extra > 0 else head


# Pretty logging


def format_bool_on_off(value: Any) -> str:
    """Pretty boolean: 'on'/'off' for bools; str(value) otherwise."""
    if isinstance(value, bool):
        return "on" if value else "off"
    return str(value)


def format_number_compact(value: Any) -> str:
    """Pretty number: 1_234 style for ints; compact for floats; passthrough otherwise."""
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, float):
        text = f"{value:.3f}".rstrip("0").rstrip(".")
        return text
    return str(value)


def key_value_pairs_to_string(
    pairs: Iterable[Tuple[str, Any]], sep: str = "  ", eq: str = ": "
) -> str:
    """
    Format (name, value) pairs as 'Name: value' blocks separated by sep.
    Uses format_bool_on_off / format_number_compact for readability.
    """
    out: List[str] = []
    for name, value in pairs:
        display = (
            format_bool_on_off(value)
            if isinstance(value, bool)
            else format_number_compact(value)
        )
        out.append(f"{name}{eq}{display}")
    return sep.join(out)


def print_config_line(
    section: str, pairs: Iterable[Tuple[str, Any]], debug: bool
) -> None:
    """
    Emit a single human-readable config line, e.g.:
      [pixelate] Colours: 16  Mode: nearest  Palette: 16
    Routes to debug_log() when debug=True, else to log().
    """
    line = f"[{section}] {key_value_pairs_to_string(pairs)}"
    (debug_log if debug else log)(line)


def print_banner(title: str) -> None:
    """Section banner."""
    print(f"\n=== {title} ===", flush=True)


def log(message: str) -> None:
    """Plain log line."""
    print(message, flush=True)


def debug_log(message: str) -> None:
    """Debug log line."""
    print(f"[debug] {message}", flush=True)


def warn(message: str) -> None:
    """Warning log line."""
    print(f"[warn] {message}", flush=True)


def error(message: str) -> None:
    """Error log line to stderr."""
    print(f"[error] {message}", file=sys.stderr, flush=True)


__all__ = [
    "format_seconds_compact",
    "opaque_pixels",
    "unique_visible_rgba",
    "colour_usage_report",
    "palette_to_string",
    "format_bool_on_off",
    "format_number_compact",
    "key_value_pairs_to_string",
    "print_config_line",
    "print_banner",
    "log",
    "debug_log",
    "warn",
    "error",
]
