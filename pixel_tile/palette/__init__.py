# pixel_tile/palette/__init__.py
"""
Palette API.

Provides:
  extract_palette(raster, k, *, debug=False) -> list[(r, g, b)]
    Ordered palette of at most k representative colours. Never fails for a
    valid raster; internal errors fall back to create_diverse_palette(k).

  create_diverse_palette(count) -> list[(r, g, b)]
    Deterministic synthetic palette, black and white first.

  palette_from_grid(grid) -> list[(r, g, b, a)]
    Editor swatches: unique visible cells of a 16x16 grid.
"""

from .extract import extract_palette, palette_from_grid, palette_has_contrast
from .fallback import create_diverse_palette

__all__ = [
    "extract_palette",
    "palette_from_grid",
    "palette_has_contrast",
    "create_diverse_palette",
]
