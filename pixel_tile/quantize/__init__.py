# pixel_tile/quantize/__init__.py
"""
Quantisation API.

Provides:
  apply_palette(raster, palette, *, debug=False) -> PixelGrid
    Recolour a raster (resampled to 16x16 if needed) onto a palette.
    128+ colours: Floyd-Steinberg diffusion. Fewer: direct nearest mapping.
    An empty palette becomes [black, white].

  pixelate(raster, k, *, palette=None, debug=False) -> PixelateResult
    Extract a k-colour palette from the full raster and apply it.

Notes:
  - Distance is 0.3*dr^2 + 0.59*dg^2 + 0.11*db^2; ties keep the earlier entry.
  - Alpha is copied through, so transparent cells stay transparent.
"""

from .dither import dither_floyd_steinberg
from .nearest import map_nearest
from .run import PixelateResult, apply_palette, pixelate

__all__ = [
    "dither_floyd_steinberg",
    "map_nearest",
    "PixelateResult",
    "apply_palette",
    "pixelate",
]
