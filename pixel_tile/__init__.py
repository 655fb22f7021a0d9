# pixel_tile/__init__.py
"""
pixel_tile package.

Purpose:
  Turn any raster into a 16x16 indexed pixel-art tile and retouch it.
  See make_tile.py for the CLI.

Public API:
  PixelArtEngine : loading, pixelation and editor sessions.
  PixelEditor    : brush / bucket / eyedropper / eraser with undo and redo.
  extract_palette: ordered palette of at most K colours from a raster.
  pixelate       : full raster -> 16x16 grid pipeline.
  Raster         : decoded RGBA image value.
  colour_convert : HSL conversions and colour distances.
  image_io       : decode, resample, magnify and encode.
  utils          : shared helpers (colour reports, logging).

Quick start:
  from pixel_tile import PixelArtEngine
  from pixel_tile.image_io import load_raster, save_grid_png
"""

__version__ = "0.1.0"

# Re-export namespaces for convenience.
from . import colour_convert
from . import core_types
from . import image_io
from . import utils
from . import palette
from . import quantize
from . import editor

from .core_types import Raster
from .editor import PixelEditor, Tool
from .engine import EditorSession, PixelArtEngine, validate_colour_count
from .palette import create_diverse_palette, extract_palette
from .quantize import PixelateResult, pixelate

__all__ = [
    "__version__",
    "colour_convert",
    "core_types",
    "image_io",
    "utils",
    "palette",
    "quantize",
    "editor",
    "Raster",
    "PixelEditor",
    "Tool",
    "PixelArtEngine",
    "EditorSession",
    "validate_colour_count",
    "extract_palette",
    "create_diverse_palette",
    "PixelateResult",
    "pixelate",
]
