# pixel_tile/errors.py
"""
Exception types.

Unrecoverable conditions (bad raster, unusable surface) propagate to callers.
Extraction and quantisation problems are recovered inside the engine.
"""

from __future__ import annotations


class PixelTileError(Exception):
    """Base class for all pixel_tile errors."""


class InvalidImageError(PixelTileError, ValueError):
    """Raster has zero width/height, a malformed buffer, or could not be decoded."""


class InvalidColourCountError(PixelTileError, ValueError):
    """Requested colour count is not one of the supported values."""


class ExtractionError(PixelTileError, RuntimeError):
    """Palette extraction failed. Callers inside the engine fall back to a synthetic palette."""


class RenderError(PixelTileError, RuntimeError):
    """The drawing surface could not be read or written."""


class StaleSessionError(PixelTileError, RuntimeError):
    """A load finished after its editor session was superseded or closed."""


__all__ = [
    "PixelTileError",
    "InvalidImageError",
    "InvalidColourCountError",
    "ExtractionError",
    "RenderError",
    "StaleSessionError",
]
