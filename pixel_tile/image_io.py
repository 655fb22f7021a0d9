# pixel_tile/image_io.py
from __future__ import annotations

import io
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .constants import GRID_SIZE, PREVIEW_SCALE
from .core_types import PixelGrid, Raster, assert_pixel_grid
from .errors import InvalidImageError, RenderError

"""
Image I/O helpers (RGBA in sRGB), grid resampling, preview magnification,
and the small preprocessing steps applied before pixelation.
"""

PathLike = Union[str, Path]


def _to_raster(im: Image.Image) -> Raster:
    im = ImageOps.exif_transpose(im)
    arr = np.array(im.convert("RGBA"), dtype=np.uint8)
    return Raster.from_array(arr)


def decode_image(data: bytes) -> Raster:
    """Decode any Pillow-readable byte stream into an RGBA raster."""
    try:
        with Image.open(io.BytesIO(data)) as im:
            im.load()
            return _to_raster(im)
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidImageError(f"could not decode image: {exc}") from exc


def load_raster(path: PathLike) -> Raster:
    """Load an image file into an RGBA raster."""
    try:
        with Image.open(Path(path)) as im:
            im.load()
            return _to_raster(im)
    except FileNotFoundError:
        raise
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidImageError(f"could not read {path}: {exc}") from exc


def raster_to_image(raster: Raster) -> Image.Image:
    return Image.fromarray(np.ascontiguousarray(raster.pixels))


def resize_to_grid(
    raster: Raster,
    size: int = GRID_SIZE,
    resample: Image.Resampling = Image.Resampling.BOX,
) -> Raster:
    """Area-resample a raster to size x size. Aspect ratio is not preserved."""
    if raster.width == size and raster.height == size:
        return raster
    im = raster_to_image(raster).resize((size, size), resample=resample)
    return Raster.from_array(np.array(im, dtype=np.uint8))


def magnify(grid: PixelGrid, scale: int = PREVIEW_SCALE) -> np.ndarray:
    """Nearest-neighbour upscale of a grid: (16,16,4) -> (16*scale,16*scale,4)."""
    assert_pixel_grid(grid)
    if scale < 1:
        raise ValueError("scale must be >= 1")
    return np.repeat(np.repeat(grid, scale, axis=0), scale, axis=1)


def encode_png(grid: PixelGrid, scale: int = 1) -> bytes:
    """Encode a grid (optionally magnified) as PNG bytes."""
    pixels = grid if scale == 1 else magnify(grid, scale)
    buf = io.BytesIO()
    try:
        Image.fromarray(np.ascontiguousarray(pixels)).save(buf, format="PNG")
    except (OSError, ValueError) as exc:
        raise RenderError(f"could not encode grid: {exc}") from exc
    return buf.getvalue()


def save_grid_png(path: PathLike, grid: PixelGrid, scale: int = 1) -> Path:
    """Write a grid to disk as PNG; the suffix is forced to .png."""
    out = Path(path)
    if out.suffix.lower() != ".png":
        out = out.with_suffix(".png")
    try:
        out.write_bytes(encode_png(grid, scale))
    except OSError as exc:
        raise RenderError(f"could not write {out}: {exc}") from exc
    return out


def crop_square(
    raster: Raster, box: Optional[Tuple[int, int, int, int]] = None
) -> Raster:
    """
    Crop to a square region.

    box is (left, top, size_w, size_h) in pixels; when omitted the largest
    centred square is used.
    """
    if box is None:
        side = min(raster.width, raster.height)
        left = (raster.width - side) // 2
        top = (raster.height - side) // 2
        box = (left, top, side, side)
    left, top, w, h = (int(v) for v in box)
    if w <= 0 or h <= 0:
        raise InvalidImageError("crop box has zero width or height")
    left = max(0, left)
    top = max(0, top)
    right = min(raster.width, left + w)
    bottom = min(raster.height, top + h)
    if right <= left or bottom <= top:
        raise InvalidImageError("crop box lies outside the image")
    return Raster.from_array(raster.pixels[top:bottom, left:right])


def apply_background(raster: Raster, rgb: Sequence[int]) -> Raster:
    """Composite the raster over a solid colour; the result is fully opaque."""
    fill = (int(rgb[0]), int(rgb[1]), int(rgb[2]), 255)
    base = Image.new("RGBA", (raster.width, raster.height), fill)
    base.alpha_composite(raster_to_image(raster))
    return Raster.from_array(np.array(base, dtype=np.uint8))


__all__ = [
    "decode_image",
    "load_raster",
    "raster_to_image",
    "resize_to_grid",
    "magnify",
    "encode_png",
    "save_grid_png",
    "crop_square",
    "apply_background",
]
