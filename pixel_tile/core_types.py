# pixel_tile/core_types.py
from __future__ import annotations

"""
Core type aliases, small value objects, and lightweight helpers.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from .constants import GRID_SIZE
from .errors import InvalidImageError

# Basic aliases

RGBTuple = Tuple[int, int, int]
RGBATuple = Tuple[int, int, int, int]
HexStr = str

U8Image = NDArray[np.uint8]  # (H, W, 4) RGBA
PixelGrid = NDArray[np.uint8]  # (GRID_SIZE, GRID_SIZE, 4) RGBA
Palette = List[RGBTuple]

# Value objects


@dataclass(frozen=True)
class Raster:
    """
    Decoded RGBA image.

    Holds a read-only uint8 array of shape (height, width, 4), row-major.
    """

    pixels: U8Image

    def __post_init__(self) -> None:
        arr = self.pixels
        if not isinstance(arr, np.ndarray) or arr.dtype != np.uint8:
            raise InvalidImageError("raster pixels must be a uint8 array")
        if arr.ndim != 3 or arr.shape[-1] != 4:
            raise InvalidImageError(f"expected (H,W,4) RGBA pixels, got {arr.shape}")
        if arr.shape[0] == 0 or arr.shape[1] == 0:
            raise InvalidImageError("raster has zero width or height")

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def rgb(self) -> U8Image:
        return self.pixels[..., :3]

    @property
    def alpha(self) -> NDArray[np.uint8]:
        return self.pixels[..., 3]

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "Raster":
        """Copy an (H,W,3) or (H,W,4) array into a raster. RGB input gets alpha 255."""
        src = np.asarray(arr)
        if src.ndim != 3 or src.shape[-1] not in (3, 4):
            raise InvalidImageError(f"expected (H,W,3/4) array, got {src.shape}")
        if src.shape[0] == 0 or src.shape[1] == 0:
            raise InvalidImageError("raster has zero width or height")
        out = np.empty((src.shape[0], src.shape[1], 4), dtype=np.uint8)
        out[..., :3] = np.clip(src[..., :3], 0, 255)
        out[..., 3] = np.clip(src[..., 3], 0, 255) if src.shape[-1] == 4 else 255
        out.setflags(write=False)
        return cls(out)

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes) -> "Raster":
        """Build a raster from a flat row-major RGBA byte buffer."""
        if width <= 0 or height <= 0:
            raise InvalidImageError("raster has zero width or height")
        expected = width * height * 4
        if len(data) != expected:
            raise InvalidImageError(
                f"buffer holds {len(data)} bytes, expected {expected} for {width}x{height}"
            )
        arr = np.frombuffer(bytes(data), dtype=np.uint8).reshape(height, width, 4)
        return cls(arr)

    def to_bytes(self) -> bytes:
        return self.pixels.tobytes()


@dataclass(frozen=True)
class ColourBucket:
    """Average colour of one quantisation bucket, plus its hit count."""

    rgb: RGBTuple
    count: int


# Small helpers


def round_half_up(value: float) -> int:
    """Round .5 upwards (Python's round() uses banker's rounding)."""
    return int(np.floor(value + 0.5))


def rgb_to_hex(rgb: Sequence[int]) -> HexStr:
    """RGB tuple to lowercase hex string '#rrggbb'."""
    return f"#{int(rgb[0]):02x}{int(rgb[1]):02x}{int(rgb[2]):02x}"


def hex_to_rgb(hex_str: str) -> RGBTuple:
    """Parse '#rgb' or '#rrggbb' (case-insensitive, '#' optional) into an RGB tuple."""
    s = hex_str.strip().lower()
    if not s.startswith("#"):
        s = f"#{s}"
    if len(s) == 4:
        r, g, b = s[1], s[2], s[3]
        s = f"#{r}{r}{g}{g}{b}{b}"
    if len(s) != 7:
        raise ValueError("hex must be '#rrggbb' or '#rgb'")
    try:
        return (int(s[1:3], 16), int(s[3:5], 16), int(s[5:7], 16))
    except ValueError as exc:
        raise ValueError(f"invalid hex colour: {hex_str!r}") from exc


def coerce_to_rgb_tuple(value: Union[Sequence[int], NDArray[np.generic]]) -> RGBTuple:
    """Coerce a 3+ length sequence or array row to an (int, int, int) tuple."""
    if len(value) < 3:  # type: ignore[arg-type]
        raise ValueError("sequence too small for RGB")
    return (int(value[0]), int(value[1]), int(value[2]))


def is_near_black(rgb: Sequence[int], limit: int) -> bool:
    return rgb[0] < limit and rgb[1] < limit and rgb[2] < limit


def is_near_white(rgb: Sequence[int], limit: int) -> bool:
    return rgb[0] > limit and rgb[1] > limit and rgb[2] > limit


def new_grid(fill: RGBATuple = (0, 0, 0, 0)) -> PixelGrid:
    """A fresh GRID_SIZE x GRID_SIZE RGBA grid filled with one colour."""
    grid = np.empty((GRID_SIZE, GRID_SIZE, 4), dtype=np.uint8)
    grid[...] = np.asarray(fill, dtype=np.uint8)
    return grid


def assert_pixel_grid(grid: np.ndarray) -> PixelGrid:
    """Validate a uint8 (16,16,4) grid and return it typed as PixelGrid."""
    if (
        not isinstance(grid, np.ndarray)
        or grid.dtype != np.uint8
        or grid.shape != (GRID_SIZE, GRID_SIZE, 4)
    ):
        raise TypeError(f"expected uint8 ({GRID_SIZE},{GRID_SIZE},4) grid")
    return grid  # type: ignore[return-value]


__all__ = [
    # aliases / types
    "RGBTuple",
    "RGBATuple",
    "HexStr",
    "U8Image",
    "PixelGrid",
    "Palette",
    # value objects
    "Raster",
    "ColourBucket",
    # helpers
    "round_half_up",
    "rgb_to_hex",
    "hex_to_rgb",
    "coerce_to_rgb_tuple",
    "is_near_black",
    "is_near_white",
    "new_grid",
    "assert_pixel_grid",
]
