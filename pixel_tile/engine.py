# pixel_tile/engine.py
from __future__ import annotations

"""
Engine facade: raster loading, pixelation and editor sessions.

Loading is the only asynchronous step. Decoding runs in a worker thread and
every load carries a generation token; a load that completes after its
session was superseded or closed is dropped instead of touching the editor.
Everything after a raster is in hand is synchronous.
"""

import asyncio
from pathlib import Path
from typing import Optional, Union

from .constants import COLOUR_COUNTS, DEFAULT_COLOUR_COUNT, HISTORY_LIMIT
from .core_types import Raster
from .editor import PixelEditor
from .errors import InvalidColourCountError, StaleSessionError
from .image_io import decode_image, load_raster as load_raster_file
from .quantize import PixelateResult, pixelate
from .utils import debug_log, key_value_pairs_to_string

RasterSource = Union[str, Path, bytes, bytearray, Raster]


def validate_colour_count(k: int) -> int:
    """Return k as int if it is one of COLOUR_COUNTS."""
    try:
        value = int(k)
    except (TypeError, ValueError) as exc:
        raise InvalidColourCountError(f"colour count must be an integer, got {k!r}") from exc
    if value not in COLOUR_COUNTS:
        allowed = ", ".join(str(c) for c in COLOUR_COUNTS)
        raise InvalidColourCountError(f"colour count must be one of {allowed}; got {value}")
    return value


def _read_source(source: RasterSource) -> Raster:
    if isinstance(source, Raster):
        return source
    if isinstance(source, (bytes, bytearray)):
        return decode_image(bytes(source))
    return load_raster_file(source)


class PixelArtEngine:
    """
    Owns the pipeline settings and hands out editor sessions.

    Only one session is active at a time; opening a new one supersedes the
    previous session.
    """

    def __init__(
        self,
        *,
        colour_count: int = DEFAULT_COLOUR_COUNT,
        history_limit: Optional[int] = HISTORY_LIMIT,
        debug: bool = False,
    ) -> None:
        self.colour_count = validate_colour_count(colour_count)
        self.history_limit = history_limit
        self.debug = debug
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def pixelate(self, raster: Raster, k: Optional[int] = None) -> PixelateResult:
        count = self.colour_count if k is None else validate_colour_count(k)
        return pixelate(raster, count, debug=self.debug)

    async def load_raster(self, source: RasterSource) -> Raster:
        """Decode a path, encoded bytes or an existing Raster off the event loop."""
        if isinstance(source, Raster):
            return source
        return await asyncio.to_thread(_read_source, source)

    def open_session(self) -> "EditorSession":
        self._generation += 1
        if self.debug:
            debug_log(f"session {self._generation} opened")
        return EditorSession(self, self._generation)

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation


class EditorSession:
    """
    One editing session: the source raster, its pixelation and the editor.

    load() may be awaited several times; only the most recent call installs
    its result. Late results for a closed or superseded session are ignored.
    """

    def __init__(self, engine: PixelArtEngine, generation: int) -> None:
        self.engine = engine
        self.generation = generation
        self.raster: Optional[Raster] = None
        self.result: Optional[PixelateResult] = None
        self.editor: Optional[PixelEditor] = None
        self.colour_count = engine.colour_count
        self._closed = False
        self._load_token = 0

    @property
    def is_active(self) -> bool:
        return not self._closed and self.engine._is_current(self.generation)

    def close(self) -> None:
        self._closed = True

    async def load(self, source: RasterSource, k: Optional[int] = None) -> bool:
        """
        Load, pixelate and install a source.

        Returns False when the load was overtaken (a newer load, a closed
        session or a newer session) and its result was dropped.
        Decoding errors propagate unless the load was already overtaken.
        """
        count = self.colour_count if k is None else validate_colour_count(k)
        self._load_token += 1
        token = self._load_token

        try:
            raster = await self.engine.load_raster(source)
        except Exception as exc:
            if not self._is_stale(token):
                raise
            debug_log(f"dropped late load failure: {exc}")
            return False
        try:
            self._check_current(token)
            result = self.engine.pixelate(raster, count)
            self.install(raster, result, count, token=token)
        except StaleSessionError as exc:
            debug_log(f"dropped late load: {exc}")
            return False
        return True

    def install(
        self,
        raster: Raster,
        result: PixelateResult,
        k: int,
        *,
        token: Optional[int] = None,
    ) -> PixelEditor:
        """Hand a pixelated grid to the editor, resetting its history."""
        self._check_current(self._load_token if token is None else token)
        self.raster = raster
        self.result = result
        self.colour_count = k
        if self.editor is None:
            self.editor = PixelEditor(result.grid, history_limit=self.engine.history_limit)
        else:
            self.editor.load_grid(result.grid)
        if self.engine.debug:
            debug_log(
                key_value_pairs_to_string(
                    [
                        ("Session", self.generation),
                        ("Colours", k),
                        ("Palette", len(result.palette)),
                        ("Dithered", result.dithered),
                    ]
                )
            )
        return self.editor

    def set_colour_count(self, k: int) -> PixelEditor:
        """Re-run the pipeline on the current raster with a new colour count."""
        count = validate_colour_count(k)
        if self.raster is None:
            raise RuntimeError("no raster loaded")
        result = self.engine.pixelate(self.raster, count)
        return self.install(self.raster, result, count)

    def _is_stale(self, token: int) -> bool:
        try:
            self._check_current(token)
        except StaleSessionError:
            return True
        return False

    def _check_current(self, token: int) -> None:
        if self._closed:
            raise StaleSessionError(f"session {self.generation} is closed")
        if not self.engine._is_current(self.generation):
            raise StaleSessionError(
                f"session {self.generation} superseded by {self.engine.generation}"
            )
        if token != self._load_token:
            raise StaleSessionError(f"load {token} superseded by {self._load_token}")


__all__ = [
    "RasterSource",
    "validate_colour_count",
    "PixelArtEngine",
    "EditorSession",
]
