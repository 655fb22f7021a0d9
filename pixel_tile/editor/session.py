# pixel_tile/editor/session.py
from __future__ import annotations

"""
Pixel grid editor.

Owns the live 16x16 grid, the tool state, the selected colour and a linear
undo/redo history. One history entry is recorded per stroke:

  editor.begin_stroke()          # pointer down
  editor.paint_pixel(x, y) ...   # pointer moves
  editor.end_stroke()            # pointer up or pointer leaves the grid

Coordinates are (x, y) with x the column; both must lie in 0..15.
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..constants import GRID_SIZE, HISTORY_LIMIT
from ..core_types import PixelGrid, RGBATuple, assert_pixel_grid, hex_to_rgb, new_grid
from ..palette import palette_from_grid
from .history import HistoryStack
from .tools import Tool, ToolState

CLEAR: RGBATuple = (0, 0, 0, 0)

# 4-connected neighbourhood
_NEIGHBOURS: Tuple[Tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


def _as_rgba(colour: Sequence[int]) -> RGBATuple:
    if len(colour) == 3:
        return (int(colour[0]), int(colour[1]), int(colour[2]), 255)
    if len(colour) == 4:
        return (int(colour[0]), int(colour[1]), int(colour[2]), int(colour[3]))
    raise ValueError("colour must have 3 or 4 channels")


class PixelEditor:
    def __init__(
        self,
        grid: Optional[PixelGrid] = None,
        *,
        history_limit: Optional[int] = HISTORY_LIMIT,
    ) -> None:
        initial = new_grid() if grid is None else assert_pixel_grid(grid)
        self._grid: PixelGrid = np.array(initial, dtype=np.uint8, copy=True)
        self._history = HistoryStack(self._grid, limit=history_limit)
        self.tool_state = ToolState()
        self.swatches: List[RGBATuple] = palette_from_grid(self._grid)
        self.selected_colour: Optional[RGBATuple] = (
            self.swatches[0] if self.swatches else None
        )
        self.has_unsaved_edits = False

        self._stroke_active = False
        self._stroke_dirty = False
        self._last_painted: Optional[Tuple[int, int]] = None

    # Grid / history views

    @property
    def grid(self) -> PixelGrid:
        """Read-only view of the live grid."""
        view = self._grid.view()
        view.setflags(write=False)
        return view

    @property
    def history(self) -> HistoryStack:
        return self._history

    @property
    def tool(self) -> Tool:
        return self.tool_state.tool

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    def cell(self, x: int, y: int) -> RGBATuple:
        self._check_coords(x, y)
        r, g, b, a = self._grid[y, x].tolist()
        return (r, g, b, a)

    def load_grid(self, grid: PixelGrid) -> None:
        """Install a new grid (new image, new colour count or reload)."""
        self._grid = np.array(assert_pixel_grid(grid), dtype=np.uint8, copy=True)
        self._history.reset(self._grid)
        self.swatches = palette_from_grid(self._grid)
        self.selected_colour = self.swatches[0] if self.swatches else None
        self.has_unsaved_edits = False
        self._stroke_active = False
        self._stroke_dirty = False
        self._last_painted = None

    # Tools and colours

    def select_tool(self, tool: Tool) -> None:
        self.tool_state = self.tool_state.select(tool)

    def select_colour(self, colour: Sequence[int]) -> None:
        self.selected_colour = _as_rgba(colour)

    def add_custom_colour(self, hex_str: str) -> RGBATuple:
        """Parse '#rrggbb', add it to the swatches if new, and select it."""
        r, g, b = hex_to_rgb(hex_str)
        colour: RGBATuple = (r, g, b, 255)
        if not any(s[:3] == colour[:3] for s in self.swatches):
            self.swatches.append(colour)
        self.selected_colour = colour
        return colour

    # Strokes

    def begin_stroke(self) -> None:
        self._stroke_active = True
        self._stroke_dirty = False
        self._last_painted = None

    def end_stroke(self) -> bool:
        """Close the stroke; records one history entry if anything changed."""
        changed = self._stroke_dirty
        self._stroke_active = False
        self._stroke_dirty = False
        self._last_painted = None
        if changed:
            self.capture_history()
        return changed

    # Operations

    def paint_pixel(self, x: int, y: int) -> bool:
        """
        Brush or erase one cell. Returns True if the grid changed.

        Repeating the last painted cell within a stroke is a no-op. Outside a
        stroke the call records its own history entry.
        """
        self._check_coords(x, y)
        if self._stroke_active and self._last_painted == (x, y):
            return False

        if self.tool_state.tool is Tool.ERASER:
            colour = CLEAR
        elif self.selected_colour is not None and self.selected_colour[3] > 0:
            colour = self.selected_colour
        else:
            return False

        self._last_painted = (x, y)
        if tuple(self._grid[y, x].tolist()) == colour:
            return False
        self._grid[y, x] = colour
        self._mark_dirty()
        return True

    def flood_fill(self, x: int, y: int) -> bool:
        """
        Replace the 4-connected region matching the colour at (x, y) with the
        selected colour. Returns False, without touching history, when the
        region already has that colour or no colour is selected.
        """
        self._check_coords(x, y)
        if self.selected_colour is None:
            return False
        replacement = np.asarray(self.selected_colour, dtype=np.uint8)
        target = self._grid[y, x].copy()
        if np.array_equal(target, replacement):
            return False

        pending = {(x, y)}
        while pending:
            cx, cy = pending.pop()
            if not np.array_equal(self._grid[cy, cx], target):
                continue
            self._grid[cy, cx] = replacement
            for dx, dy in _NEIGHBOURS:
                nx, ny = cx + dx, cy + dy
                if 0 <= nx < GRID_SIZE and 0 <= ny < GRID_SIZE:
                    if np.array_equal(self._grid[ny, nx], target):
                        pending.add((nx, ny))

        self._mark_dirty()
        return True

    def pick_colour(self, x: int, y: int) -> RGBATuple:
        """Eyedropper: select the cell's colour and return to the previous tool."""
        colour = self.cell(x, y)
        self.selected_colour = colour
        self.tool_state = self.tool_state.restore()
        return colour

    def apply_tool(self, x: int, y: int) -> bool:
        """Run the active tool at (x, y). Returns True if the grid changed."""
        tool = self.tool_state.tool
        if tool is Tool.EYEDROPPER:
            self.pick_colour(x, y)
            return False
        if tool is Tool.BUCKET:
            return self.flood_fill(x, y)
        return self.paint_pixel(x, y)

    # History

    def capture_history(self) -> None:
        """Snapshot the live grid as a new history entry."""
        self._history.push(self._grid)
        self.has_unsaved_edits = True

    def undo(self) -> bool:
        snap = self._history.undo()
        if snap is None:
            return False
        self._restore(snap)
        return True

    def redo(self) -> bool:
        snap = self._history.redo()
        if snap is None:
            return False
        self._restore(snap)
        return True

    def sync_from_history(self) -> None:
        """Reset the live grid to the snapshot at the current history index."""
        self._restore(self._history.current())
        self._stroke_active = False

    def commit(self) -> PixelGrid:
        """Copy of the current grid for encoding; history is untouched."""
        return np.array(self._grid, dtype=np.uint8, copy=True)

    def mark_saved(self) -> None:
        self.has_unsaved_edits = False

    # Internals

    def _restore(self, snap: PixelGrid) -> None:
        # an unfinished stroke is discarded along with the grid it painted on
        self._grid = np.array(snap, dtype=np.uint8, copy=True)
        self._stroke_dirty = False
        self._last_painted = None

    def _mark_dirty(self) -> None:
        if self._stroke_active:
            self._stroke_dirty = True
        else:
            self.capture_history()

    @staticmethod
    def _check_coords(x: int, y: int) -> None:
        if not (0 <= x < GRID_SIZE and 0 <= y < GRID_SIZE):
            raise IndexError(f"cell ({x}, {y}) outside {GRID_SIZE}x{GRID_SIZE} grid")


__all__ = ["PixelEditor", "CLEAR"]
