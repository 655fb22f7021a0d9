# pixel_tile/editor/history.py
from __future__ import annotations

"""
Linear undo/redo history of full-grid snapshots.

Invariant: 0 <= index < len(snapshots). Pushing truncates everything after
index first. When a limit is set the oldest snapshots are dropped.
"""

from typing import List, Optional

import numpy as np

from ..constants import HISTORY_LIMIT
from ..core_types import PixelGrid, assert_pixel_grid


def _frozen_copy(grid: PixelGrid) -> PixelGrid:
    snap = np.array(grid, dtype=np.uint8, copy=True)
    snap.setflags(write=False)
    return snap


class HistoryStack:
    def __init__(self, initial: PixelGrid, limit: Optional[int] = HISTORY_LIMIT) -> None:
        if limit is not None and limit < 1:
            raise ValueError("history limit must be >= 1")
        self.limit = limit
        self._snapshots: List[PixelGrid] = [_frozen_copy(assert_pixel_grid(initial))]
        self._index = 0

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def index(self) -> int:
        return self._index

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._snapshots) - 1

    def current(self) -> PixelGrid:
        return self._snapshots[self._index]

    def reset(self, grid: PixelGrid) -> None:
        """Drop everything and start over from a single snapshot."""
        self._snapshots = [_frozen_copy(assert_pixel_grid(grid))]
        self._index = 0

    def push(self, grid: PixelGrid) -> None:
        """Truncate redo entries, append a snapshot, and move to it."""
        del self._snapshots[self._index + 1 :]
        self._snapshots.append(_frozen_copy(assert_pixel_grid(grid)))
        if self.limit is not None and len(self._snapshots) > self.limit:
            del self._snapshots[: len(self._snapshots) - self.limit]
        self._index = len(self._snapshots) - 1

    def undo(self) -> Optional[PixelGrid]:
        """Step back; None at the oldest snapshot."""
        if not self.can_undo:
            return None
        self._index -= 1
        return self.current()

    def redo(self) -> Optional[PixelGrid]:
        """Step forward; None at the newest snapshot."""
        if not self.can_redo:
            return None
        self._index += 1
        return self.current()


__all__ = ["HistoryStack"]
