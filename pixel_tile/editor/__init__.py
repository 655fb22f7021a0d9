# pixel_tile/editor/__init__.py
"""
Pixel grid editor.

Provides:
  PixelEditor(grid=None, *, history_limit=100)
    Live 16x16 grid with brush, bucket, eyedropper and eraser tools,
    one history entry per stroke, undo/redo and commit().

  HistoryStack(initial, limit=100)
    Linear snapshot history with a current index.

  Tool, ToolState
    Tool enum and the immutable tool-selection state.
"""

from .history import HistoryStack
from .session import CLEAR, PixelEditor
from .tools import Tool, ToolState

__all__ = ["PixelEditor", "HistoryStack", "Tool", "ToolState", "CLEAR"]
