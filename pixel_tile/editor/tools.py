# pixel_tile/editor/tools.py
from __future__ import annotations

"""
Editor tools and the tool-selection state.

ToolState is immutable; select() and restore() return new values.
"""

from dataclasses import dataclass, replace
from enum import Enum


class Tool(str, Enum):
    BRUSH = "brush"
    BUCKET = "bucket"
    EYEDROPPER = "eyedropper"
    ERASER = "eraser"


@dataclass(frozen=True)
class ToolState:
    """Active tool plus the tool to return to after an eyedropper pick."""

    tool: Tool = Tool.BRUSH
    previous_tool: Tool = Tool.BRUSH

    def select(self, tool: Tool) -> "ToolState":
        """Switch tools. Entering the eyedropper remembers the current tool."""
        tool = Tool(tool)
        if tool is Tool.EYEDROPPER:
            if self.tool is Tool.EYEDROPPER:
                return self
            return ToolState(tool=Tool.EYEDROPPER, previous_tool=self.tool)
        return replace(self, tool=tool)

    def restore(self) -> "ToolState":
        """Leave the eyedropper for the remembered tool; no-op for other tools."""
        if self.tool is not Tool.EYEDROPPER:
            return self
        return replace(self, tool=self.previous_tool)


__all__ = ["Tool", "ToolState"]
