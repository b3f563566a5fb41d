"""Tool executors plugged into the gateway."""

from __future__ import annotations

from .base import Tool, ToolName, require_str
from .basic import CurrentTimeTool, HelloTool
from .directory import ListDirectoryTool
from .trash import CleanTrashTool
from .volume import AnalyzeVolumeTool

__all__ = [
    "AnalyzeVolumeTool",
    "CleanTrashTool",
    "CurrentTimeTool",
    "HelloTool",
    "ListDirectoryTool",
    "Tool",
    "ToolName",
    "require_str",
]
