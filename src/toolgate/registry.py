from __future__ import annotations

from collections.abc import Iterable

from .errors import UnknownTool
from .models import ToolDefinition
from .settings import Settings
from .tools import (
    AnalyzeVolumeTool,
    CleanTrashTool,
    CurrentTimeTool,
    HelloTool,
    ListDirectoryTool,
    Tool,
)


class ToolRegistry:
    """Static tool catalog, built once at startup and never mutated."""

    def __init__(self, tools: Iterable[Tool]) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            name = tool.definition.name
            if name in self._tools:
                raise ValueError(f"Duplicate tool name: {name}")
            self._tools[name] = tool

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def list(self) -> list[ToolDefinition]:
        return [tool.definition for tool in self._tools.values()]

    def get(self, name: str) -> Tool:
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownTool(name) from None


def _volume_tool(config: Settings) -> AnalyzeVolumeTool:
    return AnalyzeVolumeTool(
        url=config.volume_url,
        token=config.volume_token,
        timeout_seconds=config.volume_timeout_seconds,
    )


def build_registry(config: Settings) -> ToolRegistry:
    """Registry for the configured variant.

    The "volume" variant advertises a single tool, `analyze_volume`.
    """

    if config.variant == "volume":
        return ToolRegistry([_volume_tool(config)])

    return ToolRegistry(
        [
            HelloTool(),
            CurrentTimeTool(),
            CleanTrashTool(command=config.trash_command),
            ListDirectoryTool(),
            _volume_tool(config),
        ]
    )
