from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from ..envelope import ToolResult, text_result
from .base import Tool, ToolName, require_str


def _local_now() -> datetime:
    return datetime.now().astimezone()


class HelloTool(Tool):
    name = ToolName.HELLO
    description = "Say hello to someone by name."
    input_schema = {
        "type": "object",
        "properties": {
            "name": {"type": "string", "description": "Name of the person to greet"},
        },
        "required": ["name"],
    }

    def execute(self, args: dict[str, Any]) -> ToolResult:
        name = require_str(args, "name")
        return text_result(f"Hello, {name}! 👋")


class CurrentTimeTool(Tool):
    name = ToolName.GET_CURRENT_TIME
    description = "Get the current local date and time of the server."

    def __init__(self, clock: Callable[[], datetime] = _local_now) -> None:
        self._clock = clock

    def execute(self, args: dict[str, Any]) -> ToolResult:
        now = self._clock()
        zone = now.tzname() or ""
        text = f"🕐 Current time: {now:%Y-%m-%d %H:%M:%S} {zone}".rstrip()
        return text_result(text, items=[{"iso": now.isoformat(), "timezone": zone}])
