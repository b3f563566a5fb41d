from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable
from enum import Enum
from typing import Any, ClassVar

from ..envelope import ToolResult
from ..errors import MissingParameter
from ..models import ToolDefinition


class ToolName(str, Enum):
    HELLO = "hello"
    GET_CURRENT_TIME = "get_current_time"
    CLEAN_TRASH = "clean_trash"
    LIST_DIRECTORY = "list_directory"
    ANALYZE_VOLUME = "analyze_volume"


class Tool(ABC):
    """A named, schema-described unit of work invocable through the gateway.

    Subclasses declare `name`, `description` and `input_schema` as class
    attributes and implement `execute`. `execute` may be a coroutine
    function; the dispatcher awaits it instead of sending it to a thread.
    """

    name: ClassVar[ToolName]
    description: ClassVar[str]
    input_schema: ClassVar[dict[str, Any]] = {"type": "object", "properties": {}}

    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name.value,
            description=self.description,
            input_schema=self.input_schema,
        )

    @abstractmethod
    def execute(self, args: dict[str, Any]) -> ToolResult | Awaitable[ToolResult]:
        raise NotImplementedError


def require_str(args: dict[str, Any], key: str) -> str:
    value = args.get(key)
    if value is None:
        raise MissingParameter(key)
    text = str(value).strip()
    if not text:
        raise MissingParameter(key)
    return text
