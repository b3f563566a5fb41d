"""Result envelope types.

Every invocation answers with a `ToolResult`: at least one text block, and
optionally structured items and chart configurations. Chart filters and
transforms stay as functions or `CodeDescriptor`s here; the codec turns
them into JSON-safe descriptors right before the response is written.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import GatewayError

ERROR_PREFIX = "❌"


@dataclass(frozen=True)
class ContentBlock:
    text: str
    type: str = "text"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class DataSource:
    field: str
    aggregate: str | None = None
    filter: Any = None
    transform: Any = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"field": self.field}
        if self.aggregate is not None:
            out["aggregate"] = self.aggregate
        if self.filter is not None:
            out["filter"] = self.filter
        if self.transform is not None:
            out["transform"] = self.transform
        return out


@dataclass(frozen=True)
class ChartConfig:
    id: str
    type: str
    title: str
    data_source: DataSource
    options: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "dataSource": self.data_source.to_dict(),
            "options": self.options,
        }


@dataclass(frozen=True)
class ToolResult:
    content: tuple[ContentBlock, ...]
    items: tuple[dict[str, Any], ...] | None = None
    chart_configs: tuple[ChartConfig, ...] | None = None
    is_error: bool = False

    def __post_init__(self) -> None:
        if not self.content:
            raise ValueError("ToolResult requires at least one content block")

    @property
    def text(self) -> str:
        return "\n".join(block.text for block in self.content)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"content": [block.to_dict() for block in self.content]}
        if self.items is not None:
            out["items"] = [dict(item) for item in self.items]
        if self.chart_configs is not None:
            out["chartConfigs"] = [chart.to_dict() for chart in self.chart_configs]
        if self.is_error:
            out["isError"] = True
        return out


def text_result(
    text: str,
    *,
    items: list[dict[str, Any]] | None = None,
    chart_configs: list[ChartConfig] | None = None,
) -> ToolResult:
    return ToolResult(
        content=(ContentBlock(text=text),),
        items=tuple(items) if items is not None else None,
        chart_configs=tuple(chart_configs) if chart_configs is not None else None,
    )


def error_result(message: str) -> ToolResult:
    return ToolResult(content=(ContentBlock(text=f"{ERROR_PREFIX} {message}"),), is_error=True)


def error_payload(exc: GatewayError) -> dict[str, Any]:
    """Body for a failed invocation: `error` mirrors the text block."""
    return {"error": exc.message, **error_result(exc.message).to_dict()}
