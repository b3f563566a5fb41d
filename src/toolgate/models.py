from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ToolDefinition(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str
    input_schema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        alias="inputSchema",
    )

    @property
    def required(self) -> list[str]:
        required = self.input_schema.get("required") or []
        return [str(r) for r in required]


class ToolsResponse(BaseModel):
    tools: list[ToolDefinition]


class ToolInvocationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tool_name: str | None = Field(default=None, alias="toolName")
    args: dict[str, Any] | None = None


class InvocationLedgerEntry(BaseModel):
    filename: str
    path: str
    size: str = Field(..., description="File size, e.g. '1.25 KB'")
    modified: str = Field(..., description="Local modification time")


class ResultsResponse(BaseModel):
    results: list[InvocationLedgerEntry]
