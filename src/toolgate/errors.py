"""Error taxonomy for tool invocations.

Each error carries a stable machine code, a human message and the HTTP
status the dispatcher answers with. `PersistenceError` is never surfaced to
clients; it only shows up in logs.
"""

from __future__ import annotations

from typing import Any


class GatewayError(RuntimeError):
    code = "gateway_error"
    status_code = 500

    def __init__(self, message: str, data: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.data = data


class MissingParameter(GatewayError):
    code = "missing_parameter"
    status_code = 400

    def __init__(self, parameter: str, message: str | None = None) -> None:
        super().__init__(message or f"Missing required parameter: {parameter}", {"parameter": parameter})
        self.parameter = parameter


class UnknownTool(GatewayError):
    code = "unknown_tool"
    status_code = 404

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Unknown tool: {tool_name}", {"toolName": tool_name})
        self.tool_name = tool_name


class ToolTimeout(GatewayError):
    code = "timeout"
    status_code = 408


class UpstreamError(GatewayError):
    code = "upstream_error"
    status_code = 500


class ExecutionError(GatewayError):
    code = "execution_error"
    status_code = 500


class PersistenceError(GatewayError):
    code = "persistence_error"
