"""Request dispatch: validate, resolve, execute, persist, encode.

No exception leaves `Dispatcher.dispatch`; every failure becomes an error
envelope with the matching HTTP status.
"""

from __future__ import annotations

import inspect
import logging
import time
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from .codec import encode
from .envelope import ToolResult, error_payload
from .errors import ExecutionError, GatewayError, MissingParameter, PersistenceError
from .ledger import Ledger
from .logging_setup import log_tool_call
from .models import ToolInvocationRequest
from .registry import ToolRegistry
from .tools import Tool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchOutcome:
    status_code: int
    body: dict[str, Any]
    record: str | None = None


def parse_request(payload: Any) -> tuple[str, dict[str, Any]]:
    if not isinstance(payload, dict):
        raise MissingParameter("toolName", "Request body must be a JSON object with a toolName")
    try:
        request = ToolInvocationRequest.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = str(first["loc"][0]) if first.get("loc") else "toolName"
        raise MissingParameter(field, f"Invalid parameter: {field}") from exc

    if not request.tool_name or not request.tool_name.strip():
        raise MissingParameter("toolName")
    return request.tool_name, request.args or {}


def check_required(tool: Tool, args: dict[str, Any]) -> None:
    """Presence check for the schema's required fields; no type validation."""
    for key in tool.definition.required:
        value = args.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise MissingParameter(key)


class Dispatcher:
    def __init__(self, registry: ToolRegistry, ledger: Ledger) -> None:
        self.registry = registry
        self.ledger = ledger

    async def dispatch(self, payload: Any) -> DispatchOutcome:
        started = time.perf_counter()
        tool_name = "<none>"
        args: dict[str, Any] = {}

        try:
            tool_name, args = parse_request(payload)
            tool = self.registry.get(tool_name)
        except GatewayError as exc:
            log_tool_call(
                tool_name,
                args,
                status_code=exc.status_code,
                duration_ms=(time.perf_counter() - started) * 1000,
                error=exc.message,
            )
            return DispatchOutcome(status_code=exc.status_code, body=error_payload(exc))

        status_code, body, error = await self._execute(tool, tool_name, args)
        record = await run_in_threadpool(self._persist, tool_name, args, body)

        log_tool_call(
            tool_name,
            args,
            status_code=status_code,
            duration_ms=(time.perf_counter() - started) * 1000,
            error=error,
        )
        return DispatchOutcome(status_code=status_code, body=body, record=record)

    async def _execute(
        self, tool: Tool, tool_name: str, args: dict[str, Any]
    ) -> tuple[int, dict[str, Any], str | None]:
        try:
            check_required(tool, args)
            result = await self._run(tool, args)
            return 200, encode(result.to_dict()), None
        except GatewayError as exc:
            return exc.status_code, error_payload(exc), exc.message
        except Exception as exc:  # noqa: BLE001
            logger.exception("Tool %s raised unexpectedly", tool_name)
            err = ExecutionError(f"Tool {tool_name} failed: {exc}")
            return err.status_code, error_payload(err), err.message

    async def _run(self, tool: Tool, args: dict[str, Any]) -> ToolResult:
        if inspect.iscoroutinefunction(tool.execute):
            return await tool.execute(args)
        result = await run_in_threadpool(tool.execute, args)
        if inspect.isawaitable(result):
            return await result
        return result

    def _persist(self, tool_name: str, args: dict[str, Any], body: dict[str, Any]) -> str | None:
        """Best-effort: a failed write is logged and never changes the response."""
        try:
            return self.ledger.append(tool_name, args, body)
        except PersistenceError as exc:
            logger.error("Invocation not persisted: %s", exc.message)
            return None
