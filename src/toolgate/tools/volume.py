"""Cargo volume analysis backed by an external summarization endpoint.

The upstream response shape is undocumented, so the report is heuristic:
it lists numeric-looking top-level fields and the well-known summary keys,
then appends the raw payload for the caller to analyze further.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
from typing import Any

import httpx

from ..envelope import ToolResult, text_result
from ..errors import ToolTimeout, UpstreamError
from .base import Tool, ToolName

logger = logging.getLogger(__name__)

VOLUME_REQUEST_BODY: dict[str, str] = {
    "type": "ORG",
    "volumeBusinessType": "ALL",
    "volumeType": "PRECISION",
}

SUMMARY_KEYS = ("summary", "total", "count")


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int | float):
        return True
    if isinstance(value, str) and value.strip():
        try:
            return not math.isnan(float(value))
        except ValueError:
            return False
    return False


def analyze_volume_data(data: Any) -> str:
    lines = ["## Volume data analysis", ""]

    if isinstance(data, list):
        lines += ["### Overview", "", f"Retrieved {len(data)} records.", ""]
    elif isinstance(data, dict):
        if not data:
            lines += ["The data is empty or malformed.", ""]
            return "\n".join(lines)

        lines += ["### Overview", ""]
        numeric = [key for key, value in data.items() if _is_numeric(value)]
        if numeric:
            lines += ["**Key metrics:**", ""]
            lines += [f"- {key}: {data[key]}" for key in numeric]
            lines.append("")

        if any(data.get(key) for key in SUMMARY_KEYS):
            lines += ["### Summary", ""]
            if data.get("summary"):
                lines += [f"Summary: {json.dumps(data['summary'], ensure_ascii=False)}", ""]
            if data.get("total"):
                lines += [f"Total: {data['total']}", ""]
            if data.get("count"):
                lines += [f"Count: {data['count']}", ""]
    else:
        lines += ["Unable to parse the data format.", ""]

    return "\n".join(lines)


def render_volume_report(data: Any) -> str:
    raw = json.dumps(data, indent=2, ensure_ascii=False)
    return f"{analyze_volume_data(data)}\n\n**Raw data:**\n```json\n{raw}\n```"


class AnalyzeVolumeTool(Tool):
    name = ToolName.ANALYZE_VOLUME
    description = (
        "Query cargo volume data. Returns a volume summary and the raw data so the "
        "caller can run its own analysis and build charts."
    )

    def __init__(
        self,
        *,
        url: str,
        token: str,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._token = token
        self._timeout = timeout_seconds
        self._transport = transport

    async def execute(self, args: dict[str, Any]) -> ToolResult:
        try:
            data = await asyncio.wait_for(self._fetch(), timeout=self._timeout)
        except (TimeoutError, httpx.TimeoutException) as exc:
            logger.warning("Volume request to %s timed out after %ss", self._url, self._timeout)
            raise ToolTimeout("Request for volume data timed out, please retry later") from exc

        if isinstance(data, dict):
            logger.info("Volume data received: keys=%s", list(data)[:10])
        return text_result(render_volume_report(data))

    async def _fetch(self) -> Any:
        headers = {"Content-Type": "application/json", "Authoritytoken": self._token}
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                res = await client.post(self._url, json=VOLUME_REQUEST_BODY, headers=headers)
            except httpx.TimeoutException:
                raise
            except httpx.HTTPError as exc:
                raise UpstreamError(f"Failed to fetch volume data: {exc}") from exc

            if not res.is_success:
                raise UpstreamError(
                    f"Failed to fetch volume data: {res.status_code} {res.reason_phrase}"
                )
            try:
                return res.json()
            except ValueError as exc:
                raise UpstreamError("Failed to fetch volume data: response is not valid JSON") from exc
