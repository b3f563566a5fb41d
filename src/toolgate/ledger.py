"""Append-only invocation ledger.

One JSON file per invocation, named `<toolName>_<timestamp>.json` where the
ISO-8601 timestamp has ":" and "." replaced by "-". Records are never
modified or deleted here.
"""

from __future__ import annotations

import json
import logging
import os
import re
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from .errors import PersistenceError
from .models import InvocationLedgerEntry

logger = logging.getLogger(__name__)

_RECORD_STAMP = re.compile(r"_(\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z)(?:_(\d+))?\.json$")


def format_timestamp(ts: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. 2024-05-01T08:30:00.123Z."""
    return ts.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def record_basename(tool_name: str, timestamp: str) -> str:
    return f"{tool_name}_{timestamp.replace(':', '-').replace('.', '-')}"


def record_order_key(filename: str) -> tuple[str, int]:
    """Creation order encoded in a record name: (timestamp, collision suffix).

    Names that do not follow the record pattern sort before all records.
    """
    match = _RECORD_STAMP.search(filename)
    if match is None:
        return ("", 0)
    return (match.group(1), int(match.group(2) or 0))


class Ledger:
    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def append(
        self,
        tool_name: str,
        args: dict[str, Any],
        result: dict[str, Any],
        *,
        timestamp: datetime | None = None,
    ) -> str:
        """Persist one invocation and return its filename.

        The record is written to a hidden temp file and then hard-linked
        into place, so a listing never sees a partial record. When the
        name is already taken, `_1`, `_2`, ... is appended to the stem.
        """

        stamp = format_timestamp(timestamp or datetime.now(UTC))
        record = {"toolName": tool_name, "args": args, "result": result, "timestamp": stamp}
        base = record_basename(tool_name, stamp)

        try:
            payload = json.dumps(record, ensure_ascii=False, indent=2)
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path = self.directory / f".{base}.{uuid.uuid4().hex}.tmp"
            tmp_path.write_text(payload, encoding="utf-8")
            try:
                filename = self._link_unique(tmp_path, base)
                logger.debug("Recorded invocation %s", filename)
                return filename
            finally:
                tmp_path.unlink(missing_ok=True)
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Failed to persist {tool_name} invocation: {exc}") from exc

    def _link_unique(self, tmp_path: Path, base: str) -> str:
        attempt = 0
        while True:
            filename = f"{base}.json" if attempt == 0 else f"{base}_{attempt}.json"
            try:
                os.link(tmp_path, self.directory / filename)
            except FileExistsError:
                attempt += 1
                continue
            return filename

    def list(self) -> list[InvocationLedgerEntry]:
        """Entries newest-first, read fresh from disk on every call."""

        if not self.directory.is_dir():
            return []

        rows: list[tuple[int, str, int]] = []
        for path in self.directory.iterdir():
            if path.suffix != ".json" or path.name.startswith("."):
                continue
            try:
                st = path.stat()
            except FileNotFoundError:
                continue
            rows.append((st.st_mtime_ns, path.name, st.st_size))

        # mtime ties are common on coarse filesystem clocks.
        rows.sort(key=lambda row: (row[0], record_order_key(row[1]), row[1]), reverse=True)
        return [
            InvocationLedgerEntry(
                filename=name,
                path=f"{self.directory.name}/{name}",
                size=f"{size / 1024:.2f} KB",
                modified=datetime.fromtimestamp(mtime_ns / 1e9).strftime("%Y-%m-%d %H:%M:%S"),
            )
            for mtime_ns, name, size in rows
        ]

    def read(self, filename: str) -> dict[str, Any]:
        if Path(filename).name != filename or not filename.endswith(".json"):
            raise ValueError(f"Invalid record name: {filename}")
        path = self.directory / filename
        return json.loads(path.read_text(encoding="utf-8"))
