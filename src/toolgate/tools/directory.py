from __future__ import annotations

import logging
import stat
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from ..charts import SIZE_BINS_KB, bin_for_size, bin_label, directory_charts
from ..envelope import ToolResult, text_result
from ..errors import ExecutionError
from .base import Tool, ToolName, require_str

logger = logging.getLogger(__name__)

FOLDER = "folder"
FILE = "file"


@dataclass(frozen=True)
class DirectoryEntry:
    name: str
    type: str
    size_bytes: int
    modified: datetime

    @property
    def size_kb(self) -> float:
        return self.size_bytes / 1024

    @property
    def size_label(self) -> str:
        if self.type == FOLDER:
            return "-"
        return f"{self.size_kb:.2f} KB"

    def to_item(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "size": self.size_label,
            "sizeBytes": self.size_bytes if self.type == FILE else None,
            "modified": self.modified.isoformat(timespec="seconds"),
        }


def sort_entries(entries: list[DirectoryEntry]) -> list[DirectoryEntry]:
    """Folders first, then files; each group ordered by name."""
    return sorted(entries, key=lambda e: (e.type != FOLDER, e.name))


def scan_directory(dir_path: Path, *, show_hidden: bool = False) -> list[DirectoryEntry]:
    try:
        children = list(dir_path.iterdir())
    except PermissionError as exc:
        raise ExecutionError(f"Permission denied: {dir_path}") from exc
    except OSError as exc:
        raise ExecutionError(f"Cannot read directory {dir_path}: {exc}") from exc

    entries: list[DirectoryEntry] = []
    for child in children:
        if not show_hidden and child.name.startswith("."):
            continue
        try:
            st = child.stat()
        except OSError as exc:
            # Broken symlinks and entries removed mid-scan.
            logger.debug("Skipping %s: %s", child, exc)
            continue
        entries.append(
            DirectoryEntry(
                name=child.name,
                type=FOLDER if stat.S_ISDIR(st.st_mode) else FILE,
                size_bytes=st.st_size,
                modified=datetime.fromtimestamp(st.st_mtime).astimezone(),
            )
        )
    return sort_entries(entries)


def render_digest(dir_path: Path, entries: list[DirectoryEntry]) -> str:
    folders = [e for e in entries if e.type == FOLDER]
    files = [e for e in entries if e.type == FILE]
    total_kb = sum(e.size_kb for e in files)

    lines = [f"## 📂 {dir_path}", ""]
    if not entries:
        lines.append("The directory is empty.")
        return "\n".join(lines)

    lines.append(f"{len(folders)} folders, {len(files)} files ({total_kb:.2f} KB total)")
    lines.append("")
    for entry in entries:
        if entry.type == FOLDER:
            lines.append(f"- 📁 {entry.name}/")
        else:
            lines.append(f"- 📄 {entry.name} ({entry.size_label})")

    if files:
        counts = Counter(bin_for_size(e.size_kb) for e in files)
        lines.extend(["", "### Size distribution", ""])
        for low, high in SIZE_BINS_KB:
            label = bin_label(low, high)
            lines.append(f"- {label}: {counts.get(label, 0)}")

    return "\n".join(lines)


class ListDirectoryTool(Tool):
    name = ToolName.LIST_DIRECTORY
    description = (
        "List the entries of a directory with type, size and modification time, "
        "plus chart configurations for the type and size distributions."
    )
    input_schema = {
        "type": "object",
        "properties": {
            "path": {"type": "string", "description": "Directory to list; ~ is expanded"},
            "showHidden": {"type": "boolean", "description": "Include dot-files"},
        },
        "required": ["path"],
    }

    def execute(self, args: dict[str, Any]) -> ToolResult:
        raw_path = require_str(args, "path")
        dir_path = Path(raw_path).expanduser()

        if not dir_path.exists():
            raise ExecutionError(f"Path does not exist: {raw_path}")
        if not dir_path.is_dir():
            raise ExecutionError(f"Not a directory: {raw_path}")

        entries = scan_directory(dir_path, show_hidden=args.get("showHidden") is True)
        return text_result(
            render_digest(dir_path, entries),
            items=[e.to_item() for e in entries],
            chart_configs=directory_charts(),
        )
