from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Callable
from typing import Any

from ..envelope import ToolResult, text_result
from ..errors import ExecutionError
from .base import Tool, ToolName

logger = logging.getLogger(__name__)

# Finder reports a dismissed confirmation dialog as error -128.
CANCEL_MARKERS = ("User canceled", "User cancelled", "(-128)")

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


class CleanTrashTool(Tool):
    name = ToolName.CLEAN_TRASH
    description = "Empty the system trash."

    def __init__(self, command: str, runner: Runner = subprocess.run) -> None:
        self._command = command
        self._runner = runner

    def execute(self, args: dict[str, Any]) -> ToolResult:
        argv = shlex.split(self._command)
        if not argv:
            raise ExecutionError("No trash command configured")

        logger.info("Emptying trash with: %s", self._command)
        try:
            completed = self._runner(argv, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise ExecutionError(f"Failed to empty trash: {exc}") from exc

        stderr = (completed.stderr or "").strip()
        if stderr and any(marker in stderr for marker in CANCEL_MARKERS):
            return text_result("🗑️ Emptying the trash was cancelled by the user.")
        if stderr:
            raise ExecutionError(f"Failed to empty trash: {stderr}")
        if completed.returncode != 0:
            raise ExecutionError(f"Failed to empty trash: exit code {completed.returncode}")

        return text_result("🗑️ Trash emptied.")
