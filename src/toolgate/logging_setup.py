from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from typing import Any

from .settings import Settings, settings as default_settings

_CONFIGURED = False

_RESERVED_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "asctime", "taskName",
}


class JsonFormatter(logging.Formatter):
    """One JSON object per line, suitable for log aggregation.

    Fields passed through `extra=` are emitted under the "extra" key.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=str, ensure_ascii=False)


def configure_logging(*, config: Settings | None = None) -> None:
    """Configure gateway logging.

    - Logs to stderr for developer visibility.
    - Logs to a rotating file for later inspection.

    Safe to call multiple times; it will not duplicate handlers.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    cfg = config or default_settings
    level = getattr(logging, cfg.log_level.upper().strip(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    formatter: logging.Formatter
    if cfg.log_format == "json":
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(level)
        stream_handler.setFormatter(formatter)
        root.addHandler(stream_handler)

    try:
        cfg.log_path.parent.mkdir(parents=True, exist_ok=True)
        if not any(
            isinstance(h, RotatingFileHandler)
            and getattr(h, "baseFilename", None) == str(cfg.log_path)
            for h in root.handlers
        ):
            file_handler = RotatingFileHandler(
                filename=str(cfg.log_path),
                maxBytes=cfg.log_max_bytes,
                backupCount=cfg.log_backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
    except OSError as exc:
        root.warning("Could not create log file at %s: %s", cfg.log_path, exc)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    _CONFIGURED = True


def log_tool_call(
    tool_name: str,
    arguments: dict[str, Any],
    *,
    status_code: int,
    duration_ms: float,
    error: str | None = None,
) -> None:
    """Log a tool call with structured data."""
    logger = logging.getLogger("toolgate.calls")

    log_data: dict[str, Any] = {
        "tool": tool_name,
        "arg_keys": sorted(arguments),
        "status_code": status_code,
        "duration_ms": round(duration_ms, 2),
    }
    if error:
        log_data["error"] = error
        logger.warning("Tool call failed: %s (%s)", tool_name, error, extra=log_data)
    else:
        logger.info("Tool call: %s in %.1fms", tool_name, duration_ms, extra=log_data)
