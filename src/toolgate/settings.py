from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    if val in {"1", "true", "yes", "y", "on"}:
        return True
    if val in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _default_trash_command() -> str:
    if sys.platform == "darwin":
        return "osascript -e 'tell application \"Finder\" to empty trash'"
    return "gio trash --empty"


@dataclass(frozen=True)
class Settings:
    """Static settings for the gateway process.

    Every value can be overridden through a `TOOLGATE_*` environment variable.
    Tests build their own instance instead of mutating the environment.
    """

    results_dir: Path = field(
        default_factory=lambda: Path(os.environ.get("TOOLGATE_RESULTS_DIR", "results")).resolve()
    )
    log_path: Path = field(
        default_factory=lambda: Path(
            os.environ.get("TOOLGATE_LOG_PATH", ".toolgate-data/toolgate.log")
        ).resolve()
    )
    log_level: str = field(default_factory=lambda: os.environ.get("TOOLGATE_LOG_LEVEL", "INFO"))
    log_format: str = field(default_factory=lambda: os.environ.get("TOOLGATE_LOG_FORMAT", "text"))
    log_max_bytes: int = field(
        default_factory=lambda: int(os.environ.get("TOOLGATE_LOG_MAX_BYTES", str(1_000_000)))
    )
    log_backup_count: int = field(
        default_factory=lambda: int(os.environ.get("TOOLGATE_LOG_BACKUP_COUNT", "3"))
    )
    host: str = field(default_factory=lambda: os.environ.get("TOOLGATE_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.environ.get("TOOLGATE_PORT", "8020")))

    # "full" serves every tool; "volume" serves analyze_volume only, with CORS.
    variant: str = field(default_factory=lambda: os.environ.get("TOOLGATE_VARIANT", "full"))
    cors_enabled: bool = field(default_factory=lambda: _env_bool("TOOLGATE_CORS", False))

    # Upstream volume summarization endpoint.
    volume_url: str = field(
        default_factory=lambda: os.environ.get(
            "TOOLGATE_VOLUME_URL",
            "http://127.0.0.1:9000/captain/app/volume/portal/summarize",
        )
    )
    volume_token: str = field(default_factory=lambda: os.environ.get("TOOLGATE_VOLUME_TOKEN", ""))
    volume_timeout_seconds: float = field(
        default_factory=lambda: float(os.environ.get("TOOLGATE_VOLUME_TIMEOUT_SECONDS", "30"))
    )

    trash_command: str = field(
        default_factory=lambda: os.environ.get("TOOLGATE_TRASH_COMMAND", _default_trash_command())
    )

    @property
    def cors(self) -> bool:
        return self.cors_enabled or self.variant == "volume"


settings = Settings()
