from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def config(tmp_path: Path):
    """Settings that keep results and logs under the test's temp dir."""

    from toolgate.settings import Settings

    return Settings(
        results_dir=tmp_path / "results",
        log_path=tmp_path / "logs" / "toolgate.log",
        trash_command="true",
        volume_url="http://volume.test/summarize",
        volume_token="test-token",
    )


@pytest.fixture
def client(config) -> Iterator[TestClient]:  # noqa: ANN001
    from toolgate.app import create_app

    with TestClient(create_app(config)) as test_client:
        yield test_client


@pytest.fixture
def sample_dir(tmp_path: Path) -> Path:
    """A directory with two folders, three files of known size and a dot-file."""

    root = tmp_path / "sample"
    root.mkdir()
    (root / "zeta").mkdir()
    (root / "alpha").mkdir()
    (root / "b.txt").write_bytes(b"x" * 2560)  # 2.50 KB
    (root / "a.log").write_bytes(b"x" * 100 * 1024)  # exactly 100 KB
    (root / "c.bin").write_bytes(b"")
    (root / ".hidden").write_text("secret", encoding="utf-8")
    return root
