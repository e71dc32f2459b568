from __future__ import annotations

import sys
import tempfile
from pathlib import Path

import pytest

from sdkgen.layout import SdkLayout
from tests.helpers import FAKE_TOOL, SpyRunner


@pytest.fixture()
def staging_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Route temporary directories into the test's tmp_path."""
    root = tmp_path / "staging"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


@pytest.fixture()
def fake_tool_log(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    log_path = tmp_path / "fake_tool.log"
    monkeypatch.setenv("SDKGEN_FAKE_LOG", str(log_path))
    for name in (
        "SDKGEN_FAKE_COMPILER_EXIT",
        "SDKGEN_FAKE_WORKER_EXIT",
        "SDKGEN_FAKE_SKIP",
        "SDKGEN_FAKE_SLEEP",
        "SDKGEN_FAKE_STDOUT_LINES",
        "SDKGEN_FAKE_STDERR_LINES",
    ):
        monkeypatch.delenv(name, raising=False)
    return log_path


@pytest.fixture()
def sdk_layout(tmp_path: Path, staging_root: Path, fake_tool_log: Path) -> SdkLayout:
    sdk_directory = tmp_path / "sdk"
    sdk_directory.mkdir()
    return SdkLayout.create_default(
        sdk_directory,
        tmp_path / "out",
        dart_path=Path(sys.executable),
        dartdevc_snapshot_path=FAKE_TOOL,
        kernel_worker_snapshot_path=FAKE_TOOL,
    )


@pytest.fixture()
def spy_runner() -> SpyRunner:
    return SpyRunner()
