from __future__ import annotations

import json
from pathlib import Path

from sdkgen.process import ProcessOutcome, ProcessRunner

FAKE_TOOL = Path(__file__).parent / "fixtures" / "fake_dart_tool.py"


class SpyRunner(ProcessRunner):
    """ProcessRunner that records every spawn."""

    def __init__(self, timeout: float | None = None) -> None:
        super().__init__(timeout=timeout)
        self.calls: list[tuple[str, tuple[str, ...], str | None]] = []

    async def run(self, executable, arguments, cwd=None) -> ProcessOutcome:
        self.calls.append((str(executable), tuple(arguments), str(cwd) if cwd is not None else None))
        return await super().run(executable, arguments, cwd=cwd)


def read_tool_log(path: Path) -> list[dict]:
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line]


def write_assets(*paths: Path, content: str = "existing") -> None:
    for path in paths:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
