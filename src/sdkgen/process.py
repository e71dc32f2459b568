"""Subprocess execution with concurrent output capture.

Both pipes of the child are drained line by line while the runner waits for
the child to exit. Reading one pipe to completion before the other can
deadlock once the child fills the unread pipe's buffer.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from sdkgen.errors import ToolInvocationFailedError, ToolTimeoutError

logger = logging.getLogger(__name__)

StreamName = Literal["stdout", "stderr"]

# asyncio's default is 64 KiB; compiler diagnostics can exceed that.
STREAM_LIMIT = 1024 * 1024


@dataclass(frozen=True, slots=True)
class TranscriptLine:
    stream: StreamName
    text: str


@dataclass(slots=True)
class ProcessOutcome:
    """Exit status and captured output of one tool run."""

    exit_code: int
    transcript: list[TranscriptLine] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def lines(self, stream: StreamName | None = None) -> list[str]:
        return [line.text for line in self.transcript if stream is None or line.stream == stream]

    def format_transcript(self) -> str:
        return "\n".join(line.text for line in self.transcript)


class ProcessRunner:
    """Spawn external tools and collect their output.

    Args:
        timeout: Seconds to wait for the child before killing it. ``None``
            waits indefinitely.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    async def run(
        self,
        executable: str | Path,
        arguments: Sequence[str],
        cwd: str | Path | None = None,
    ) -> ProcessOutcome:
        executable = str(executable)
        logger.debug("Executing %s %s", executable, " ".join(arguments))
        try:
            process = await asyncio.create_subprocess_exec(
                executable,
                *arguments,
                cwd=str(cwd) if cwd is not None else None,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=STREAM_LIMIT,
            )
        except OSError as exc:
            raise ToolInvocationFailedError(
                f"Failed to start {executable}: {exc}",
                executable=executable,
                exit_code=None,
            ) from exc

        transcript: list[TranscriptLine] = []
        tasks = [
            asyncio.ensure_future(_drain(process.stdout, "stdout", transcript)),
            asyncio.ensure_future(_drain(process.stderr, "stderr", transcript)),
            asyncio.ensure_future(process.wait()),
        ]
        try:
            await asyncio.wait_for(asyncio.gather(*tasks), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            await _terminate(process, tasks)
            raise ToolTimeoutError(
                f"{executable} did not exit within {self.timeout}s",
                executable=executable,
                timeout=self.timeout,
                transcript=transcript,
            ) from exc
        except BaseException:
            logger.error("Aborting %s; killing the child process", executable)
            await _terminate(process, tasks)
            raise

        exit_code = process.returncode
        assert exit_code is not None
        if exit_code != 0:
            logger.warning("%s exited with code %s", executable, exit_code)
        return ProcessOutcome(exit_code=exit_code, transcript=transcript)


async def _drain(
    stream: asyncio.StreamReader | None,
    name: StreamName,
    transcript: list[TranscriptLine],
) -> None:
    if stream is None:
        return
    log = logger.info if name == "stdout" else logger.warning
    while True:
        raw = await _read_line(stream)
        if not raw:
            break
        text = raw.decode("utf-8", errors="replace").rstrip("\r\n")
        log("%s", text)
        transcript.append(TranscriptLine(name, text))


async def _read_line(stream: asyncio.StreamReader) -> bytes:
    """Read one line of any length; ``readline`` gives up past the stream limit."""
    chunks: list[bytes] = []
    while True:
        try:
            chunks.append(await stream.readuntil(b"\n"))
            break
        except asyncio.IncompleteReadError as exc:
            chunks.append(exc.partial)
            break
        except asyncio.LimitOverrunError as exc:
            chunks.append(await stream.readexactly(exc.consumed))
    return b"".join(chunks)


async def _terminate(process: asyncio.subprocess.Process, tasks: list[asyncio.Future]) -> None:
    for task in tasks:
        task.cancel()
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    await asyncio.gather(*tasks, return_exceptions=True)
    await process.wait()


__all__ = ["ProcessOutcome", "ProcessRunner", "TranscriptLine"]
