"""Staged generation: tools write into a scratch directory, results are moved into place.

A failed or interrupted tool run therefore never leaves a partial file at a
final path where a later existence check would accept it.
"""

from __future__ import annotations

import asyncio
import contextlib
import errno
import logging
import os
import shutil
import tempfile
import uuid
from collections.abc import AsyncIterator
from dataclasses import dataclass
from pathlib import Path

from sdkgen.errors import (
    InstallVerificationFailedError,
    MissingGeneratedArtifactError,
    ToolInvocationFailedError,
)
from sdkgen.process import ProcessRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GenerationStep:
    """One tool invocation and the files it is expected to produce."""

    description: str
    executable: Path
    arguments: tuple[str, ...]
    working_directory: Path
    outputs: tuple[tuple[Path, Path], ...]

    @property
    def staged_paths(self) -> list[Path]:
        return [staged for staged, _ in self.outputs]

    @property
    def destinations(self) -> list[Path]:
        return [destination for _, destination in self.outputs]


@contextlib.asynccontextmanager
async def staging_directory(prefix: str = "sdkgen_") -> AsyncIterator[Path]:
    """Create a fresh temporary directory and remove it on every exit path."""
    path = Path(await asyncio.to_thread(tempfile.mkdtemp, prefix=prefix))
    logger.debug("Created staging directory %s", path)
    try:
        yield path
    finally:
        if path.exists():
            await asyncio.to_thread(shutil.rmtree, path)
        logger.debug("Removed staging directory %s", path)


def install_artifact(staged: Path, destination: Path) -> None:
    """Move a staged file to its final path and confirm it landed."""
    logger.debug("Renaming %s to %s", staged, destination)

    if not staged.is_file():
        logger.error("Failed to generate SDK asset at %s", destination)
        raise MissingGeneratedArtifactError(staged)

    if destination.is_dir():
        logger.error("Cannot install SDK asset over directory %s", destination)
        raise InstallVerificationFailedError(
            staged, destination, f'Destination "{destination}" is a directory.'
        )
    if destination.exists():
        destination.unlink()
    _move(staged, destination)

    if not destination.is_file():
        logger.error("Failed to generate SDK asset at %s", destination)
        raise InstallVerificationFailedError(staged, destination)


def _move(source: Path, destination: Path) -> None:
    try:
        os.replace(source, destination)
    except OSError as exc:
        if exc.errno != errno.EXDEV:
            raise
        # Staging is on another filesystem: copy next to the destination, then rename.
        partial = destination.with_name(f".{destination.name}.{uuid.uuid4().hex}.partial")
        try:
            shutil.copy2(source, partial)
            os.replace(partial, destination)
        finally:
            if partial.exists():
                partial.unlink()
        source.unlink()


async def run_generation_step(step: GenerationStep, runner: ProcessRunner) -> None:
    """Run the step's tool, then install every staged output in order."""
    outcome = await runner.run(step.executable, step.arguments, cwd=step.working_directory)
    if not outcome.ok:
        target = step.staged_paths[0] if step.outputs else step.working_directory
        logger.warning("Error generating %s: %s", target, outcome.format_transcript())
        raise ToolInvocationFailedError(
            f"{step.description} exited unexpectedly with code {outcome.exit_code}",
            executable=str(step.executable),
            exit_code=outcome.exit_code,
            transcript=outcome.transcript,
        )

    parents = {destination.parent for destination in step.destinations}
    for parent in sorted(parents):
        parent.mkdir(parents=True, exist_ok=True)

    for staged, destination in step.outputs:
        install_artifact(staged, destination)


__all__ = [
    "GenerationStep",
    "install_artifact",
    "run_generation_step",
    "staging_directory",
]
