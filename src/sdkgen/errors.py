# src/sdkgen/errors.py
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sdkgen.process import TranscriptLine


class SdkGenError(Exception):
    """Base exception for all sdkgen errors."""
    code: str = "SDKGEN-UNKNOWN"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class ConfigError(SdkGenError):
    code = "SDKGEN-CONFIG"


class UnsupportedFormatError(SdkGenError):
    code = "SDKGEN-FORMAT"

    def __init__(self, value: Any):
        super().__init__(f"Unsupported DDC module format {value!r}.")
        self.value = value


class ToolInvocationFailedError(SdkGenError):
    code = "SDKGEN-TOOL"

    def __init__(
        self,
        message: str,
        *,
        executable: str,
        exit_code: int | None,
        transcript: list[TranscriptLine] | None = None,
    ):
        super().__init__(message)
        self.executable = executable
        self.exit_code = exit_code
        self.transcript = list(transcript or [])

    def transcript_text(self) -> str:
        return "\n".join(line.text for line in self.transcript)


class ToolTimeoutError(ToolInvocationFailedError):
    code = "SDKGEN-TIMEOUT"

    def __init__(
        self,
        message: str,
        *,
        executable: str,
        timeout: float,
        transcript: list[TranscriptLine] | None = None,
    ):
        super().__init__(message, executable=executable, exit_code=None, transcript=transcript)
        self.timeout = timeout


class MissingGeneratedArtifactError(SdkGenError):
    code = "SDKGEN-MISSING"

    def __init__(self, path: Path):
        super().__init__(f'File "{path}" does not exist.')
        self.path = path


class InstallVerificationFailedError(SdkGenError):
    code = "SDKGEN-INSTALL"

    def __init__(self, source: Path, destination: Path, message: str | None = None):
        super().__init__(message or f'File "{destination}" does not exist after moving "{source}".')
        self.source = source
        self.destination = destination
