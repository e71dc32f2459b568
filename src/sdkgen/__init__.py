"""sdkgen public API surface."""

from sdkgen.cache import assets_exist, missing_assets
from sdkgen.config import SdkGenConfig, build_generator, build_layout, load_config, serialize_config
from sdkgen.errors import (
    ConfigError,
    InstallVerificationFailedError,
    MissingGeneratedArtifactError,
    SdkGenError,
    ToolInvocationFailedError,
    ToolTimeoutError,
    UnsupportedFormatError,
)
from sdkgen.formats import InstallTarget, ModuleFormat, parse_module_format, resolve_install_target
from sdkgen.generator import SdkAssetGenerator
from sdkgen.layout import SdkLayout
from sdkgen.process import ProcessOutcome, ProcessRunner, TranscriptLine
from sdkgen.staging import GenerationStep, install_artifact, run_generation_step, staging_directory

__all__ = [
    "ConfigError",
    "InstallVerificationFailedError",
    "MissingGeneratedArtifactError",
    "SdkGenError",
    "ToolInvocationFailedError",
    "ToolTimeoutError",
    "UnsupportedFormatError",
    "SdkGenConfig",
    "build_generator",
    "build_layout",
    "load_config",
    "serialize_config",
    "InstallTarget",
    "ModuleFormat",
    "parse_module_format",
    "resolve_install_target",
    "SdkAssetGenerator",
    "SdkLayout",
    "ProcessOutcome",
    "ProcessRunner",
    "TranscriptLine",
    "GenerationStep",
    "install_artifact",
    "run_generation_step",
    "staging_directory",
    "assets_exist",
    "missing_assets",
]
