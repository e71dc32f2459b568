"""Configuration management for sdkgen."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sdkgen.errors import ConfigError, UnsupportedFormatError
from sdkgen.formats import ModuleFormat, parse_module_format
from sdkgen.generator import SdkAssetGenerator
from sdkgen.layout import SdkLayout

DEFAULT_CONFIG_FILENAME = "sdkgen.yaml"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class SdkGenConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    sdk_directory: Path | None = None
    output_directory: Path | None = None
    module_format: ModuleFormat = ModuleFormat.AMD
    canary_features: bool = False
    verbose: bool = False
    tool_timeout: float | None = Field(default=None, gt=0)
    log_level: LogLevel = "INFO"
    # Individual SdkLayout paths, e.g. {"dart_path": "/opt/dart/bin/dart"}.
    layout: dict[str, Path] = Field(default_factory=dict)

    @field_validator("module_format", mode="before")
    @classmethod
    def _parse_format(cls, value: Any) -> ModuleFormat:
        try:
            return parse_module_format(value)
        except UnsupportedFormatError as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


def load_config(config_path: Path | None = None, overrides: dict[str, Any] | None = None) -> SdkGenConfig:
    resolved_path = _resolve_config_path(config_path)
    base_dir = resolved_path.parent if resolved_path else Path.cwd()
    data: dict[str, Any] = {}
    if resolved_path is not None:
        data = _load_yaml(resolved_path)
    if overrides:
        data = _deep_update(data, {key: value for key, value in overrides.items() if value is not None})
    try:
        config = SdkGenConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    return _resolve_paths(config, base_dir)


def serialize_config(config: SdkGenConfig) -> dict[str, Any]:
    return config.model_dump(mode="json")


def build_layout(config: SdkGenConfig) -> SdkLayout:
    if config.sdk_directory is None:
        raise ConfigError("No SDK directory configured; set sdk_directory or pass --sdk-dir.")
    try:
        return SdkLayout.create_default(config.sdk_directory, config.output_directory, **config.layout)
    except KeyError as exc:
        raise ConfigError(f"Invalid layout override: {exc.args[0]}") from exc


def build_generator(config: SdkGenConfig) -> SdkAssetGenerator:
    return SdkAssetGenerator(
        build_layout(config),
        canary_features=config.canary_features,
        module_format=config.module_format,
        verbose=config.verbose,
        tool_timeout=config.tool_timeout,
    )


def _resolve_config_path(config_path: Path | None) -> Path | None:
    if config_path is not None:
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        return config_path
    default_path = Path.cwd() / DEFAULT_CONFIG_FILENAME
    return default_path if default_path.exists() else None


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read config file: {path}") from exc
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in config file: {path}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Config file must define a mapping.")
    return data


def _deep_update(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_update(merged[key], value)
        else:
            merged[key] = value
    return merged


def _resolve_paths(config: SdkGenConfig, base_dir: Path) -> SdkGenConfig:
    """Make relative paths in the config relative to the config file."""

    def resolve(path: Path | None) -> Path | None:
        if path is None or path.is_absolute():
            return path
        return (base_dir / path).resolve()

    return config.model_copy(
        update={
            "sdk_directory": resolve(config.sdk_directory),
            "output_directory": resolve(config.output_directory),
            "layout": {key: resolve(value) for key, value in config.layout.items()},
        }
    )


__all__ = [
    "DEFAULT_CONFIG_FILENAME",
    "SdkGenConfig",
    "build_generator",
    "build_layout",
    "load_config",
    "serialize_config",
]
