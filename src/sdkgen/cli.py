"""Command-line interface for sdkgen."""

from __future__ import annotations

import importlib.metadata
import json
import logging
from pathlib import Path
from typing import Any

import typer
import yaml
from rich.console import Console
from rich.table import Table

from sdkgen.config import ConfigError, build_generator, build_layout, load_config, serialize_config
from sdkgen.errors import SdkGenError

app = typer.Typer(help="Generate compiled Dart SDK assets for tests and builds.")
console = Console()

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(importlib.metadata.version("sdkgen"))
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(None, "--version", callback=_version_callback, is_eager=True),
) -> None:
    pass


def _build_overrides(
    sdk_dir: Path | None,
    output_dir: Path | None,
    module_format: str | None,
    canary: bool | None,
    verbose: bool | None,
    timeout: float | None,
    log_level: str | None,
) -> dict[str, Any]:
    values: dict[str, Any] = {
        "sdk_directory": sdk_dir,
        "output_directory": output_dir,
        "module_format": module_format,
        "canary_features": canary,
        "verbose": verbose,
        "tool_timeout": timeout,
        "log_level": log_level,
    }
    return {key: value for key, value in values.items() if value is not None}


def _print_error(code: str, message: str) -> None:
    typer.echo(f"{code}: {message}", err=True)


ConfigOption = typer.Option(None, "--config", "-c", dir_okay=False, resolve_path=True)
SdkDirOption = typer.Option(None, "--sdk-dir", file_okay=False, resolve_path=True)
OutputDirOption = typer.Option(None, "--output-dir", file_okay=False, resolve_path=True)
ModuleFormatOption = typer.Option(None, "--module-format", "-m", help="amd or ddc")


@app.command()
def generate(
    config_path: Path | None = ConfigOption,
    sdk_dir: Path | None = SdkDirOption,
    output_dir: Path | None = OutputDirOption,
    module_format: str | None = ModuleFormatOption,
    canary: bool | None = typer.Option(None, "--canary/--no-canary"),
    verbose: bool | None = typer.Option(None, "--verbose/--no-verbose"),
    timeout: float | None = typer.Option(None, "--timeout", help="Seconds before a tool is killed."),
    log_level: str | None = typer.Option(None, "--log-level"),
) -> None:
    """Generate any missing SDK js, source map, full dill and summary."""
    overrides = _build_overrides(sdk_dir, output_dir, module_format, canary, verbose, timeout, log_level)
    try:
        config = load_config(config_path, overrides)
        logging.basicConfig(level=config.log_level, format=LOG_FORMAT)
        generator = build_generator(config)
        generator.generate_sdk_assets_sync()
    except SdkGenError as exc:
        _print_error(exc.code, str(exc))
        raise typer.Exit(code=1) from exc
    console.print("[green]SDK assets are up to date.[/green]")


@app.command()
def layout(
    config_path: Path | None = ConfigOption,
    sdk_dir: Path | None = SdkDirOption,
    output_dir: Path | None = OutputDirOption,
    output_format: str = typer.Option("table", "--format", "-f"),
) -> None:
    """Show the resolved SDK layout and which assets exist."""
    output_format_normalized = output_format.lower()
    if output_format_normalized not in {"table", "json"}:
        raise typer.BadParameter("Format must be 'table' or 'json'.")
    overrides = _build_overrides(sdk_dir, output_dir, None, None, None, None, None)
    try:
        sdk_layout = build_layout(load_config(config_path, overrides))
    except ConfigError as exc:
        _print_error(exc.code, str(exc))
        raise typer.Exit(code=1) from exc

    rows = [
        {"name": name, "path": str(path), "exists": path.is_file()}
        for name, path in {**sdk_layout.tool_paths(), **sdk_layout.asset_paths()}.items()
    ]
    if output_format_normalized == "json":
        typer.echo(json.dumps(rows, indent=2))
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Entry", style="cyan")
    table.add_column("Path")
    table.add_column("Exists", justify="center")
    for row in rows:
        icon = "[green]✓[/green]" if row["exists"] else "[red]✗[/red]"
        table.add_row(row["name"], row["path"], icon)
    console.print(f"SDK directory: {sdk_layout.sdk_directory}")
    console.print(table)


@app.command()
def config(
    config_path: Path | None = ConfigOption,
    output_format: str = typer.Option("yaml", "--format", "-f"),
    sdk_dir: Path | None = SdkDirOption,
    output_dir: Path | None = OutputDirOption,
    module_format: str | None = ModuleFormatOption,
    canary: bool | None = typer.Option(None, "--canary/--no-canary"),
    verbose: bool | None = typer.Option(None, "--verbose/--no-verbose"),
    timeout: float | None = typer.Option(None, "--timeout"),
    log_level: str | None = typer.Option(None, "--log-level"),
) -> None:
    """Show current configuration."""
    overrides = _build_overrides(sdk_dir, output_dir, module_format, canary, verbose, timeout, log_level)
    try:
        config_data = load_config(config_path, overrides)
    except ConfigError as exc:
        _print_error(exc.code, str(exc))
        raise typer.Exit(code=1) from exc
    payload = serialize_config(config_data)
    output_format_normalized = output_format.lower()
    if output_format_normalized == "yaml":
        output = yaml.safe_dump(payload, sort_keys=False)
    elif output_format_normalized == "json":
        output = json.dumps(payload, indent=2)
    else:
        raise typer.BadParameter("Format must be 'yaml' or 'json'.")
    typer.echo(output)


if __name__ == "__main__":
    app()
