"""Module formats and the install paths they map to."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, NamedTuple

from sdkgen.errors import UnsupportedFormatError
from sdkgen.layout import SdkLayout


class ModuleFormat(str, Enum):
    """Loading convention targeted by the compiled SDK bundle."""

    AMD = "amd"
    DDC = "ddc"


class InstallTarget(NamedTuple):
    js_path: Path
    js_map_path: Path
    js_file_name: str


def parse_module_format(value: Any) -> ModuleFormat:
    """Coerce ``value`` to a :class:`ModuleFormat` or fail loudly."""
    if isinstance(value, ModuleFormat):
        return value
    if isinstance(value, str):
        try:
            return ModuleFormat(value)
        except ValueError:
            raise UnsupportedFormatError(value) from None
    raise UnsupportedFormatError(value)


def resolve_install_target(layout: SdkLayout, module_format: Any) -> InstallTarget:
    """Return the final js path, source map path and js file name for a format."""
    match parse_module_format(module_format):
        case ModuleFormat.AMD:
            return InstallTarget(
                layout.sound_amd_js_path,
                layout.sound_amd_js_map_path,
                layout.sound_amd_js_file_name,
            )
        case ModuleFormat.DDC:
            return InstallTarget(
                layout.sound_ddc_js_path,
                layout.sound_ddc_js_map_path,
                layout.sound_ddc_js_file_name,
            )
        case unknown:
            raise UnsupportedFormatError(unknown)


__all__ = [
    "InstallTarget",
    "ModuleFormat",
    "parse_module_format",
    "resolve_install_target",
]
