"""On-disk locations of the SDK tools and the generated SDK assets."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict

DART_SDK_JS = "dart_sdk.js"
FULL_DILL = "ddc_platform.dill"
SUMMARY_DILL = "ddc_outline.dill"


class SdkLayout(BaseModel):
    """Absolute paths consumed by the asset generator.

    The generator only reads these values; callers own the layout and decide
    where each artifact lives.
    """

    model_config = ConfigDict(frozen=True)

    sdk_directory: Path
    dart_path: Path
    dartdevc_snapshot_path: Path
    kernel_worker_snapshot_path: Path

    sound_amd_js_path: Path
    sound_amd_js_map_path: Path
    sound_ddc_js_path: Path
    sound_ddc_js_map_path: Path
    sound_full_dill_path: Path
    sound_summary_path: Path

    @property
    def sound_amd_js_file_name(self) -> str:
        return self.sound_amd_js_path.name

    @property
    def sound_ddc_js_file_name(self) -> str:
        return self.sound_ddc_js_path.name

    @property
    def sound_summary_file_name(self) -> str:
        return self.sound_summary_path.name

    @property
    def sdk_directory_uri(self) -> str:
        """File URI of the SDK root, with the trailing slash the compilers expect."""
        uri = self.sdk_directory.resolve().as_uri()
        return uri if uri.endswith("/") else f"{uri}/"

    def asset_paths(self) -> dict[str, Path]:
        return {
            "sound_amd_js_path": self.sound_amd_js_path,
            "sound_amd_js_map_path": self.sound_amd_js_map_path,
            "sound_ddc_js_path": self.sound_ddc_js_path,
            "sound_ddc_js_map_path": self.sound_ddc_js_map_path,
            "sound_full_dill_path": self.sound_full_dill_path,
            "sound_summary_path": self.sound_summary_path,
        }

    def tool_paths(self) -> dict[str, Path]:
        return {
            "dart_path": self.dart_path,
            "dartdevc_snapshot_path": self.dartdevc_snapshot_path,
            "kernel_worker_snapshot_path": self.kernel_worker_snapshot_path,
        }

    @classmethod
    def create_default(
        cls,
        sdk_directory: Path,
        output_directory: Path | None = None,
        **overrides: Path,
    ) -> "SdkLayout":
        """Build the standard Dart SDK layout rooted at ``sdk_directory``.

        Generated assets land under ``output_directory`` when given, so a
        read-only SDK can be paired with a writable output tree. Keyword
        overrides replace individual paths.
        """
        sdk_directory = Path(sdk_directory).resolve()
        output_root = Path(output_directory).resolve() if output_directory else sdk_directory
        snapshots = sdk_directory / "bin" / "snapshots"
        dev_compiler = output_root / "lib" / "dev_compiler"
        internal = output_root / "lib" / "_internal"

        values: dict[str, Path] = {
            "sdk_directory": sdk_directory,
            "dart_path": sdk_directory / "bin" / "dart",
            "dartdevc_snapshot_path": snapshots / "dartdevc.dart.snapshot",
            "kernel_worker_snapshot_path": snapshots / "kernel_worker.dart.snapshot",
            "sound_amd_js_path": dev_compiler / "amd" / DART_SDK_JS,
            "sound_amd_js_map_path": dev_compiler / "amd" / f"{DART_SDK_JS}.map",
            "sound_ddc_js_path": dev_compiler / "ddc" / DART_SDK_JS,
            "sound_ddc_js_map_path": dev_compiler / "ddc" / f"{DART_SDK_JS}.map",
            "sound_full_dill_path": internal / FULL_DILL,
            "sound_summary_path": internal / SUMMARY_DILL,
        }
        for key, value in overrides.items():
            if key not in values:
                raise KeyError(f"Unknown layout path: {key}")
            values[key] = Path(value)
        return cls(**values)


__all__ = ["SdkLayout"]
