"""Generate missing SDK assets: sdk js, source map, full dill and summary.

The SDK normally ships the summary but not the js or the full dill; those
come from setup tools such as build_web_compilers. Tests that need them call
:meth:`SdkAssetGenerator.generate_sdk_assets` before they start.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from sdkgen.cache import assets_exist, missing_assets
from sdkgen.formats import ModuleFormat, parse_module_format, resolve_install_target
from sdkgen.layout import SdkLayout
from sdkgen.process import ProcessRunner
from sdkgen.staging import GenerationStep, run_generation_step, staging_directory

logger = logging.getLogger(__name__)

MULTI_ROOT_SCHEME = "org-dartlang-sdk"
LIBRARIES_FILE = "org-dartlang-sdk:///lib/libraries.json"


class SdkAssetGenerator:
    """Generate SDK assets at most once per instance."""

    def __init__(
        self,
        layout: SdkLayout,
        *,
        canary_features: bool,
        module_format: ModuleFormat | str,
        verbose: bool = False,
        tool_timeout: float | None = None,
        runner: ProcessRunner | None = None,
    ) -> None:
        self.layout = layout
        self.canary_features = canary_features
        self.module_format = parse_module_format(module_format)
        self.verbose = verbose
        self.runner = runner or ProcessRunner(timeout=tool_timeout)
        self._generated = False
        self._lock = asyncio.Lock()

    @property
    def generated(self) -> bool:
        return self._generated

    async def generate_sdk_assets(self) -> None:
        """Generate all SDK assets, once for the lifetime of this generator.

        A failure propagates to the caller and is not retried by later calls.
        """
        if self._generated:
            return
        async with self._lock:
            if self._generated:
                return
            self._generated = True

            await self._generate_sdk_javascript()
            # Second variant slot; both currently resolve to the sound assets.
            await self._generate_sdk_javascript()
            await self._generate_sdk_summary()

    def generate_sdk_assets_sync(self) -> None:
        asyncio.run(self.generate_sdk_assets())

    def resolve_sdk_js_path(self) -> Path:
        return resolve_install_target(self.layout, self.module_format).js_path

    def resolve_sdk_sourcemap_path(self) -> Path:
        return resolve_install_target(self.layout, self.module_format).js_map_path

    def resolve_sdk_js_filename(self) -> str:
        return resolve_install_target(self.layout, self.module_format).js_file_name

    def javascript_step(self, staging_dir: Path) -> GenerationStep:
        target = resolve_install_target(self.layout, self.module_format)
        js_path = staging_dir / target.js_file_name
        js_map_path = js_path.with_name(f"{js_path.stem}.js.map")
        full_dill_path = js_path.with_suffix(".dill")

        arguments = [
            str(self.layout.dartdevc_snapshot_path),
            "--compile-sdk",
            "--multi-root",
            self.layout.sdk_directory_uri,
            "--multi-root-scheme",
            MULTI_ROOT_SCHEME,
            "--libraries-file",
            LIBRARIES_FILE,
            "--modules",
            self.module_format.value,
            "--sound-null-safety",
            "dart:core",
            "-o",
            str(js_path),
        ]
        if self.canary_features:
            arguments.append("--canary")

        return GenerationStep(
            description="The Dart compiler",
            executable=self.layout.dart_path,
            arguments=tuple(arguments),
            working_directory=self.layout.sdk_directory,
            outputs=(
                (js_path, target.js_path),
                (js_map_path, target.js_map_path),
                (full_dill_path, self.layout.sound_full_dill_path),
            ),
        )

    def summary_step(self, staging_dir: Path) -> GenerationStep:
        summary_path = staging_dir / self.layout.sound_summary_file_name

        arguments = [
            str(self.layout.kernel_worker_snapshot_path),
            "--target",
            "ddc",
            "--multi-root",
            self.layout.sdk_directory_uri,
            "--multi-root-scheme",
            MULTI_ROOT_SCHEME,
            "--libraries-file",
            LIBRARIES_FILE,
            "--source",
            "dart:core",
            "--summary-only",
            "--sound-null-safety",
            "--output",
            str(summary_path),
        ]
        if self.verbose:
            arguments.append("--verbose")

        return GenerationStep(
            description="The Dart kernel worker",
            executable=self.layout.dart_path,
            arguments=tuple(arguments),
            working_directory=self.layout.sdk_directory,
            outputs=((summary_path, self.layout.sound_summary_path),),
        )

    async def _generate_sdk_javascript(self) -> None:
        target = resolve_install_target(self.layout, self.module_format)
        expected = [target.js_path, target.js_map_path, self.layout.sound_full_dill_path]
        if assets_exist(expected):
            return

        try:
            async with staging_directory() as staging_dir:
                logger.info(
                    "Generating js and full dill SDK files (missing: %s)...",
                    ", ".join(str(path) for path in missing_assets(expected)),
                )
                await run_generation_step(self.javascript_step(staging_dir), self.runner)
                logger.info("Done generating js and full dill SDK files.")
        except Exception:
            logger.exception("Failed to generate SDK js, source map, and full dill")
            raise

    async def _generate_sdk_summary(self) -> None:
        if assets_exist([self.layout.sound_summary_path]):
            return

        try:
            async with staging_directory() as staging_dir:
                logger.info("Generating SDK summary files...")
                await run_generation_step(self.summary_step(staging_dir), self.runner)
                logger.info("Done generating SDK summary files.")
        except Exception:
            logger.exception("Failed to generate SDK summary")
            raise

    def __repr__(self) -> str:
        fields: dict[str, Any] = {
            "sdk_directory": str(self.layout.sdk_directory),
            "module_format": self.module_format.value,
            "canary_features": self.canary_features,
            "generated": self._generated,
        }
        inner = ", ".join(f"{key}={value!r}" for key, value in fields.items())
        return f"SdkAssetGenerator({inner})"


__all__ = ["SdkAssetGenerator"]
