"""Tests for SdkAssetGenerator."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

from sdkgen.errors import MissingGeneratedArtifactError, ToolInvocationFailedError
from sdkgen.formats import ModuleFormat
from sdkgen.generator import SdkAssetGenerator
from sdkgen.layout import SdkLayout
from tests.helpers import FAKE_TOOL, SpyRunner, read_tool_log, write_assets


def _generator(layout: SdkLayout, runner: SpyRunner, **kwargs) -> SdkAssetGenerator:
    options = {"canary_features": False, "module_format": "amd"}
    options.update(kwargs)
    return SdkAssetGenerator(layout, runner=runner, **options)


def _all_assets(layout: SdkLayout) -> list[Path]:
    return [
        layout.sound_amd_js_path,
        layout.sound_amd_js_map_path,
        layout.sound_full_dill_path,
        layout.sound_summary_path,
    ]


@pytest.mark.asyncio
async def test_generates_all_missing_assets(
    sdk_layout: SdkLayout, spy_runner: SpyRunner, staging_root: Path, fake_tool_log: Path
) -> None:
    generator = _generator(sdk_layout, spy_runner)

    await generator.generate_sdk_assets()

    assert generator.generated
    assert [call[1][0] for call in spy_runner.calls] == [str(FAKE_TOOL), str(FAKE_TOOL)]
    assert [entry["mode"] for entry in read_tool_log(fake_tool_log)] == ["compiler", "worker"]
    assert sdk_layout.sound_amd_js_path.read_text(encoding="utf-8") == "compiler:js"
    assert sdk_layout.sound_amd_js_map_path.read_text(encoding="utf-8") == "compiler:map"
    assert sdk_layout.sound_full_dill_path.read_text(encoding="utf-8") == "compiler:dill"
    assert sdk_layout.sound_summary_path.read_text(encoding="utf-8") == "worker:summary"
    assert not sdk_layout.sound_ddc_js_path.exists()
    assert list(staging_root.iterdir()) == []


@pytest.mark.asyncio
async def test_tools_run_in_sdk_directory(
    sdk_layout: SdkLayout, spy_runner: SpyRunner, fake_tool_log: Path
) -> None:
    await _generator(sdk_layout, spy_runner).generate_sdk_assets()

    for entry in read_tool_log(fake_tool_log):
        assert Path(entry["cwd"]).resolve() == sdk_layout.sdk_directory
    assert all(call[0] == sys.executable for call in spy_runner.calls)


@pytest.mark.asyncio
async def test_second_call_is_a_no_op(sdk_layout: SdkLayout, spy_runner: SpyRunner) -> None:
    generator = _generator(sdk_layout, spy_runner)
    await generator.generate_sdk_assets()
    for path in _all_assets(sdk_layout):
        path.unlink()

    await generator.generate_sdk_assets()

    assert len(spy_runner.calls) == 2
    assert not any(path.exists() for path in _all_assets(sdk_layout))


@pytest.mark.asyncio
async def test_concurrent_callers_generate_once(sdk_layout: SdkLayout, spy_runner: SpyRunner) -> None:
    generator = _generator(sdk_layout, spy_runner)

    await asyncio.gather(generator.generate_sdk_assets(), generator.generate_sdk_assets())

    assert len(spy_runner.calls) == 2


@pytest.mark.asyncio
async def test_existing_assets_spawn_nothing(sdk_layout: SdkLayout, spy_runner: SpyRunner) -> None:
    write_assets(*_all_assets(sdk_layout), sdk_layout.sound_ddc_js_path, sdk_layout.sound_ddc_js_map_path)

    await _generator(sdk_layout, spy_runner).generate_sdk_assets()

    assert spy_runner.calls == []
    assert sdk_layout.sound_amd_js_path.read_text(encoding="utf-8") == "existing"


@pytest.mark.asyncio
async def test_each_step_is_gated_independently(
    sdk_layout: SdkLayout, spy_runner: SpyRunner, fake_tool_log: Path
) -> None:
    write_assets(sdk_layout.sound_summary_path)

    await _generator(sdk_layout, spy_runner).generate_sdk_assets()

    assert [entry["mode"] for entry in read_tool_log(fake_tool_log)] == ["compiler"]
    assert sdk_layout.sound_summary_path.read_text(encoding="utf-8") == "existing"


@pytest.mark.asyncio
async def test_partially_present_outputs_are_regenerated(sdk_layout: SdkLayout, spy_runner: SpyRunner) -> None:
    write_assets(sdk_layout.sound_amd_js_path, sdk_layout.sound_summary_path)

    await _generator(sdk_layout, spy_runner).generate_sdk_assets()

    assert len(spy_runner.calls) == 1
    assert sdk_layout.sound_amd_js_path.read_text(encoding="utf-8") == "compiler:js"


@pytest.mark.asyncio
async def test_ddc_format_installs_ddc_bundle(
    sdk_layout: SdkLayout, spy_runner: SpyRunner, fake_tool_log: Path
) -> None:
    await _generator(sdk_layout, spy_runner, module_format=ModuleFormat.DDC).generate_sdk_assets()

    assert sdk_layout.sound_ddc_js_path.read_text(encoding="utf-8") == "compiler:js"
    assert sdk_layout.sound_ddc_js_map_path.exists()
    assert not sdk_layout.sound_amd_js_path.exists()
    compiler_args = read_tool_log(fake_tool_log)[0]["args"]
    assert compiler_args[compiler_args.index("--modules") + 1] == "ddc"


@pytest.mark.asyncio
async def test_compiler_failure_installs_nothing(
    sdk_layout: SdkLayout,
    spy_runner: SpyRunner,
    staging_root: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("SDKGEN_FAKE_COMPILER_EXIT", "1")
    monkeypatch.setenv("SDKGEN_FAKE_STDERR_LINES", "2")
    generator = _generator(sdk_layout, spy_runner)

    with pytest.raises(ToolInvocationFailedError) as excinfo:
        await generator.generate_sdk_assets()

    assert excinfo.value.exit_code == 1
    assert "compiler stderr 1" in excinfo.value.transcript_text()
    assert len(spy_runner.calls) == 1
    assert not any(path.exists() for path in _all_assets(sdk_layout))
    assert list(staging_root.iterdir()) == []
    assert generator.generated


@pytest.mark.asyncio
async def test_failed_generation_is_not_retried(
    sdk_layout: SdkLayout, spy_runner: SpyRunner, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("SDKGEN_FAKE_WORKER_EXIT", "2")
    generator = _generator(sdk_layout, spy_runner)
    with pytest.raises(ToolInvocationFailedError):
        await generator.generate_sdk_assets()
    monkeypatch.delenv("SDKGEN_FAKE_WORKER_EXIT")

    await generator.generate_sdk_assets()

    assert len(spy_runner.calls) == 2
    assert not sdk_layout.sound_summary_path.exists()
    assert sdk_layout.sound_amd_js_path.exists()


@pytest.mark.asyncio
async def test_missing_tool_output_raises(
    sdk_layout: SdkLayout, spy_runner: SpyRunner, staging_root: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("SDKGEN_FAKE_SKIP", "map")

    with pytest.raises(MissingGeneratedArtifactError) as excinfo:
        await _generator(sdk_layout, spy_runner).generate_sdk_assets()

    assert excinfo.value.path.name == "dart_sdk.js.map"
    assert list(staging_root.iterdir()) == []


@pytest.mark.asyncio
async def test_stream_output_is_captured_and_generation_proceeds(
    sdk_layout: SdkLayout, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("SDKGEN_FAKE_STDOUT_LINES", "4")
    monkeypatch.setenv("SDKGEN_FAKE_STDERR_LINES", "3")
    outcomes = []

    class RecordingRunner(SpyRunner):
        async def run(self, executable, arguments, cwd=None):
            outcome = await super().run(executable, arguments, cwd=cwd)
            outcomes.append(outcome)
            return outcome

    await _generator(sdk_layout, RecordingRunner()).generate_sdk_assets()

    compiler = outcomes[0]
    assert compiler.lines("stdout") == [f"compiler stdout {i}" for i in range(4)]
    assert compiler.lines("stderr") == [f"compiler stderr {i}" for i in range(3)]
    assert sdk_layout.sound_amd_js_path.exists()


def test_javascript_arguments(sdk_layout: SdkLayout, spy_runner: SpyRunner, tmp_path: Path) -> None:
    stage = tmp_path / "stage"
    step = _generator(sdk_layout, spy_runner, canary_features=True).javascript_step(stage)

    assert step.executable == Path(sys.executable)
    assert step.working_directory == sdk_layout.sdk_directory
    assert list(step.arguments) == [
        str(FAKE_TOOL),
        "--compile-sdk",
        "--multi-root",
        sdk_layout.sdk_directory_uri,
        "--multi-root-scheme",
        "org-dartlang-sdk",
        "--libraries-file",
        "org-dartlang-sdk:///lib/libraries.json",
        "--modules",
        "amd",
        "--sound-null-safety",
        "dart:core",
        "-o",
        str(stage / "dart_sdk.js"),
        "--canary",
    ]
    assert step.outputs == (
        (stage / "dart_sdk.js", sdk_layout.sound_amd_js_path),
        (stage / "dart_sdk.js.map", sdk_layout.sound_amd_js_map_path),
        (stage / "dart_sdk.dill", sdk_layout.sound_full_dill_path),
    )


def test_summary_arguments(sdk_layout: SdkLayout, spy_runner: SpyRunner, tmp_path: Path) -> None:
    stage = tmp_path / "stage"
    quiet = _generator(sdk_layout, spy_runner).summary_step(stage)
    verbose = _generator(sdk_layout, spy_runner, verbose=True).summary_step(stage)

    assert list(quiet.arguments) == [
        str(FAKE_TOOL),
        "--target",
        "ddc",
        "--multi-root",
        sdk_layout.sdk_directory_uri,
        "--multi-root-scheme",
        "org-dartlang-sdk",
        "--libraries-file",
        "org-dartlang-sdk:///lib/libraries.json",
        "--source",
        "dart:core",
        "--summary-only",
        "--sound-null-safety",
        "--output",
        str(stage / "ddc_outline.dill"),
    ]
    assert verbose.arguments == quiet.arguments + ("--verbose",)
    assert quiet.outputs == ((stage / "ddc_outline.dill", sdk_layout.sound_summary_path),)


def test_resolvers_follow_configured_format(sdk_layout: SdkLayout, spy_runner: SpyRunner) -> None:
    generator = _generator(sdk_layout, spy_runner, module_format="ddc")
    assert generator.resolve_sdk_js_path() == sdk_layout.sound_ddc_js_path
    assert generator.resolve_sdk_sourcemap_path() == sdk_layout.sound_ddc_js_map_path
    assert generator.resolve_sdk_js_filename() == "dart_sdk.js"


def test_sync_wrapper(sdk_layout: SdkLayout, spy_runner: SpyRunner) -> None:
    generator = _generator(sdk_layout, spy_runner)
    generator.generate_sdk_assets_sync()
    assert all(path.exists() for path in _all_assets(sdk_layout))
