"""Integration tests for the full adapter pipeline."""

from __future__ import annotations

import gzip
from pathlib import Path

import brotli
import pytest

from adapt.pipeline import AdaptPipelineRunner
from bundle.rollup_bundler import RollupBundler
from core.config import AdapterConfig
from core.errors import AdapterBundleError, AdapterLayoutError
from core.types import AdapterOptions, BuildArtifacts, CompressionOptions, PatchOutcome
from tests.fake_bundler import FakeRollupRunner
from tests.fixture_paths import copy_fixture


def _config() -> AdapterConfig:
    return AdapterConfig(
        bundler_command=("npx", "rollup"), max_concurrency=8, work_dir_name=".adapter-bun"
    )


def _project(tmp_path: Path) -> tuple[Path, BuildArtifacts]:
    project_root = tmp_path / "project"
    copy_fixture("project", project_root)
    build_dir = copy_fixture("build_output", project_root / ".build")
    return project_root, BuildArtifacts.from_build_dir(build_dir)


def _runner(
    project_root: Path,
    artifacts: BuildArtifacts,
    options: AdapterOptions,
    fake: FakeRollupRunner,
) -> AdaptPipelineRunner:
    bundler = RollupBundler(_config(), runner=fake)
    return AdaptPipelineRunner(artifacts, options, _config(), project_root, bundler=bundler)


def test_pipeline_produces_deployable_layout(tmp_path: Path) -> None:
    """Copy, patch, bundle, and compose stages produce the full layout."""
    project_root, artifacts = _project(tmp_path)
    out_dir = project_root / "build"
    fake = FakeRollupRunner(output_dir=out_dir / "server")
    options = AdapterOptions(env_prefix="MYAPP_")

    result = _runner(project_root, artifacts, options, fake).run()

    work_dir = project_root / ".adapter-bun"
    assert result.out_dir == out_dir
    assert result.patch_outcome is PatchOutcome.PATCHED
    assert "handleWebsocket" in (work_dir / "index.js").read_text(encoding="utf-8")
    manifest_module = (work_dir / "manifest.js").read_text(encoding="utf-8")
    assert manifest_module.startswith("export const manifest")
    assert 'external: ["cookie", "zod"]' in fake.configs[0]
    assert (out_dir / "server" / "index.js").exists()
    assert (out_dir / "client" / "favicon.svg").exists()
    assert (out_dir / "prerendered" / "index.html").exists()
    assert '"MYAPP_"' in (out_dir / "env.js").read_text(encoding="utf-8")
    assert "'./server/index.js'" in (out_dir / "handler.js").read_text(encoding="utf-8")
    assert result.compression_reports == ()
    assert not list(out_dir.rglob("*.gz"))


def test_pipeline_precompresses_each_asset_directory(tmp_path: Path) -> None:
    """Precompression covers client and prerendered and skips absent static."""
    project_root, artifacts = _project(tmp_path)
    out_dir = project_root / "build"
    fake = FakeRollupRunner(output_dir=out_dir / "server")
    options = AdapterOptions(precompress=CompressionOptions(gzip=True, brotli=True))

    result = _runner(project_root, artifacts, options, fake).run()

    reports = {report.directory.name: report for report in result.compression_reports}
    assert reports["static"].skipped is True
    assert reports["client"].job_count == 4
    assert reports["prerendered"].job_count == 2
    start_js = out_dir / "client" / "_app" / "immutable" / "start.js"
    assert gzip.decompress(Path(f"{start_js}.gz").read_bytes()) == start_js.read_bytes()
    assert brotli.decompress(Path(f"{start_js}.br").read_bytes()) == start_js.read_bytes()
    assert not (out_dir / "client" / "logo.png.gz").exists()
    assert not list((out_dir / "server").rglob("*.gz"))
    assert result.compression_failures == ()


def test_pipeline_end_to_end_gzip_only(tmp_path: Path) -> None:
    """Gzip-only runs produce .gz siblings, skip static, and emit no .br."""
    project_root = tmp_path / "project"
    copy_fixture("project", project_root)
    build_dir = project_root / ".build"
    copy_fixture("build_output/server", build_dir / "server")
    copy_fixture("build_output/manifest.json", build_dir / "manifest.json")
    (build_dir / "client").mkdir()
    (build_dir / "client" / "app.js").write_bytes(b"a" * 10 * 1024)
    (build_dir / "client" / "app.css").write_bytes(b"c" * 2 * 1024)
    (build_dir / "prerendered").mkdir()
    (build_dir / "prerendered" / "index.html").write_bytes(b"h" * 1024)
    out_dir = project_root / "build"
    fake = FakeRollupRunner(output_dir=out_dir / "server")
    options = AdapterOptions(precompress=CompressionOptions(gzip=True, brotli=False))

    result = _runner(project_root, BuildArtifacts.from_build_dir(build_dir), options, fake).run()

    for relative in ("client/app.js", "client/app.css", "prerendered/index.html"):
        assert (out_dir / f"{relative}.gz").exists()
    assert not (out_dir / "static").exists()
    assert not list(out_dir.rglob("*.br"))
    assert [report.skipped for report in result.compression_reports] == [False, True, False]


def test_pipeline_aborts_on_bundle_failure(tmp_path: Path) -> None:
    """A bundling error stops the run before layout composition."""
    project_root, artifacts = _project(tmp_path)
    fake = FakeRollupRunner(returncode=1, stderr="SyntaxError: Unexpected token")
    options = AdapterOptions(precompress=CompressionOptions(gzip=True))

    with pytest.raises(AdapterBundleError):
        _runner(project_root, artifacts, options, fake).run()

    assert not (project_root / "build" / "index.js").exists()
    assert not list((project_root / "build").rglob("*.gz"))


def test_pipeline_clears_previous_output(tmp_path: Path) -> None:
    """Stale files from an earlier build are removed before copying."""
    project_root, artifacts = _project(tmp_path)
    stale = project_root / "build" / "client" / "old.js"
    stale.parent.mkdir(parents=True)
    stale.write_text("old", encoding="utf-8")
    fake = FakeRollupRunner(output_dir=project_root / "build" / "server")

    _runner(project_root, artifacts, AdapterOptions(), fake).run()

    assert not stale.exists()


def test_pipeline_refuses_out_dir_holding_build_input(tmp_path: Path) -> None:
    """An out dir that is the build dir is rejected before anything is deleted."""
    project_root = tmp_path / "project"
    copy_fixture("project", project_root)
    build_dir = copy_fixture("build_output", project_root / "build")
    fake = FakeRollupRunner(output_dir=build_dir / "server")
    artifacts = BuildArtifacts.from_build_dir(build_dir)

    with pytest.raises(AdapterLayoutError, match="overlaps build input"):
        _runner(project_root, artifacts, AdapterOptions(), fake).run()

    assert (build_dir / "client" / "favicon.svg").exists()
    assert (build_dir / "manifest.json").exists()
    assert fake.calls == []


def test_pipeline_refuses_out_dir_at_project_root(tmp_path: Path) -> None:
    """Resetting the project root itself is refused and the project survives."""
    project_root, artifacts = _project(tmp_path)
    fake = FakeRollupRunner(output_dir=project_root / "server")

    with pytest.raises(AdapterLayoutError, match="project root"):
        _runner(project_root, artifacts, AdapterOptions(out_dir=Path(".")), fake).run()

    assert (project_root / "package.json").exists()


def test_pipeline_refuses_work_dir_at_project_root(tmp_path: Path) -> None:
    """A work dir resolving to the project root is refused before any reset."""
    project_root, artifacts = _project(tmp_path)
    fake = FakeRollupRunner(output_dir=project_root / "build" / "server")
    config = AdapterConfig(bundler_command=("npx", "rollup"), max_concurrency=8, work_dir_name="")
    runner = AdaptPipelineRunner(
        artifacts,
        AdapterOptions(),
        config,
        project_root,
        bundler=RollupBundler(config, runner=fake),
    )

    with pytest.raises(AdapterLayoutError):
        runner.run()

    assert (project_root / "package.json").exists()
    assert (project_root / ".build" / "manifest.json").exists()
