"""Adapter orchestration for Bun deployments.

This module coordinates asset copy, entry patching, bundling, layout
composition, and optional precompression into one output directory.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from bundle.dependency_manifest import read_dependency_manifest
from bundle.manifest_module import write_manifest_module
from bundle.rollup_bundler import RollupBundler, build_bundle_descriptor
from compress.precompress_engine import precompress_directories
from core.config import AdapterConfig
from core.constants import (
    CLIENT_DIR_NAME,
    ENTRY_MODULE_FILE_NAME,
    MANIFEST_MODULE_FILE_NAME,
    PACKAGE_DESCRIPTOR_FILE_NAME,
    PRERENDERED_DIR_NAME,
    SERVER_DIR_NAME,
    STATIC_DIR_NAME,
)
from core.errors import AdapterLayoutError
from core.logging_config import get_logger
from core.types import (
    AdapterOptions,
    AdaptResult,
    BuildArtifacts,
    CompressionOptions,
    CompressionReport,
    PatchOutcome,
)
from layout.composer import DEFAULT_TEMPLATE_DIR, compose_layout, copy_build_assets, reset_directory
from layout.template_tokens import build_template_tokens
from patch.entry_patcher import patch_entry_file

_LOGGER = get_logger(__name__)


class AdaptPipelineRunner:
    """Runs the adapter stages for one build."""

    def __init__(
        self,
        artifacts: BuildArtifacts,
        options: AdapterOptions,
        config: AdapterConfig,
        project_root: Path,
        bundler: RollupBundler | None = None,
        template_dir: Path = DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._artifacts = artifacts
        self._options = options
        self._config = config
        self._project_root = project_root
        self._out_dir = _resolve_under(project_root, options.out_dir)
        self._work_dir = project_root / config.work_dir_name
        self._bundler = bundler or RollupBundler(config)
        self._template_dir = template_dir

    def run(self) -> AdaptResult:
        """Execute every stage and return the run summary."""
        _ensure_safe_to_reset(
            {"out": self._out_dir, "work": self._work_dir},
            self._project_root,
            self._artifacts,
        )
        reset_directory(self._out_dir)
        reset_directory(self._work_dir)
        copy_build_assets(self._artifacts, self._out_dir, self._work_dir)
        manifest_module = write_manifest_module(
            self._artifacts.manifest_path,
            self._work_dir / MANIFEST_MODULE_FILE_NAME,
        )
        entry_module = self._work_dir / ENTRY_MODULE_FILE_NAME
        patch_outcome = patch_entry_file(entry_module, self._options.websocket_hook)
        server_dir = self._bundle(entry_module, manifest_module)
        composed_files = compose_layout(
            self._template_dir,
            self._out_dir,
            build_template_tokens(self._options),
        )
        reports = self._precompress()
        _log_adapt_completion(self._out_dir, patch_outcome, reports)
        return AdaptResult(
            out_dir=self._out_dir,
            patch_outcome=patch_outcome,
            server_dir=server_dir,
            composed_files=composed_files,
            compression_reports=tuple(reports),
        )

    def _bundle(self, entry_module: Path, manifest_module: Path) -> Path:
        dependencies = read_dependency_manifest(self._project_root / PACKAGE_DESCRIPTOR_FILE_NAME)
        descriptor = build_bundle_descriptor(
            entry_module,
            manifest_module,
            dependencies,
            self._out_dir / SERVER_DIR_NAME,
        )
        return self._bundler.bundle(descriptor, self._work_dir)

    def _precompress(self) -> list[CompressionReport]:
        compression = self._options.precompress
        if compression is None or not compression.enabled:
            return []
        _LOGGER.info("compression_started", codecs=[c.value for c in compression.enabled_codecs])
        roots = [
            self._out_dir / CLIENT_DIR_NAME,
            self._out_dir / STATIC_DIR_NAME,
            self._out_dir / PRERENDERED_DIR_NAME,
        ]
        reports = asyncio.run(
            precompress_directories(roots, compression, self._config.max_concurrency)
        )
        _log_compression_summary(reports, compression)
        return reports


def adapt(
    artifacts: BuildArtifacts,
    options: AdapterOptions,
    config: AdapterConfig,
    project_root: Path,
) -> AdaptResult:
    """Turn finished build output into a deployable Bun layout.

    Args:
        artifacts: Upstream build output locations.
        options: Adapter options.
        config: Runtime configuration.
        project_root: Target project root holding ``package.json``.

    Returns:
        Summary of the produced layout.

    Raises:
        AdapterBundleError: If bundling fails.
        AdapterLayoutError: If copying or composing the layout fails.
        AdapterConfigError: If the package descriptor is invalid.
    """
    runner = AdaptPipelineRunner(artifacts, options, config, project_root)
    return runner.run()


def _resolve_under(project_root: Path, path: Path) -> Path:
    return path if path.is_absolute() else project_root / path


def _ensure_safe_to_reset(
    targets: dict[str, Path],
    project_root: Path,
    artifacts: BuildArtifacts,
) -> None:
    """Refuse to reset directories that hold the project or the build input.

    Raises:
        AdapterLayoutError: If a reset target equals or contains the project
            root, or overlaps any build input path.
    """
    root = project_root.resolve()
    inputs = [
        artifacts.client_dir,
        artifacts.server_dir,
        artifacts.prerendered_dir,
        artifacts.manifest_path,
    ]
    if artifacts.static_dir is not None:
        inputs.append(artifacts.static_dir)
    for label, target in targets.items():
        resolved = target.resolve()
        if root.is_relative_to(resolved):
            raise AdapterLayoutError(
                f"Refusing to reset {label} directory {target}: it is or contains the "
                f"project root {project_root}. Choose a subdirectory instead."
            )
        for input_path in inputs:
            source = input_path.resolve()
            if source.is_relative_to(resolved) or resolved.is_relative_to(source):
                raise AdapterLayoutError(
                    f"Refusing to reset {label} directory {target}: it overlaps build "
                    f"input {input_path}. Point the build dir and the out dir at "
                    "separate locations."
                )


def _log_compression_summary(
    reports: list[CompressionReport],
    compression: CompressionOptions,
) -> None:
    failed_paths = sorted({str(path) for report in reports for path in report.failed_paths})
    if failed_paths:
        _LOGGER.warning("compression_failures", failed_paths=failed_paths)
    _LOGGER.info(
        "compression_completed",
        gzip=compression.gzip,
        brotli=compression.brotli,
        job_count=sum(report.job_count for report in reports),
        failed_count=sum(len(report.failures) for report in reports),
        skipped_directories=[str(report.directory) for report in reports if report.skipped],
    )


def _log_adapt_completion(
    out_dir: Path,
    patch_outcome: PatchOutcome,
    reports: list[CompressionReport],
) -> None:
    _LOGGER.info(
        "adapt_completed",
        out_dir=str(out_dir),
        patch_outcome=patch_outcome.value,
        compressed_directories=len([report for report in reports if not report.skipped]),
        start_command=f"bun {out_dir / ENTRY_MODULE_FILE_NAME}",
    )
