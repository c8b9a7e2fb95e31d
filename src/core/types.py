"""Shared typed models.

This module defines immutable data models used by the patch, bundle,
layout, and precompression stages to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Mapping

from core.constants import (
    BUILD_MANIFEST_FILE_NAME,
    BUNDLE_CHUNK_FILE_NAMES,
    BUNDLE_OUTPUT_FORMAT,
    CLIENT_DIR_NAME,
    DEFAULT_COMPRESS_EXTENSIONS,
    DEFAULT_OUT_DIR,
    DEFAULT_WEBSOCKET_HOOK,
    DEFAULT_XFF_DEPTH,
    PRERENDERED_DIR_NAME,
    SERVER_DIR_NAME,
    STATIC_DIR_NAME,
)


class PatchOutcome(str, Enum):
    """Result tag of the entry-module patch step."""

    PATCHED = "patched"
    UNCHANGED = "unchanged"


class CompressionCodec(str, Enum):
    """Supported precompression formats, valued by file extension."""

    GZIP = "gz"
    BROTLI = "br"


class JobState(str, Enum):
    """Lifecycle states of a single compression job."""

    SCHEDULED = "scheduled"
    READING = "reading"
    COMPRESSING = "compressing"
    WRITING = "writing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class BuildArtifacts:
    """Directories and files produced by the upstream framework build.

    Attributes:
        client_dir: Client asset tree.
        server_dir: Server source tree containing the entry module.
        prerendered_dir: Prerendered pages tree.
        manifest_path: JSON route manifest for the manifest module.
        static_dir: Optional static asset tree.
    """

    client_dir: Path
    server_dir: Path
    prerendered_dir: Path
    manifest_path: Path
    static_dir: Path | None = None

    @classmethod
    def from_build_dir(cls, build_dir: Path) -> "BuildArtifacts":
        """Resolve the conventional build output layout under one directory."""
        static_dir = build_dir / STATIC_DIR_NAME
        return cls(
            client_dir=build_dir / CLIENT_DIR_NAME,
            server_dir=build_dir / SERVER_DIR_NAME,
            prerendered_dir=build_dir / PRERENDERED_DIR_NAME,
            manifest_path=build_dir / BUILD_MANIFEST_FILE_NAME,
            static_dir=static_dir if static_dir.is_dir() else None,
        )


@dataclass(frozen=True)
class BundleDescriptor:
    """Bundling inputs and output settings for one run.

    Attributes:
        inputs: Named entry points mapped to module paths.
        external: Package names left unbundled.
        output_dir: Directory receiving the bundle.
        output_format: Module format of emitted chunks.
        sourcemap: Whether to emit source maps.
        chunk_file_names: Pattern for shared chunk file names.
        prefer_builtins: Resolve platform built-ins before packages.
    """

    inputs: Mapping[str, Path]
    external: tuple[str, ...]
    output_dir: Path
    output_format: str = BUNDLE_OUTPUT_FORMAT
    sourcemap: bool = True
    chunk_file_names: str = BUNDLE_CHUNK_FILE_NAMES
    prefer_builtins: bool = True


@dataclass(frozen=True)
class TemplateToken:
    """Placeholder name and its resolved replacement value."""

    name: str
    value: str


@dataclass(frozen=True)
class CompressionOptions:
    """Resolved precompression configuration.

    Attributes:
        gzip: Emit ``.gz`` siblings.
        brotli: Emit ``.br`` siblings.
        extensions: File extensions eligible for compression, without dots.
    """

    gzip: bool = False
    brotli: bool = False
    extensions: tuple[str, ...] = DEFAULT_COMPRESS_EXTENSIONS

    @property
    def enabled_codecs(self) -> tuple[CompressionCodec, ...]:
        """Return requested codecs in gzip, brotli order."""
        codecs: list[CompressionCodec] = []
        if self.gzip:
            codecs.append(CompressionCodec.GZIP)
        if self.brotli:
            codecs.append(CompressionCodec.BROTLI)
        return tuple(codecs)

    @property
    def enabled(self) -> bool:
        """Return whether any codec is requested."""
        return self.gzip or self.brotli


@dataclass(frozen=True)
class CompressionJob:
    """One (file, codec) unit of precompression work."""

    source_path: Path
    codec: CompressionCodec

    @property
    def output_path(self) -> Path:
        """Return the sibling path receiving compressed output."""
        return self.source_path.with_name(f"{self.source_path.name}.{self.codec.value}")


@dataclass(frozen=True)
class CompressionJobResult:
    """Settled outcome of a compression job.

    Attributes:
        job: The executed job.
        state: Terminal job state.
        error: Failure description when state is FAILED.
    """

    job: CompressionJob
    state: JobState
    error: str | None = None


@dataclass(frozen=True)
class CompressionReport:
    """Aggregated results of precompressing one directory.

    Attributes:
        directory: Root directory that was processed.
        skipped: True when the directory did not exist.
        results: Settled job results, in no particular order.
    """

    directory: Path
    skipped: bool = False
    results: tuple[CompressionJobResult, ...] = ()

    @property
    def job_count(self) -> int:
        return len(self.results)

    @property
    def completed(self) -> tuple[CompressionJobResult, ...]:
        return tuple(result for result in self.results if result.state is JobState.COMPLETED)

    @property
    def failures(self) -> tuple[CompressionJobResult, ...]:
        return tuple(result for result in self.results if result.state is JobState.FAILED)

    @property
    def failed_paths(self) -> tuple[Path, ...]:
        """Return distinct source files with at least one failed job."""
        return tuple(sorted({result.job.source_path for result in self.failures}))

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class AdapterOptions:
    """Caller-supplied adapter options.

    Attributes:
        out_dir: Output root of the deployable layout.
        precompress: Precompression settings, or None when disabled.
        env_prefix: Prefix for runtime environment variable names.
        development: Build the runtime in development mode.
        dynamic_origin: Derive the request origin from headers at runtime.
        xff_depth: Trusted proxy hop count for X-Forwarded-For.
        assets: Serve static assets from the runtime server.
        websocket_hook: Expression inserted as the ``handleWebsocket`` hook.
    """

    out_dir: Path = DEFAULT_OUT_DIR
    precompress: CompressionOptions | None = None
    env_prefix: str = ""
    development: bool = False
    dynamic_origin: bool = False
    xff_depth: int = DEFAULT_XFF_DEPTH
    assets: bool = True
    websocket_hook: str = DEFAULT_WEBSOCKET_HOOK


@dataclass(frozen=True)
class AdaptResult:
    """Summary of a completed adapter run.

    Attributes:
        out_dir: Output root that was produced.
        patch_outcome: Whether the entry module was patched.
        server_dir: Bundle output directory.
        composed_files: Files written from the layout template.
        compression_reports: One report per precompressed directory.
    """

    out_dir: Path
    patch_outcome: PatchOutcome
    server_dir: Path
    composed_files: tuple[Path, ...]
    compression_reports: tuple[CompressionReport, ...] = field(default_factory=tuple)

    @property
    def compression_failures(self) -> tuple[CompressionJobResult, ...]:
        """Return failed jobs across every precompressed directory."""
        return tuple(
            failure for report in self.compression_reports for failure in report.failures
        )
