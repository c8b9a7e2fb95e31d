"""Adapter CLI entry points.
This module exposes the build and compress commands.
It maps argparse commands onto pipeline calls.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from adapt.pipeline import adapt
from compress.precompress_engine import compress_tree
from core.adapter_options import load_adapter_options, normalize_extensions
from core.config import AdapterConfig
from core.constants import DEFAULT_COMPRESS_EXTENSIONS
from core.errors import AdapterError
from core.types import AdapterOptions, BuildArtifacts, CompressionOptions, CompressionReport


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="adapter-bun",
        description="Package framework build output for the Bun runtime",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_build_command(subparsers)
    _add_compress_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the adapter CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = AdapterConfig.from_env()
        if args.command == "build":
            return _run_build_command(config, args)
        if args.command == "compress":
            return _run_compress_command(config, args)
    except AdapterError as error:
        print(f"adapter-bun {args.command} failed: {error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _run_build_command(config: AdapterConfig, args: argparse.Namespace) -> int:
    """Handle build command.

    Args:
        config: Runtime config.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    project_root = Path(args.project_root).expanduser().resolve()
    build_dir = Path(args.build_dir).expanduser()
    if not build_dir.is_absolute():
        build_dir = project_root / build_dir
    options = _build_adapter_options(args)
    result = adapt(BuildArtifacts.from_build_dir(build_dir), options, config, project_root)
    print(result.out_dir)
    for failure in result.compression_failures:
        print(f"compression_failed\t{failure.job.output_path}\t{failure.error}")
    return 0


def _run_compress_command(config: AdapterConfig, args: argparse.Namespace) -> int:
    """Handle compress command.

    Args:
        config: Runtime config.
        args: Parsed CLI args.

    Returns:
        Exit code, 1 when any job failed.
    """
    extensions = normalize_extensions(args.ext) if args.ext else DEFAULT_COMPRESS_EXTENSIONS
    options = CompressionOptions(gzip=args.gzip, brotli=args.brotli, extensions=extensions)
    if not options.enabled:
        options = replace(options, gzip=True, brotli=True)
    report = compress_tree(Path(args.directory).expanduser(), options, config.max_concurrency)
    _print_report(report)
    return 0 if report.ok else 1


def _build_adapter_options(args: argparse.Namespace) -> AdapterOptions:
    """Merge options file values with CLI overrides."""
    options = load_adapter_options(args.options) if args.options else AdapterOptions()
    if args.out:
        options = replace(options, out_dir=Path(args.out))
    if args.env_prefix is not None:
        options = replace(options, env_prefix=args.env_prefix)
    if args.precompress or args.gzip or args.brotli:
        base = options.precompress or CompressionOptions()
        options = replace(
            options,
            precompress=replace(
                base,
                gzip=base.gzip or args.precompress or args.gzip,
                brotli=base.brotli or args.precompress or args.brotli,
            ),
        )
    return options


def _print_report(report: CompressionReport) -> None:
    if report.skipped:
        print(f"skipped\t{report.directory}")
        return
    print(
        f"jobs={report.job_count} "
        f"completed={len(report.completed)} "
        f"failed={len(report.failures)}"
    )
    for failure in report.failures:
        print(f"failed\t{failure.job.source_path}\t{failure.job.codec.value}\t{failure.error}")


def _add_build_command(subparsers: Any) -> None:
    """Register build subcommand."""
    parser = subparsers.add_parser("build", help="Bundle and lay out finished build output")
    parser.add_argument(
        "--build-dir",
        required=True,
        help="Framework build output with client/, server/, prerendered/, manifest.json",
    )
    parser.add_argument(
        "--project-root",
        default=".",
        help="Project root containing package.json",
    )
    parser.add_argument("--options", help="Optional YAML adapter options file")
    parser.add_argument("--out", help="Output directory, overrides the options file")
    parser.add_argument("--env-prefix", help="Runtime environment variable prefix")
    parser.add_argument(
        "--precompress",
        action="store_true",
        help="Emit gzip and brotli siblings for eligible assets",
    )
    parser.add_argument("--gzip", action="store_true", help="Emit gzip siblings")
    parser.add_argument("--brotli", action="store_true", help="Emit brotli siblings")


def _add_compress_command(subparsers: Any) -> None:
    """Register compress subcommand."""
    parser = subparsers.add_parser("compress", help="Precompress an asset directory")
    parser.add_argument("directory", help="Asset directory to compress")
    parser.add_argument("--gzip", action="store_true", help="Emit gzip siblings")
    parser.add_argument("--brotli", action="store_true", help="Emit brotli siblings")
    parser.add_argument(
        "--ext",
        action="append",
        help="Eligible extension, repeatable (default: html js json css svg xml wasm)",
    )
