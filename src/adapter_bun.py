"""Public SDK surface for the Bun adapter.

This module provides a stable import path for programmatic callers.
It re-exports the pipeline entry points and typed option models.
"""

from __future__ import annotations

from adapt.pipeline import AdaptPipelineRunner, adapt
from compress.precompress_engine import compress_tree, precompress_directory
from core.adapter_options import load_adapter_options, parse_adapter_options
from core.config import AdapterConfig
from core.types import (
    AdapterOptions,
    AdaptResult,
    BuildArtifacts,
    CompressionOptions,
    CompressionReport,
    PatchOutcome,
)
from patch.entry_patcher import patch_entry_file, patch_entry_source

__all__ = [
    "AdaptPipelineRunner",
    "AdaptResult",
    "AdapterConfig",
    "AdapterOptions",
    "BuildArtifacts",
    "CompressionOptions",
    "CompressionReport",
    "PatchOutcome",
    "adapt",
    "compress_tree",
    "load_adapter_options",
    "parse_adapter_options",
    "patch_entry_file",
    "patch_entry_source",
    "precompress_directory",
]
