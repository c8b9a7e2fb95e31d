"""Manifest module generation.

This module wraps the build's JSON route manifest as an ES module
that the server entry imports at startup.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.errors import AdapterBundleError


def render_manifest_module(manifest: object) -> str:
    """Render the manifest payload as ``export const manifest = ...;``."""
    return f"export const manifest = {json.dumps(manifest, indent=2)};\n"


def write_manifest_module(manifest_path: Path, target_path: Path) -> Path:
    """Write the manifest module next to the server entry.

    Args:
        manifest_path: JSON route manifest produced by the build.
        target_path: Destination ``manifest.js`` path.

    Returns:
        The written module path.

    Raises:
        AdapterBundleError: If the manifest cannot be read or written.
    """
    try:
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    except OSError as error:
        raise AdapterBundleError(
            f"Failed to read route manifest at {manifest_path}: {error}. "
            "Check that the framework build completed."
        ) from error
    except json.JSONDecodeError as error:
        raise AdapterBundleError(
            f"Failed to parse route manifest at {manifest_path}: {error.msg}."
        ) from error
    try:
        target_path.write_text(render_manifest_module(manifest), encoding="utf-8")
    except OSError as error:
        raise AdapterBundleError(
            f"Failed to write manifest module at {target_path}: {error}."
        ) from error
    return target_path
