"""Layout composer and asset copy stage.

This module performs the filesystem side of layout composition.
Every write failure raises ``AdapterLayoutError``; nothing is skipped.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Sequence

from core.constants import CLIENT_DIR_NAME, PRERENDERED_DIR_NAME, STATIC_DIR_NAME
from core.errors import AdapterLayoutError
from core.logging_config import get_logger
from core.types import BuildArtifacts, TemplateToken
from layout.template_tokens import substitute_tokens

_LOGGER = get_logger(__name__)

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent / "files"


def reset_directory(path: Path) -> None:
    """Remove a directory tree if present.

    Raises:
        AdapterLayoutError: If the tree cannot be removed.
    """
    if not path.exists():
        return
    try:
        shutil.rmtree(path)
    except OSError as error:
        raise AdapterLayoutError(
            f"Failed to clear directory {path}: {error}. Remove it manually and retry."
        ) from error


def copy_build_assets(artifacts: BuildArtifacts, out_dir: Path, work_dir: Path) -> None:
    """Copy client, server, prerendered, and static build trees.

    Args:
        artifacts: Upstream build output locations.
        out_dir: Output root for deployable assets.
        work_dir: Scratch directory receiving the server sources.

    Raises:
        AdapterLayoutError: If a required tree is missing or copy fails.
    """
    _copy_tree(artifacts.client_dir, out_dir / CLIENT_DIR_NAME)
    _copy_tree(artifacts.server_dir, work_dir)
    if artifacts.prerendered_dir.is_dir():
        _copy_tree(artifacts.prerendered_dir, out_dir / PRERENDERED_DIR_NAME)
    if artifacts.static_dir is not None:
        _copy_tree(artifacts.static_dir, out_dir / STATIC_DIR_NAME)
    _LOGGER.info("assets_copied", out_dir=str(out_dir), work_dir=str(work_dir))


def compose_layout(
    template_dir: Path,
    out_dir: Path,
    tokens: Sequence[TemplateToken],
    replace_in_names: bool = False,
) -> tuple[Path, ...]:
    """Copy a template tree into the output root with token substitution.

    Args:
        template_dir: Template directory to copy recursively.
        out_dir: Destination root.
        tokens: Complete token set for this run.
        replace_in_names: Also substitute tokens in relative file paths.

    Returns:
        Sorted destination file paths.

    Raises:
        AdapterLayoutError: If the template is missing or a write fails.
    """
    if not template_dir.is_dir():
        raise AdapterLayoutError(
            f"Layout template directory not found at {template_dir}. "
            "Reinstall the adapter or pass a valid template directory."
        )
    written: list[Path] = []
    for source_path in sorted(template_dir.rglob("*")):
        if not source_path.is_file():
            continue
        relative_name = source_path.relative_to(template_dir).as_posix()
        if replace_in_names:
            relative_name = substitute_tokens(relative_name, tokens)
        destination = out_dir / relative_name
        _write_composed_file(source_path, destination, tokens)
        written.append(destination)
    _LOGGER.info("layout_composed", out_dir=str(out_dir), file_count=len(written))
    return tuple(sorted(written))


def _write_composed_file(
    source_path: Path,
    destination: Path,
    tokens: Sequence[TemplateToken],
) -> None:
    try:
        payload = source_path.read_bytes()
    except OSError as error:
        raise AdapterLayoutError(f"Failed to read template file {source_path}: {error}.") from error
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError:
        output = payload
    else:
        output = substitute_tokens(text, tokens).encode("utf-8")
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(output)
    except OSError as error:
        raise AdapterLayoutError(
            f"Failed to write layout file {destination}: {error}. "
            "Check output directory permissions and free space."
        ) from error


def _copy_tree(source_dir: Path, destination: Path) -> None:
    if not source_dir.is_dir():
        raise AdapterLayoutError(
            f"Build output directory not found at {source_dir}. "
            "Run the framework build before the adapter."
        )
    try:
        shutil.copytree(source_dir, destination, dirs_exist_ok=True)
    except (OSError, shutil.Error) as error:
        raise AdapterLayoutError(
            f"Failed to copy {source_dir} to {destination}: {error}."
        ) from error
