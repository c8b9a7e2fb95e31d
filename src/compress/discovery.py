"""Eligible file discovery for precompression."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from core.constants import COMPRESSED_SUFFIXES
from core.types import CompressionCodec, CompressionJob


def discover_eligible_files(root: Path, extensions: Iterable[str]) -> list[Path]:
    """Return files under ``root`` whose extension is eligible.

    The walk is recursive and includes dotfiles, even one named exactly
    after an extension such as ``.js``. Existing compressed
    siblings are never eligible. Callers must not rely on the order.

    Args:
        root: Directory to scan.
        extensions: Eligible extensions without leading dots.

    Returns:
        Eligible file paths.
    """
    eligible_suffixes = tuple(f".{extension.lstrip('.')}" for extension in extensions)
    files: list[Path] = []
    for path in root.rglob("*"):
        if path.name.endswith(COMPRESSED_SUFFIXES) or not path.name.endswith(eligible_suffixes):
            continue
        if path.is_file():
            files.append(path)
    return files


def schedule_jobs(
    files: Iterable[Path],
    codecs: Iterable[CompressionCodec],
) -> list[CompressionJob]:
    """Build one job per (file, codec) pair."""
    codec_list = list(codecs)
    return [CompressionJob(source_path=path, codec=codec) for path in files for codec in codec_list]
