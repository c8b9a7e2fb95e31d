"""Unit tests for eligible file discovery."""

from __future__ import annotations

from pathlib import Path

from compress.discovery import discover_eligible_files, schedule_jobs
from core.constants import DEFAULT_COMPRESS_EXTENSIONS
from core.types import CompressionCodec


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("x", encoding="utf-8")
    return path


def test_discover_matches_extensions_recursively_with_dotfiles(tmp_path: Path) -> None:
    """Nested files and dot directories are included when eligible."""
    expected = {
        _touch(tmp_path / "index.html"),
        _touch(tmp_path / "_app" / "immutable" / "chunk.js"),
        _touch(tmp_path / ".well-known" / "manifest.json"),
        _touch(tmp_path / ".hidden.css"),
    }
    _touch(tmp_path / "logo.png")
    _touch(tmp_path / "notes.txt")

    files = discover_eligible_files(tmp_path, DEFAULT_COMPRESS_EXTENSIONS)

    assert set(files) == expected


def test_discover_matches_dotfile_named_after_extension(tmp_path: Path) -> None:
    """A dotfile whose whole name is an eligible extension is still eligible."""
    dotfile = _touch(tmp_path / "assets" / ".js")
    _touch(tmp_path / ".png")

    files = discover_eligible_files(tmp_path, ("js",))

    assert files == [dotfile]


def test_discover_skips_existing_compressed_siblings(tmp_path: Path) -> None:
    """Previous ``.gz``/``.br`` outputs are never recompressed."""
    source = _touch(tmp_path / "app.js")
    _touch(tmp_path / "app.js.gz")
    _touch(tmp_path / "app.js.br")

    files = discover_eligible_files(tmp_path, ("js", "gz", "br"))

    assert files == [source]


def test_discover_ignores_directories_named_like_files(tmp_path: Path) -> None:
    """Only regular files are returned."""
    (tmp_path / "vendor.js").mkdir()

    assert discover_eligible_files(tmp_path, ("js",)) == []


def test_schedule_jobs_creates_one_job_per_file_and_codec(tmp_path: Path) -> None:
    """Each file yields one job per enabled codec."""
    files = [tmp_path / "a.js", tmp_path / "b.css"]

    jobs = schedule_jobs(files, (CompressionCodec.GZIP, CompressionCodec.BROTLI))

    assert len(jobs) == 4
    assert {job.output_path.name for job in jobs} == {"a.js.gz", "a.js.br", "b.css.gz", "b.css.br"}
