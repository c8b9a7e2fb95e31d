"""Unit tests for the server entry patch."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import AdapterPatchError
from core.types import PatchOutcome
from patch.entry_patcher import patch_entry_file, patch_entry_source
from tests.fixture_paths import copy_fixture, fixture_path


def test_patch_inserts_websocket_hook_before_handle() -> None:
    """The hook should be inserted immediately before ``handle``."""
    source = fixture_path("entry/server_index.js").read_text(encoding="utf-8")

    patched, outcome = patch_entry_source(source)

    assert outcome is PatchOutcome.PATCHED
    assert "handleWebsocket: module.handleWebsocket || null,\n\t\thandle:" in patched
    assert patched.index("handleWebsocket") < patched.index("handle: module.handle")


def test_patch_uses_caller_supplied_expression() -> None:
    """A custom hook expression should be spliced in verbatim."""
    source = "this.options.hooks = {\n  handle: h\n};"

    patched, _ = patch_entry_source(source, r"module.ws ?? (() => '\d')")

    assert "handleWebsocket: module.ws ?? (() => '\\d')," in patched


def test_patch_is_idempotent() -> None:
    """Patching an already-patched source must not add a second key."""
    source = fixture_path("entry/server_index.js").read_text(encoding="utf-8")

    once, _ = patch_entry_source(source)
    twice, outcome = patch_entry_source(once)

    assert twice == once
    assert outcome is PatchOutcome.UNCHANGED
    assert twice.count("handleWebsocket:") == 1


def test_patch_leaves_unmarked_source_unchanged() -> None:
    """Sources without the hook table marker pass through untouched."""
    source = fixture_path("entry/server_index_unmarked.js").read_text(encoding="utf-8")

    patched, outcome = patch_entry_source(source)

    assert patched == source
    assert outcome is PatchOutcome.UNCHANGED


def test_patch_entry_file_rewrites_in_place(tmp_path: Path) -> None:
    """File patching should overwrite the entry module on disk."""
    entry_path = copy_fixture("entry/server_index.js", tmp_path / "index.js")

    outcome = patch_entry_file(entry_path)

    assert outcome is PatchOutcome.PATCHED
    assert "handleWebsocket" in entry_path.read_text(encoding="utf-8")


def test_patch_entry_file_tolerates_unmatched_shape(tmp_path: Path) -> None:
    """An unmatched marker is not an error and keeps file contents."""
    entry_path = copy_fixture("entry/server_index_unmarked.js", tmp_path / "index.js")
    original = entry_path.read_text(encoding="utf-8")

    outcome = patch_entry_file(entry_path)

    assert outcome is PatchOutcome.UNCHANGED
    assert entry_path.read_text(encoding="utf-8") == original


def test_patch_entry_file_raises_for_missing_entry(tmp_path: Path) -> None:
    """Missing entry modules are an I/O failure."""
    with pytest.raises(AdapterPatchError):
        patch_entry_file(tmp_path / "index.js")
