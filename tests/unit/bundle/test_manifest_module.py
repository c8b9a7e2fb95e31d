"""Unit tests for manifest module generation."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from bundle.manifest_module import render_manifest_module, write_manifest_module
from core.errors import AdapterBundleError
from tests.fixture_paths import fixture_path


def test_render_manifest_module_exports_manifest_constant() -> None:
    """The module should export the payload as ``manifest``."""
    module_text = render_manifest_module({"appDir": "_app"})

    assert module_text.startswith("export const manifest = {")
    assert module_text.endswith("};\n")


def test_write_manifest_module_embeds_route_manifest(tmp_path: Path) -> None:
    """The written module should embed the JSON manifest verbatim."""
    manifest_json = fixture_path("build_output/manifest.json")

    target = write_manifest_module(manifest_json, tmp_path / "manifest.js")

    body = target.read_text(encoding="utf-8")
    payload = body.removeprefix("export const manifest = ").removesuffix(";\n")

    assert json.loads(payload)["appDir"] == "_app"


def test_write_manifest_module_raises_for_missing_manifest(tmp_path: Path) -> None:
    """A missing route manifest is fatal for bundling."""
    with pytest.raises(AdapterBundleError):
        write_manifest_module(tmp_path / "manifest.json", tmp_path / "manifest.js")
