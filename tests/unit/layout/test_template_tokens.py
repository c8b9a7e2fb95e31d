"""Unit tests for template token resolution."""

from __future__ import annotations

import json

from core.types import AdapterOptions, TemplateToken
from layout.template_tokens import build_template_tokens, substitute_tokens


def _token_map(options: AdapterOptions) -> dict[str, str]:
    return {token.name: token.value for token in build_template_tokens(options)}


def test_build_template_tokens_wire_bundle_paths() -> None:
    """Server and manifest tokens should point into the bundle dir."""
    tokens = _token_map(AdapterOptions())

    assert tokens["SERVER"] == "./server/index.js"
    assert tokens["MANIFEST"] == "./server/manifest.js"


def test_build_template_tokens_serialize_runtime_options() -> None:
    """Build options are JSON with the four runtime fields."""
    options = AdapterOptions(env_prefix="MYAPP_", dynamic_origin=True, xff_depth=3, assets=False)

    tokens = _token_map(options)

    assert tokens["ENV_PREFIX"] == '"MYAPP_"'
    assert tokens["dotENV_PREFIX"] == "MYAPP_"
    assert json.loads(tokens["BUILD_OPTIONS"]) == {
        "development": False,
        "dynamic_origin": True,
        "xff_depth": 3,
        "assets": False,
    }


def test_substitute_tokens_prefers_longest_name() -> None:
    """``dotENV_PREFIX`` must not be split into ``dot`` + ``ENV_PREFIX``."""
    tokens = build_template_tokens(AdapterOptions(env_prefix="MYAPP_"))

    text = substitute_tokens("dotENV_PREFIXPORT=3000\nconst p = ENV_PREFIX;", tokens)

    assert text == 'MYAPP_PORT=3000\nconst p = "MYAPP_";'


def test_substitute_tokens_does_not_rescan_values() -> None:
    """Replacement values containing token names stay literal."""
    tokens = (TemplateToken("A", "B"), TemplateToken("B", "C"))

    assert substitute_tokens("A B", tokens) == "B C"


def test_substitute_tokens_without_tokens_is_identity() -> None:
    """An empty token set leaves text unchanged."""
    assert substitute_tokens("SERVER", ()) == "SERVER"
