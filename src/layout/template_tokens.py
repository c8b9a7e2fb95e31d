"""Template token resolution and substitution."""

from __future__ import annotations

import json
import re
from typing import Iterable

from core.constants import ENTRY_MODULE_FILE_NAME, MANIFEST_MODULE_FILE_NAME, SERVER_DIR_NAME
from core.types import AdapterOptions, TemplateToken


def build_template_tokens(options: AdapterOptions) -> tuple[TemplateToken, ...]:
    """Resolve every template token for a run.

    Args:
        options: Adapter options providing runtime settings.

    Returns:
        Complete token set, fixed before any file is composed.
    """
    build_options = {
        "development": options.development,
        "dynamic_origin": options.dynamic_origin,
        "xff_depth": options.xff_depth,
        "assets": options.assets,
    }
    return (
        TemplateToken("SERVER", f"./{SERVER_DIR_NAME}/{ENTRY_MODULE_FILE_NAME}"),
        TemplateToken("MANIFEST", f"./{SERVER_DIR_NAME}/{MANIFEST_MODULE_FILE_NAME}"),
        TemplateToken("ENV_PREFIX", json.dumps(options.env_prefix)),
        TemplateToken("dotENV_PREFIX", options.env_prefix),
        TemplateToken("BUILD_OPTIONS", json.dumps(build_options, separators=(",", ":"))),
    )


def substitute_tokens(text: str, tokens: Iterable[TemplateToken]) -> str:
    """Replace every token occurrence in one pass.

    Longer names are tried first so a token never matches inside a
    longer one, and replaced values are not scanned again.
    """
    values = {token.name: token.value for token in tokens}
    if not values:
        return text
    names = sorted(values, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(name) for name in names))
    return pattern.sub(lambda match: values[match.group(0)], text)
