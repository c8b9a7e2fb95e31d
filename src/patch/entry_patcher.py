"""Server entry hook-table patch.

This module inserts a ``handleWebsocket`` hook into the generated server
entry module. The upstream shape is matched by one pattern, so a format
change upstream only requires touching ``_HOOK_TABLE_PATTERN``.
"""

from __future__ import annotations

import re
from pathlib import Path

from core.constants import DEFAULT_WEBSOCKET_HOOK
from core.errors import AdapterPatchError
from core.logging_config import get_logger
from core.types import PatchOutcome

_LOGGER = get_logger(__name__)

_HOOK_TABLE_PATTERN = re.compile(r"(this\.options\.hooks\s+=\s+{)\s+(handle:)", re.MULTILINE)


def patch_entry_source(
    source: str,
    hook_expression: str = DEFAULT_WEBSOCKET_HOOK,
) -> tuple[str, PatchOutcome]:
    """Insert the websocket hook before ``handle`` in the hook table.

    Args:
        source: Entry module text.
        hook_expression: JavaScript expression for ``handleWebsocket``.

    Returns:
        Patched text and outcome tag. Unmatched sources are returned as-is.
    """
    replacement = f"\\1 \n\t\thandleWebsocket: {_escape_replacement(hook_expression)},\n\t\t\\2"
    patched, count = _HOOK_TABLE_PATTERN.subn(replacement, source)
    if count == 0:
        return source, PatchOutcome.UNCHANGED
    return patched, PatchOutcome.PATCHED


def patch_entry_file(path: Path, hook_expression: str = DEFAULT_WEBSOCKET_HOOK) -> PatchOutcome:
    """Patch an entry module on disk in place.

    Args:
        path: Entry module path.
        hook_expression: JavaScript expression for ``handleWebsocket``.

    Returns:
        Outcome tag of the patch.

    Raises:
        AdapterPatchError: If the file cannot be read or written.
    """
    try:
        source = path.read_text(encoding="utf-8")
    except OSError as error:
        raise AdapterPatchError(
            f"Failed to read server entry module at {path}: {error}. "
            "Check that the framework build produced the server output."
        ) from error
    patched, outcome = patch_entry_source(source, hook_expression)
    try:
        path.write_text(patched, encoding="utf-8")
    except OSError as error:
        raise AdapterPatchError(
            f"Failed to write patched server entry module at {path}: {error}."
        ) from error
    if outcome is PatchOutcome.PATCHED:
        _LOGGER.info("entry_patched", path=str(path), hook=hook_expression)
    else:
        _LOGGER.warning(
            "entry_patch_skipped",
            path=str(path),
            reason="hook table marker not found",
        )
    return outcome


def _escape_replacement(value: str) -> str:
    return value.replace("\\", "\\\\")
