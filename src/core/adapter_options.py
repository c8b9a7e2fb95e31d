"""Typed adapter options parsing.

This module loads and validates YAML adapter option files used by the CLI.
It provides one strict schema so CLI and SDK callers resolve the same
``AdapterOptions`` from the same document.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Sequence, cast

import yaml

from core.constants import DEFAULT_COMPRESS_EXTENSIONS, DEFAULT_OUT_DIR, DEFAULT_WEBSOCKET_HOOK
from core.errors import AdapterConfigError
from core.types import AdapterOptions, CompressionOptions

_ALLOWED_ROOT_KEYS = {
    "out",
    "precompress",
    "env_prefix",
    "development",
    "dynamic_origin",
    "xff_depth",
    "assets",
    "websocket_hook",
}
_ALLOWED_PRECOMPRESS_KEYS = {"gzip", "brotli", "files"}


def load_adapter_options(options_path: str) -> AdapterOptions:
    """Load and validate adapter options from a YAML file.

    Args:
        options_path: File path to YAML options.

    Returns:
        Fully validated adapter options.

    Raises:
        AdapterConfigError: If file is invalid or schema checks fail.
    """
    payload = _load_yaml_payload(options_path)
    return parse_adapter_options(payload)


def parse_adapter_options(payload: object) -> AdapterOptions:
    """Validate an already-loaded options mapping.

    Args:
        payload: Decoded options document, or None for defaults.

    Returns:
        Adapter options with defaults applied for absent fields.

    Raises:
        AdapterConfigError: If schema checks fail.
    """
    if payload is None:
        return AdapterOptions()
    root_mapping = _expect_mapping(payload, "adapter options")
    _validate_keys(root_mapping, _ALLOWED_ROOT_KEYS, "adapter options")
    return AdapterOptions(
        out_dir=Path(_optional_string(root_mapping, "out") or DEFAULT_OUT_DIR),
        precompress=parse_precompress_selector(root_mapping.get("precompress", False)),
        env_prefix=_optional_string(root_mapping, "env_prefix", strip=False) or "",
        development=_optional_bool(root_mapping, "development", False),
        dynamic_origin=_optional_bool(root_mapping, "dynamic_origin", False),
        xff_depth=_parse_xff_depth(root_mapping),
        assets=_optional_bool(root_mapping, "assets", True),
        websocket_hook=_optional_string(root_mapping, "websocket_hook") or DEFAULT_WEBSOCKET_HOOK,
    )


def parse_precompress_selector(value: object) -> CompressionOptions | None:
    """Resolve the precompress selector into compression options.

    ``False``/``None`` disables precompression, ``True`` enables both
    codecs, and a mapping selects codecs and eligible extensions.

    Raises:
        AdapterConfigError: If the selector has an unsupported shape.
    """
    if value is None or value is False:
        return None
    if value is True:
        return CompressionOptions(gzip=True, brotli=True)
    selector = _expect_mapping(value, "precompress options")
    _validate_keys(selector, _ALLOWED_PRECOMPRESS_KEYS, "precompress options")
    options = CompressionOptions(
        gzip=_optional_bool(selector, "gzip", False),
        brotli=_optional_bool(selector, "brotli", False),
        extensions=_parse_extensions(selector.get("files")),
    )
    return options if options.enabled else None


def normalize_extensions(raw_values: Sequence[object]) -> tuple[str, ...]:
    """Normalize extension names to unique dotless strings.

    Raises:
        AdapterConfigError: If any entry is not a non-empty string.
    """
    normalized: list[str] = []
    for raw_value in raw_values:
        if not isinstance(raw_value, str) or not raw_value.strip(". "):
            raise AdapterConfigError(
                f"Invalid precompress extension {raw_value!r}: expected a non-empty string "
                "such as 'js' or 'html'."
            )
        extension = raw_value.strip().lstrip(".")
        if extension not in normalized:
            normalized.append(extension)
    return tuple(normalized)


def _load_yaml_payload(options_path: str) -> object:
    options_file = Path(options_path).expanduser().resolve()
    if not options_file.exists():
        raise AdapterConfigError(
            f"Adapter options file does not exist at {options_file}. "
            "Provide a valid YAML file path."
        )
    try:
        return cast(object, yaml.safe_load(options_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise AdapterConfigError(
            f"Failed to read adapter options at {options_file}: {error}. "
            "Check file permissions and retry."
        ) from error
    except yaml.YAMLError as error:
        raise AdapterConfigError(
            f"Failed to parse YAML adapter options at {options_file}: {error}. "
            "Fix YAML syntax and retry."
        ) from error


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        normalized_mapping = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise AdapterConfigError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized_mapping[key] = payload
        return normalized_mapping
    raise AdapterConfigError(
        f"Invalid {context}: expected object mapping, got {type(value).__name__}."
    )


def _parse_extensions(raw_value: object) -> tuple[str, ...]:
    if raw_value is None:
        return DEFAULT_COMPRESS_EXTENSIONS
    if isinstance(raw_value, Sequence) and not isinstance(raw_value, (str, bytes, bytearray)):
        extensions = normalize_extensions(raw_value)
        if extensions:
            return extensions
    raise AdapterConfigError(
        "Precompress field 'files' must be a non-empty list of extensions, e.g. [js, css]."
    )


def _parse_xff_depth(mapping: Mapping[str, object]) -> int:
    raw_value = mapping.get("xff_depth", 1)
    if isinstance(raw_value, bool) or not isinstance(raw_value, int):
        raise AdapterConfigError("Adapter option 'xff_depth' must be an integer.")
    if raw_value < 1:
        raise AdapterConfigError(
            f"Adapter option 'xff_depth' must be at least 1, got {raw_value}."
        )
    return raw_value


def _optional_string(
    mapping: Mapping[str, object],
    field_name: str,
    strip: bool = True,
) -> str | None:
    raw_value = mapping.get(field_name)
    if raw_value is None:
        return None
    if isinstance(raw_value, str):
        if not strip:
            return raw_value
        normalized_value = raw_value.strip()
        return normalized_value if normalized_value else None
    raise AdapterConfigError(f"Adapter option '{field_name}' must be a string when provided.")


def _optional_bool(mapping: Mapping[str, object], field_name: str, default: bool) -> bool:
    raw_value = mapping.get(field_name)
    if raw_value is None:
        return default
    if isinstance(raw_value, bool):
        return raw_value
    raise AdapterConfigError(f"Adapter option '{field_name}' must be true or false.")


def _validate_keys(mapping: Mapping[str, object], allowed_keys: set[str], context: str) -> None:
    unknown_keys = sorted(set(mapping) - allowed_keys)
    if unknown_keys:
        raise AdapterConfigError(f"Unknown {context} fields: {', '.join(unknown_keys)}.")
