"""Target project dependency descriptor reader.

This module reads ``package.json`` once to derive the external package set.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

from core.errors import AdapterConfigError


def read_dependency_manifest(package_json_path: Path) -> Mapping[str, str]:
    """Read declared runtime dependencies from a package descriptor.

    Args:
        package_json_path: Path to the target project's ``package.json``.

    Returns:
        Mapping of dependency name to version constraint.

    Raises:
        AdapterConfigError: If the descriptor is missing or malformed.
    """
    try:
        payload = json.loads(package_json_path.read_text(encoding="utf-8"))
    except FileNotFoundError as error:
        raise AdapterConfigError(
            f"Package descriptor not found at {package_json_path}. "
            "Run the adapter from the project root or pass --project-root."
        ) from error
    except OSError as error:
        raise AdapterConfigError(
            f"Failed to read package descriptor at {package_json_path}: {error}."
        ) from error
    except json.JSONDecodeError as error:
        raise AdapterConfigError(
            f"Failed to parse package descriptor at {package_json_path}: "
            f"{error.msg}. Fix the JSON syntax and retry."
        ) from error
    if not isinstance(payload, dict):
        raise AdapterConfigError(
            f"Invalid package descriptor at {package_json_path}: expected a JSON object."
        )
    dependencies = payload.get("dependencies") or {}
    if not isinstance(dependencies, dict):
        raise AdapterConfigError(
            f"Invalid package descriptor at {package_json_path}: "
            "'dependencies' must be an object of name to version."
        )
    return {str(name): str(version) for name, version in dependencies.items()}


def external_package_names(dependencies: Mapping[str, str]) -> tuple[str, ...]:
    """Return the sorted unique package names to leave unbundled."""
    return tuple(sorted(dependencies))
