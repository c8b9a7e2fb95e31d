"""Runtime configuration model for the adapter.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import PurePath
import shlex

from core.constants import DEFAULT_BUNDLER_COMMAND, DEFAULT_MAX_CONCURRENCY, DEFAULT_WORK_DIR_NAME
from core.errors import AdapterConfigError


@dataclass(frozen=True)
class AdapterConfig:
    """Validated runtime configuration.

    Attributes:
        bundler_command: Argument prefix used to invoke the rollup CLI.
        max_concurrency: Upper bound of in-flight compression jobs.
        work_dir_name: Scratch directory name under the project root.
    """

    bundler_command: tuple[str, ...]
    max_concurrency: int
    work_dir_name: str

    @classmethod
    def from_env(cls) -> "AdapterConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            AdapterConfigError: If environment values are invalid.
        """
        bundler_value = os.getenv("ADAPTER_BUN_BUNDLER_COMMAND", DEFAULT_BUNDLER_COMMAND)
        concurrency_value = os.getenv("ADAPTER_BUN_MAX_CONCURRENCY", str(DEFAULT_MAX_CONCURRENCY))
        work_dir_name = os.getenv("ADAPTER_BUN_WORK_DIR", DEFAULT_WORK_DIR_NAME)
        return cls(
            bundler_command=_parse_bundler_command(bundler_value),
            max_concurrency=_parse_max_concurrency(concurrency_value),
            work_dir_name=_parse_work_dir_name(work_dir_name),
        )


def _parse_bundler_command(raw_value: str) -> tuple[str, ...]:
    """Split the bundler command into argv tokens.

    Raises:
        AdapterConfigError: If the command is empty or badly quoted.
    """
    try:
        tokens = tuple(shlex.split(raw_value))
    except ValueError as error:
        raise AdapterConfigError(
            f"Invalid ADAPTER_BUN_BUNDLER_COMMAND value '{raw_value}': {error}. "
            "Fix the shell quoting and retry."
        ) from error
    if not tokens:
        raise AdapterConfigError(
            "Invalid ADAPTER_BUN_BUNDLER_COMMAND value: command is empty. "
            f"Unset it to use the default '{DEFAULT_BUNDLER_COMMAND}'."
        )
    return tokens


def _parse_max_concurrency(raw_value: str) -> int:
    """Parse the concurrency cap environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed positive integer.

    Raises:
        AdapterConfigError: If value is not a positive integer.
    """
    try:
        value = int(raw_value)
    except ValueError as error:
        raise AdapterConfigError(
            "Invalid ADAPTER_BUN_MAX_CONCURRENCY value: "
            f"expected integer, got '{raw_value}'. "
            "Set ADAPTER_BUN_MAX_CONCURRENCY to a positive number."
        ) from error
    if value < 1:
        raise AdapterConfigError(
            f"Invalid ADAPTER_BUN_MAX_CONCURRENCY value {value}: must be at least 1."
        )
    return value


def _parse_work_dir_name(raw_value: str) -> str:
    """Validate the scratch directory name.

    The work dir is deleted at the start of every run, so it must be a
    relative path that stays strictly below the project root.

    Raises:
        AdapterConfigError: If the value is empty, absolute, or escapes the root.
    """
    if not raw_value.strip():
        raise AdapterConfigError(
            "Invalid ADAPTER_BUN_WORK_DIR value: directory name is empty. "
            f"Unset it to use the default '{DEFAULT_WORK_DIR_NAME}'."
        )
    if PurePath(raw_value).anchor:
        raise AdapterConfigError(
            f"Invalid ADAPTER_BUN_WORK_DIR value '{raw_value}': must be relative "
            "to the project root."
        )
    if any(part in (".", "..") for part in raw_value.replace("\\", "/").split("/")):
        raise AdapterConfigError(
            f"Invalid ADAPTER_BUN_WORK_DIR value '{raw_value}': "
            "'.' and '..' segments are not allowed."
        )
    return raw_value
