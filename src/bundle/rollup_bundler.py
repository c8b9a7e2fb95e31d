"""Rollup bundler adapter.

This module builds a typed bundle descriptor, renders it as a rollup
config module, and runs the rollup CLI. Any engine failure is fatal.
"""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Callable, Mapping, Sequence

from bundle.dependency_manifest import external_package_names
from core.config import AdapterConfig
from core.constants import (
    BUNDLE_ENTRY_INPUT_NAME,
    BUNDLE_MANIFEST_INPUT_NAME,
    ROLLUP_CONFIG_FILE_NAME,
)
from core.errors import AdapterBundleError, AdapterDependencyError
from core.logging_config import get_logger
from core.types import BundleDescriptor

_LOGGER = get_logger(__name__)
_STDERR_TAIL_LINES = 20

CommandRunner = Callable[..., "subprocess.CompletedProcess[str]"]


def build_bundle_descriptor(
    entry_path: Path,
    manifest_path: Path,
    dependencies: Mapping[str, str],
    output_dir: Path,
) -> BundleDescriptor:
    """Build the descriptor for bundling the server entry.

    Args:
        entry_path: Patched server entry module.
        manifest_path: Generated manifest module.
        dependencies: Target project runtime dependencies.
        output_dir: Bundle output directory.

    Returns:
        Bundle descriptor with both named inputs.
    """
    return BundleDescriptor(
        inputs={
            BUNDLE_ENTRY_INPUT_NAME: entry_path,
            BUNDLE_MANIFEST_INPUT_NAME: manifest_path,
        },
        external=external_package_names(dependencies),
        output_dir=output_dir,
    )


def render_rollup_config(descriptor: BundleDescriptor) -> str:
    """Render a rollup config module for a descriptor."""
    inputs = {name: str(path) for name, path in descriptor.inputs.items()}
    output = {
        "dir": str(descriptor.output_dir),
        "format": descriptor.output_format,
        "sourcemap": descriptor.sourcemap,
        "chunkFileNames": descriptor.chunk_file_names,
    }
    resolve_options = {"preferBuiltins": descriptor.prefer_builtins}
    return (
        "import { nodeResolve } from '@rollup/plugin-node-resolve';\n"
        "import commonjs from '@rollup/plugin-commonjs';\n"
        "import json from '@rollup/plugin-json';\n"
        "\n"
        "export default {\n"
        f"\tinput: {json.dumps(inputs)},\n"
        f"\texternal: {json.dumps(list(descriptor.external))},\n"
        f"\tplugins: [nodeResolve({json.dumps(resolve_options)}), commonjs(), json()],\n"
        f"\toutput: {json.dumps(output)}\n"
        "};\n"
    )


class RollupBundler:
    """Runs the rollup CLI for bundle descriptors."""

    def __init__(self, config: AdapterConfig, runner: CommandRunner | None = None) -> None:
        self._command = config.bundler_command
        self._runner = runner or subprocess.run

    def bundle(self, descriptor: BundleDescriptor, work_dir: Path) -> Path:
        """Write the rollup config and run the bundling engine.

        Args:
            descriptor: Bundle inputs and output settings.
            work_dir: Directory receiving the generated config.

        Returns:
            Bundle output directory.

        Raises:
            AdapterDependencyError: If the bundler executable is missing.
            AdapterBundleError: If the engine reports any failure or cannot be started.
        """
        config_path = work_dir / ROLLUP_CONFIG_FILE_NAME
        try:
            config_path.write_text(render_rollup_config(descriptor), encoding="utf-8")
        except OSError as error:
            raise AdapterBundleError(
                f"Failed to write bundler config {config_path}: {error}."
            ) from error
        argv = [*self._command, "--config", str(config_path)]
        _LOGGER.info(
            "bundle_started",
            inputs=sorted(descriptor.inputs),
            external_count=len(descriptor.external),
            output_dir=str(descriptor.output_dir),
        )
        completed = self._run(argv, work_dir)
        if completed.returncode != 0:
            raise AdapterBundleError(
                f"Bundling failed with exit code {completed.returncode}:\n"
                f"{_tail(completed.stderr or completed.stdout or '')}\n"
                "Fix the reported resolution or syntax error and rebuild."
            )
        _LOGGER.info("bundle_completed", output_dir=str(descriptor.output_dir))
        return descriptor.output_dir

    def _run(self, argv: Sequence[str], cwd: Path) -> "subprocess.CompletedProcess[str]":
        try:
            return self._runner(argv, cwd=str(cwd), capture_output=True, text=True, check=False)
        except FileNotFoundError as error:
            raise AdapterDependencyError(
                f"Bundler executable '{argv[0]}' was not found. Install Node.js with rollup "
                "and its plugins, or set ADAPTER_BUN_BUNDLER_COMMAND."
            ) from error
        except OSError as error:
            raise AdapterBundleError(
                f"Failed to start bundler '{argv[0]}': {error}. "
                "Check that ADAPTER_BUN_BUNDLER_COMMAND points at an executable."
            ) from error


def _tail(text: str) -> str:
    lines = text.strip().splitlines()
    return "\n".join(lines[-_STDERR_TAIL_LINES:])
