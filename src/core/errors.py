"""Adapter exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each pipeline stage raises a specific error type for debuggability.
"""

from __future__ import annotations


class AdapterError(Exception):
    """Base exception for all adapter failures."""


class AdapterConfigError(AdapterError):
    """Raised for invalid runtime configuration or adapter options."""


class AdapterPatchError(AdapterError):
    """Raised when the server entry module cannot be read or written."""


class AdapterBundleError(AdapterError):
    """Raised when the bundling engine fails to resolve or parse sources."""


class AdapterLayoutError(AdapterError):
    """Raised when the output layout cannot be copied or composed."""


class AdapterCompressionError(AdapterError):
    """Raised for precompression setup failures outside individual jobs."""


class AdapterDependencyError(AdapterError):
    """Raised when an external runtime tool is missing."""
