"""Output layout composition.

This module copies build assets and the runtime template into the
output root, wiring bundle paths and runtime options into the template.
"""
