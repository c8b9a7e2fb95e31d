"""Server entry module patching.

This module adapts generated framework output to the Bun runtime.
It performs narrow textual rewrites without parsing the source.
"""
