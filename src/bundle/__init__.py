"""Server bundling.

This module turns the patched entry and manifest modules into a
self-contained ESM bundle through the external rollup engine.
"""
