"""Static asset precompression.

This module produces ``.gz`` and ``.br`` siblings for eligible files
under an asset directory, compressing many files concurrently.
"""
