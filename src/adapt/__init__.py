"""Adapter pipeline orchestration.

This module runs copy, patch, bundle, compose, and precompress stages
over finished framework build output.
"""
