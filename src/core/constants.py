"""Core constants used across adapter modules.

This module centralizes layout names, codec parameters, and defaults.
Keeping values here avoids magic literals in pipeline logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_OUT_DIR = Path("build")
DEFAULT_WORK_DIR_NAME = ".adapter-bun"
DEFAULT_BUNDLER_COMMAND = "npx rollup"
DEFAULT_MAX_CONCURRENCY = 32
DEFAULT_XFF_DEPTH = 1
DEFAULT_WEBSOCKET_HOOK = "module.handleWebsocket || null"

CLIENT_DIR_NAME = "client"
SERVER_DIR_NAME = "server"
STATIC_DIR_NAME = "static"
PRERENDERED_DIR_NAME = "prerendered"
BUILD_MANIFEST_FILE_NAME = "manifest.json"
ENTRY_MODULE_FILE_NAME = "index.js"
MANIFEST_MODULE_FILE_NAME = "manifest.js"
PACKAGE_DESCRIPTOR_FILE_NAME = "package.json"
ROLLUP_CONFIG_FILE_NAME = "rollup.config.mjs"

BUNDLE_OUTPUT_FORMAT = "esm"
BUNDLE_CHUNK_FILE_NAMES = "chunks/[name]-[hash].js"
BUNDLE_ENTRY_INPUT_NAME = "index"
BUNDLE_MANIFEST_INPUT_NAME = "manifest"

DEFAULT_COMPRESS_EXTENSIONS = ("html", "js", "json", "css", "svg", "xml", "wasm")
COMPRESSED_SUFFIXES = (".gz", ".br")
COMPRESS_CHUNK_SIZE = 64 * 1024
COMPRESS_TEMP_SUFFIX = ".tmp"
GZIP_LEVEL = 9
GZIP_WBITS = 31
BROTLI_QUALITY = 11
BROTLI_MIN_LGWIN = 10
BROTLI_MAX_LGWIN = 24
