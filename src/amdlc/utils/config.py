"""
Configuration constants to replace magic strings throughout amdlc
"""

import os
import tempfile

# Module resolution constants
MODULE_FILE_EXTENSION = ".js"
NAMESPACE_SEPARATORS = (".", "/")
DEFINE_FUNCTION_NAME = "define"

# Source token substitution (applied before parsing)
VERSION_TOKEN = "@@version@@"
MAJOR_VERSION_TOKEN = "@@majorVersion@@"
MINOR_VERSION_TOKEN = "@@minorVersion@@"
RELEASE_DATE_TOKEN = "@@releaseDate@@"

# Loader template substitution points
CODE_MARKER_NAME = "$code"
CODE_MARKER_PATTERN = r"\s*\$code\(\);"
FILE_NAME_TOKEN = "$fileName"
INLINE_LOADER_TEMPLATE = "inline_loader.js"
DEV_LOADER_TEMPLATE = "dev_loader.js"

# Generated runtime calls
EXPOSE_FUNCTION_NAME = "expose"
LOAD_FUNCTION_NAME = "load"
INLINE_FUNCTION_NAME = "inline"
FLUSH_FUNCTION_NAME = "writeScripts"
INCLUDED_FROM_PREFIX = "// Included from: "

# Build cache marker persisted at the end of the development bundle
HASH_MARKER_FORMAT = "// $hash: {digest}"
HASH_MARKER_PATTERN = r"//\s*\$hash:\s*([0-9a-fA-F]+)\s*$"
HASH_MARKER_SCAN_BYTES = 512

# Doc comment parser cache (under temp dir to avoid cluttering project root)
DEFAULT_PARSER_CACHE_FILE = os.path.join(tempfile.gettempdir(), "amdlc_doc_comment.cache")

# File encoding constants
DEFAULT_FILE_ENCODING = "utf-8"
