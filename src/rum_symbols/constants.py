"""
rum-symbols constants.

Wire-level strings shared with build plugins and the backend. The injection
marker prefix and the sourceMappingURL prefix must stay byte-for-byte stable,
otherwise files injected by an older run are no longer recognized.
"""
from __future__ import annotations

import re

# =============================================================================
# JAVASCRIPT FILE CLASSIFICATION
# =============================================================================
JS_FILE_PATTERN = re.compile(r"\.(js|cjs|mjs)$")
JS_MAP_FILE_PATTERN = re.compile(r"\.(js|cjs|mjs)\.map$")

# Map discovery ignores user filters and always uses these.
DEFAULT_JS_MAP_GLOB_PATTERNS = ["**/*.js.map", "**/*.cjs.map", "**/*.mjs.map"]
DEFAULT_INCLUDE_PATTERNS = ["**/*"]

# Dependency-manager directories skipped during enumeration
IGNORED_DIRECTORY_NAMES = {"node_modules"}

# =============================================================================
# INJECTION
# =============================================================================
SOURCE_MAPPING_URL_COMMENT_PREFIX = "//# sourceMappingURL="
UNSUPPORTED_SOURCE_MAPPING_URL_PREFIXES = ("http://", "https://", "data:")

SOURCE_MAP_ID_PLACEHOLDER = "__SOURCE_MAP_ID_PLACEHOLDER__"
SNIPPET_PREFIX = ";/* splunk-rum sourcemaps inject */"
# Registry object the snippet writes to; the upload-time check looks for it.
SNIPPET_REGISTRY_NAME = "window.sourceMapIds"
SNIPPET_TEMPLATE = (
    SNIPPET_PREFIX
    + "if (typeof window === 'object') { "
    + SNIPPET_REGISTRY_NAME + " = " + SNIPPET_REGISTRY_NAME + " || {}; "
    + "let s = ''; try { throw new Error(); } catch (e) { "
    + r"s = (e.stack.match(/https?:\/\/[^\s]+?(?::\d+)?(?=:[\d]+:[\d]+)/) || [])[0]; } "
    + "if (s) {" + SNIPPET_REGISTRY_NAME + "[s] = '" + SOURCE_MAP_ID_PLACEHOLDER + "';}};"
)

TEMP_FILE_EXTENSION = ".splunk.tmp"

SOURCE_MAP_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$"
)
# Slice widths applied to the hex digest: 8-4-4-4-12
SOURCE_MAP_ID_GROUPS = (8, 4, 4, 4, 12)
HASH_CHUNK_SIZE = 64 * 1024

# =============================================================================
# BACKEND API
# =============================================================================
API_VERSION_STRING = "v2"
BASE_URL_TEMPLATE = "https://api.{realm}.signalfx.com"
TOKEN_HEADER = "X-SF-Token"
SOURCEMAPS_PATH_FOR_UPLOAD = "rum-mfm/source-maps"
SOURCEMAPS_PATH_FOR_METADATA = "rum-mfm/source-maps/metadatas"
ANDROID_PATH_FOR_UPLOAD = "rum-mfm/proguard"
ANDROID_PATH_FOR_METADATA = "rum-mfm/proguard/app/{app_id}/metadatas"
IOS_PATH_FOR_UPLOAD = "rum-mfm/dsym"
IOS_PATH_FOR_METADATA = "rum-mfm/macho/metadatas"
UPLOAD_FILE_FIELD_NAME = "file"

REALM_ENV_VAR = "O11Y_REALM"
TOKEN_ENV_VAR = "O11Y_TOKEN"

DEFAULT_HTTP_TIMEOUT_SECONDS = 60.0

# =============================================================================
# MOBILE SYMBOL FILES
# =============================================================================
# Android ProGuard/R8 mapping files, plain or gzipped
ANDROID_MAPPING_FILE_EXTENSIONS = (".txt", ".gz")

# iOS dSYM uploads take zip archives; zipping dSYM bundles is left to the build
DSYMS_DIRECTORY_NAME = "dSYMs"
DSYM_ZIP_SUFFIXES = (".dSYM.zip", ".dSYMs.zip")
DSYM_BUNDLE_SUFFIX = ".dSYM"
DSYM_CONTENT_TYPE = "application/zip"

# =============================================================================
# REPORTING
# =============================================================================
SCHEMA_VERSION = "1"
