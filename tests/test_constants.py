"""
Tests for constants.py - wire-level strings and patterns.

The snippet prefix and sourceMappingURL prefix are matched by earlier runs and
by other tooling, so they are pinned exactly here.
"""

from rum_symbols.constants import (
    JS_FILE_PATTERN,
    JS_MAP_FILE_PATTERN,
    SNIPPET_PREFIX,
    SNIPPET_REGISTRY_NAME,
    SNIPPET_TEMPLATE,
    SOURCE_MAP_ID_PATTERN,
    SOURCE_MAP_ID_PLACEHOLDER,
    SOURCE_MAPPING_URL_COMMENT_PREFIX,
)
from rum_symbols.injection import get_code_snippet


class TestSnippetTemplate:
    """Tests for SNIPPET_TEMPLATE."""

    def test_prefixes(self):
        assert SOURCE_MAPPING_URL_COMMENT_PREFIX == "//# sourceMappingURL="
        assert SNIPPET_PREFIX == ";/* splunk-rum sourcemaps inject */"
        assert SNIPPET_TEMPLATE.startswith(SNIPPET_PREFIX)

    def test_single_placeholder(self):
        assert SNIPPET_TEMPLATE.count(SOURCE_MAP_ID_PLACEHOLDER) == 1

    def test_is_single_line(self):
        assert "\n" not in SNIPPET_TEMPLATE

    def test_rendered_snippet(self):
        expected = (
            ";/* splunk-rum sourcemaps inject */if (typeof window === 'object') { "
            "window.sourceMapIds = window.sourceMapIds || {}; let s = ''; "
            "try { throw new Error(); } catch (e) { "
            r"s = (e.stack.match(/https?:\/\/[^\s]+?(?::\d+)?(?=:[\d]+:[\d]+)/) || [])[0]; } "
            "if (s) {window.sourceMapIds[s] = '647366e7-d3db-6cf4-8693-2c321c377d5a';}};"
        )
        assert get_code_snippet("647366e7-d3db-6cf4-8693-2c321c377d5a") == expected

    def test_registry_name_is_in_snippet(self):
        assert SNIPPET_REGISTRY_NAME in get_code_snippet("x")


class TestPatterns:
    """Tests for classification and id patterns."""

    def test_js_file_pattern(self):
        assert JS_FILE_PATTERN.search("dist/app.min.js")
        assert not JS_FILE_PATTERN.search("dist/app.jsx")

    def test_js_map_file_pattern(self):
        assert JS_MAP_FILE_PATTERN.search("dist/app.cjs.map")
        assert not JS_MAP_FILE_PATTERN.search("dist/app.map")

    def test_source_map_id_pattern(self):
        assert SOURCE_MAP_ID_PATTERN.match("90605548-63a6-2b9d-b5f7-26216876654e")
        assert not SOURCE_MAP_ID_PATTERN.match("90605548-63A6-2b9d-b5f7-26216876654e")
        assert not SOURCE_MAP_ID_PATTERN.match("9060554863a62b9db5f726216876654e")
