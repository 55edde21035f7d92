"""
Tests for filesystem.py - enumeration, line reading and safe overwrites.
"""

import shutil
import tempfile
from pathlib import Path

import pytest

from rum_symbols.filesystem import (
    cleanup_temporary_files,
    get_temp_file_path,
    overwrite_file_contents,
    read_lines,
    readdir_recursive,
)


@pytest.fixture
def tree():
    tmp = Path(tempfile.mkdtemp())
    for rel in [
        "main.js",
        "main.js.map",
        "nested/vendor.js",
        "nested/deeper/chunk.mjs",
        "node_modules/lib/index.js",
        "nested/node_modules/other.js",
        "README.md",
    ]:
        path = tmp / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("x\n", encoding="utf-8")
    try:
        yield tmp
    finally:
        shutil.rmtree(tmp, ignore_errors=True)


def _rel(paths, root):
    return sorted(p.relative_to(root).as_posix() for p in paths)


class TestReaddirRecursive:
    """Tests for readdir_recursive."""

    def test_returns_paths_beginning_with_directory(self, tree):
        paths = readdir_recursive(tree)
        assert paths
        assert all(str(p).startswith(str(tree)) for p in paths)

    def test_skips_node_modules(self, tree):
        rels = _rel(readdir_recursive(tree), tree)
        assert rels == [
            "README.md",
            "main.js",
            "main.js.map",
            "nested/deeper/chunk.mjs",
            "nested/vendor.js",
        ]

    def test_include_filter(self, tree):
        rels = _rel(readdir_recursive(tree, include=["**/*.js"]), tree)
        assert rels == ["main.js", "nested/vendor.js"]

    def test_exclude_filter(self, tree):
        rels = _rel(readdir_recursive(tree, exclude=["nested/**/*"]), tree)
        assert rels == ["README.md", "main.js", "main.js.map"]

    def test_single_star_stays_in_one_segment(self, tree):
        assert _rel(readdir_recursive(tree, include=["*.js"]), tree) == ["main.js"]
        assert _rel(readdir_recursive(tree, include=["nested/*"]), tree) == ["nested/vendor.js"]

    def test_exclude_single_star_keeps_deeper_files(self, tree):
        rels = _rel(readdir_recursive(tree, exclude=["nested/*"]), tree)
        assert rels == ["README.md", "main.js", "main.js.map", "nested/deeper/chunk.mjs"]

    def test_globstar_matches_root_level_files(self, tree):
        rels = _rel(readdir_recursive(tree, include=["**/*.js.map"]), tree)
        assert rels == ["main.js.map"]

    def test_includes_dotfiles(self, tree):
        (tree / ".main.js.splunk.tmp").write_text("partial", encoding="utf-8")
        rels = _rel(readdir_recursive(tree), tree)
        assert ".main.js.splunk.tmp" in rels

    def test_missing_directory_raises(self, tree):
        with pytest.raises(FileNotFoundError):
            readdir_recursive(tree / "missing")

    def test_file_instead_of_directory_raises(self, tree):
        with pytest.raises(NotADirectoryError):
            readdir_recursive(tree / "README.md")


class TestReadLines:
    """Tests for read_lines."""

    def test_strips_terminators_only(self, tree):
        path = tree / "lines.js"
        path.write_bytes(b"a  \r\n\r\n b\nlast")
        assert list(read_lines(path)) == ["a  ", "", " b", "last"]

    def test_no_trailing_empty_line(self, tree):
        path = tree / "lines.js"
        path.write_bytes(b"a\nb\n")
        assert list(read_lines(path)) == ["a", "b"]


class TestOverwriteFileContents:
    """Tests for overwrite_file_contents and cleanup."""

    def test_replaces_contents(self, tree):
        target = tree / "main.js"
        overwrite_file_contents(target, ["one", "two"])
        assert target.read_text(encoding="utf-8") == "one\ntwo\n"
        assert not get_temp_file_path(target).exists()

    def test_temp_file_name_is_derived_from_basename(self, tree):
        temp = get_temp_file_path(tree / "nested" / "vendor.js")
        assert temp == tree / "nested" / ".vendor.js.splunk.tmp"

    def test_cleanup_removes_only_temp_files(self, tree):
        (tree / ".main.js.splunk.tmp").write_text("partial", encoding="utf-8")
        (tree / "nested" / ".vendor.js.splunk.tmp").write_text("partial", encoding="utf-8")

        removed = cleanup_temporary_files(tree)

        assert _rel(removed, tree) == [".main.js.splunk.tmp", "nested/.vendor.js.splunk.tmp"]
        assert (tree / "main.js").exists()
        assert not (tree / ".main.js.splunk.tmp").exists()
