"""
Tests for reporting.py - JSON run summaries.
"""

import json
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict

import jsonschema
import pytest

from rum_symbols.reporting import build_run_summary, write_json_summary
from rum_symbols.sourcemaps import InjectOptions, UploadSummary, run_injection

SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schema_v1.json"


def load_schema() -> Dict[str, Any]:
    return json.loads(SCHEMA_PATH.read_text())


@pytest.fixture
def tmp_dir():
    tmp = Path(tempfile.mkdtemp())
    try:
        yield tmp
    finally:
        shutil.rmtree(tmp, ignore_errors=True)


class TestBuildRunSummary:
    """Tests for build_run_summary."""

    def test_inject_summary_validates(self, tmp_dir):
        (tmp_dir / "a.js").write_text("a\n", encoding="utf-8")
        (tmp_dir / "a.js.map").write_text("{}", encoding="utf-8")
        summary = run_injection(InjectOptions(directory=tmp_dir), logging.getLogger("tests.reporting"))

        document = build_run_summary("inject", tmp_dir, summary.to_dict())

        jsonschema.validate(instance=document, schema=load_schema())
        assert document["summary"]["injected_count"] == 1

    def test_upload_summary_validates(self, tmp_dir):
        summary = UploadSummary(map_files_found=2, uploaded=[tmp_dir / "a.js.map"])
        document = build_run_summary("upload", tmp_dir, summary.to_dict(), dry_run=True)

        jsonschema.validate(instance=document, schema=load_schema())
        assert document["run_metadata"]["dry_run"] is True

    def test_unknown_command_is_rejected_by_schema(self, tmp_dir):
        document = build_run_summary("deploy", tmp_dir, UploadSummary().to_dict())
        with pytest.raises(jsonschema.ValidationError):
            jsonschema.validate(instance=document, schema=load_schema())

    def test_run_ids_are_unique(self, tmp_dir):
        first = build_run_summary("upload", tmp_dir, UploadSummary().to_dict())
        second = build_run_summary("upload", tmp_dir, UploadSummary().to_dict())
        assert first["run_metadata"]["run_id"] != second["run_metadata"]["run_id"]


class TestWriteJsonSummary:
    """Tests for write_json_summary."""

    def test_creates_json_file(self, tmp_dir):
        document = build_run_summary("upload", tmp_dir, UploadSummary().to_dict())
        path = write_json_summary(tmp_dir / "reports", document)

        assert path.exists()
        assert path.name == "rum_symbols_upload.json"

    def test_json_is_sorted_and_indented(self, tmp_dir):
        document = build_run_summary("upload", tmp_dir, UploadSummary().to_dict())
        path = write_json_summary(tmp_dir, document)

        content = path.read_text()
        assert content.endswith("\n")
        assert '\n  "run_metadata"' in content
        assert json.loads(content) == document
