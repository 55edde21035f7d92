from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from . import __version__
from .constants import SCHEMA_VERSION


def build_run_summary(
    command: str,
    directory: Optional[Path],
    summary: Dict[str, Any],
    dry_run: bool = False,
    cli_arguments: Optional[Dict[str, Any]] = None,
    typer_version: str = "unknown",
) -> Dict[str, Any]:
    return {
        "run_metadata": {
            "tool_version": __version__,
            "schema_version": SCHEMA_VERSION,
            "timestamp_utc": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "run_id": _generate_uuid(),
            "command": command,
            "directory": str(directory) if directory is not None else None,
            "dry_run": dry_run,
            "cli_arguments": cli_arguments or {},
            "typer_version": typer_version,
        },
        "summary": summary,
    }


def write_json_summary(output_dir: Path, run_summary: Dict[str, Any]) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    command = run_summary["run_metadata"]["command"]
    output_path = output_dir / f"rum_symbols_{command}.json"
    with output_path.open("w", encoding="utf-8") as fp:
        json.dump(run_summary, fp, indent=2, sort_keys=True)
        fp.write("\n")
    return output_path


def _generate_uuid() -> str:
    # Local import to avoid uuid dependency at module import time.
    import uuid

    return str(uuid.uuid4())
