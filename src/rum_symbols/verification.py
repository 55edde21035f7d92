from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .constants import SNIPPET_REGISTRY_NAME

LOGGER = logging.getLogger(__name__)


@dataclass
class VerificationResult:
    verified: bool
    message: str


def was_inject_already_run(
    map_path: Union[str, Path], logger: Optional[logging.Logger] = None
) -> VerificationResult:
    """Check whether the JavaScript file paired with ``map_path`` contains an
    injected sourceMapId.

    Used to warn before an upload; never raises. When the check cannot be
    completed the result is unverified with a generic message.
    """
    logger = logger or LOGGER
    map_path = Path(map_path)
    default_message = (
        f"Could not verify that the sourceMapId for {map_path} was injected "
        "into its related JavaScript file."
    )

    try:
        js_path = _discover_js_path(map_path, logger)
        if js_path is None:
            return VerificationResult(False, default_message)

        contents = js_path.read_text(encoding="utf-8", errors="replace")
    except (OSError, ValueError) as err:
        logger.debug(f"upload warning check failed for {map_path}: {err}")
        return VerificationResult(False, default_message)

    if is_snippet_present(contents):
        return VerificationResult(True, "")
    return VerificationResult(
        False,
        f"No sourceMapId was found in the related JavaScript file {js_path}. "
        'Make sure to run the "sourcemaps inject" command in addition to '
        '"sourcemaps upload".  Use --help to learn more.',
    )


def _discover_js_path(map_path: Path, logger: logging.Logger) -> Optional[Path]:
    # Avoid reading the (potentially large) map file when the sibling exists
    sibling = map_path.with_name(re.sub(r"\.map$", "", map_path.name))
    if sibling != map_path and sibling.is_file():
        logger.debug("upload warning check: found source map pair (using standard naming convention)")
        logger.debug(f"  - {sibling}")
        logger.debug(f"  - {map_path}")
        return sibling

    data = json.loads(map_path.read_text(encoding="utf-8"))
    file_field = data.get("file") if isinstance(data, dict) else None
    if file_field and isinstance(file_field, str):
        logger.debug('upload warning check: found source map pair (using "file" property in the source map)')
        logger.debug(f"  - {file_field}")
        logger.debug(f"  - {map_path}")
        return map_path.parent / file_field

    logger.debug(f"upload warning check: no source map pair found for {map_path}")
    return None


def is_snippet_present(contents: str) -> bool:
    # Loose on purpose: build plugins may inject a slightly different snippet.
    return SNIPPET_REGISTRY_NAME in contents
