"""
Inject the sourceMapId snippet into a JavaScript file.

The snippet is a single line. It is appended to the end of the file, or placed
just before the ``//# sourceMappingURL=`` comment when the file has one. An
existing snippet is replaced in place, so a file never carries more than one.
"""
from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from .constants import (
    SNIPPET_PREFIX,
    SNIPPET_TEMPLATE,
    SOURCE_MAP_ID_PLACEHOLDER,
    SOURCE_MAPPING_URL_COMMENT_PREFIX,
)
from .errors import FileOperation, raise_user_friendly
from .filesystem import overwrite_file_contents, read_lines

LOGGER = logging.getLogger(__name__)


class InjectResult(Enum):
    INJECTED = "injected"
    UNCHANGED = "unchanged"
    DRY_RUN = "dry_run"


def get_code_snippet(source_map_id: str) -> str:
    return SNIPPET_TEMPLATE.replace(SOURCE_MAP_ID_PLACEHOLDER, source_map_id)


def inject_file(
    js_path: Union[str, Path],
    source_map_id: str,
    directory: Union[str, Path, None] = None,
    dry_run: bool = False,
    logger: Optional[logging.Logger] = None,
) -> InjectResult:
    logger = logger or LOGGER
    js_path = Path(js_path)
    if directory is None:
        directory = js_path.parent

    if dry_run:
        logger.info(f"sourceMapId {source_map_id} would be injected to {js_path}")
        return InjectResult.DRY_RUN

    lines: List[str] = []
    source_mapping_url_index = -1
    existing_snippet_index = -1
    existing_snippet: Optional[str] = None

    try:
        for index, line in enumerate(read_lines(js_path)):
            if source_mapping_url_index < 0 and line.startswith(SOURCE_MAPPING_URL_COMMENT_PREFIX):
                source_mapping_url_index = index
            if existing_snippet_index < 0 and line.startswith(SNIPPET_PREFIX):
                existing_snippet_index = index
                existing_snippet = line
            lines.append(line)
    except OSError as err:
        raise_user_friendly(err, FileOperation.READ_JS_FILE, path=js_path, directory=directory)

    snippet = get_code_snippet(source_map_id)

    if existing_snippet == snippet:
        logger.debug(f"sourceMapId {source_map_id} already injected into {js_path}")
        return InjectResult.UNCHANGED

    if existing_snippet_index >= 0:
        lines[existing_snippet_index] = snippet
    elif source_mapping_url_index >= 0:
        lines.insert(source_mapping_url_index, snippet)
    else:
        lines.append(snippet)

    logger.debug(f"injecting sourceMapId {source_map_id} into {js_path}")
    try:
        overwrite_file_contents(js_path, lines)
    except OSError as err:
        raise_user_friendly(err, FileOperation.OVERWRITE_JS_FILE, path=js_path, directory=directory)
    return InjectResult.INJECTED
