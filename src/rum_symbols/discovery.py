"""
Pair a JavaScript file with its source map.

Pairing strategies are tried in order and the first one that returns a path
wins:

1. ``<file>.js.map`` next to ``<file>.js`` (no file I/O, only a set lookup).
2. The ``//# sourceMappingURL=`` comment inside the JavaScript file, when it
   is a relative path that resolves to a source map we already know about.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Set, Tuple, Union

from .constants import (
    SOURCE_MAPPING_URL_COMMENT_PREFIX,
    UNSUPPORTED_SOURCE_MAPPING_URL_PREFIXES,
)
from .errors import FileOperation, raise_user_friendly
from .filesystem import read_lines

LOGGER = logging.getLogger(__name__)


@dataclass
class PairingRequest:
    js_path: Path
    known_map_paths: Set[Path]
    directory: Optional[Path]
    logger: logging.Logger


PairingStrategy = Callable[[PairingRequest], Optional[Path]]


def normalize_path(path: Union[str, Path]) -> Path:
    return Path(os.path.normpath(str(path)))


def discover_map_path(
    js_path: Union[str, Path],
    known_map_paths: Iterable[Union[str, Path]],
    directory: Union[str, Path, None] = None,
    logger: Optional[logging.Logger] = None,
) -> Optional[Path]:
    """Return the source map paired with ``js_path``, or ``None``.

    ``known_map_paths`` is every source map found in the scanned directory;
    only paths in this set are ever returned.
    """
    request = PairingRequest(
        js_path=normalize_path(js_path),
        known_map_paths={normalize_path(path) for path in known_map_paths},
        directory=Path(directory) if directory is not None else None,
        logger=logger or LOGGER,
    )
    for strategy in PAIRING_STRATEGIES:
        result = strategy(request)
        if result is not None:
            return result

    request.logger.debug(f"no source map found for {request.js_path}")
    return None


def _match_by_naming_convention(request: PairingRequest) -> Optional[Path]:
    candidate = request.js_path.with_name(request.js_path.name + ".map")
    if candidate not in request.known_map_paths:
        return None

    request.logger.debug("found source map pair (using standard naming convention):")
    request.logger.debug(f"  - {request.js_path}")
    request.logger.debug(f"  - {candidate}")
    return candidate


def _match_by_source_mapping_url(request: PairingRequest) -> Optional[Path]:
    url = find_source_mapping_url(request.js_path, request.directory)
    if url is None:
        return None
    return _resolve_source_mapping_url(url, request)


def find_source_mapping_url(
    js_path: Path, directory: Optional[Path] = None
) -> Optional[str]:
    """Return the value of the first ``//# sourceMappingURL=`` line, if any."""
    try:
        for line in read_lines(js_path):
            if line.startswith(SOURCE_MAPPING_URL_COMMENT_PREFIX):
                return line[len(SOURCE_MAPPING_URL_COMMENT_PREFIX):].strip()
    except OSError as err:
        raise_user_friendly(
            err,
            FileOperation.READ_JS_FILE,
            path=js_path,
            directory=directory if directory is not None else js_path.parent,
        )
    return None


def _resolve_source_mapping_url(url: str, request: PairingRequest) -> Optional[Path]:
    logger = request.logger
    if os.path.isabs(url) or url.startswith(UNSUPPORTED_SOURCE_MAPPING_URL_PREFIXES):
        logger.debug("skipping source map pair (unsupported sourceMappingURL comment):")
        logger.debug(f"  - {request.js_path}")
        logger.debug(f"  - {url}")
        return None

    candidate = normalize_path(request.js_path.parent / url)
    if candidate not in request.known_map_paths:
        logger.debug("skipping source map pair (file not in provided directory):")
        logger.debug(f"  - {request.js_path}")
        logger.debug(f"  - {url}")
        logger.warning(
            f"skipping {request.js_path}, which is requesting a source map file "
            "outside of the provided --directory"
        )
        return None

    logger.debug("found source map pair (using sourceMappingURL comment):")
    logger.debug(f"  - {request.js_path}")
    logger.debug(f"  - {candidate}")
    return candidate


PAIRING_STRATEGIES: Tuple[PairingStrategy, ...] = (
    _match_by_naming_convention,
    _match_by_source_mapping_url,
)
