"""
sourceMapId computation.

A sourceMapId is formatted like a GUID but is not random: it is the first 32
hex characters of the SHA-256 digest of the source map file, split 8-4-4-4-12.
Identical files always produce the same id.
"""
from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Union

from .constants import HASH_CHUNK_SIZE, SOURCE_MAP_ID_GROUPS
from .errors import FileOperation, raise_user_friendly
from .filesystem import open_binary_stream


def compute_source_map_id(
    source_map_path: Union[str, Path], directory: Union[str, Path, None] = None
) -> str:
    digest = hashlib.sha256()
    try:
        with open_binary_stream(source_map_path) as stream:
            for chunk in iter(lambda: stream.read(HASH_CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError as err:
        raise_user_friendly(
            err,
            FileOperation.READ_SOURCE_MAP,
            path=source_map_path,
            directory=directory if directory is not None else Path(source_map_path).parent,
        )
    return sha_to_source_map_id(digest.hexdigest())


def sha_to_source_map_id(sha: str) -> str:
    groups = []
    start = 0
    for width in SOURCE_MAP_ID_GROUPS:
        groups.append(sha[start:start + width])
        start += width
    return "-".join(groups)
