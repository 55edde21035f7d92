from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, List, Optional, Sequence, Set, Union

from .constants import (
    DEFAULT_INCLUDE_PATTERNS,
    IGNORED_DIRECTORY_NAMES,
    TEMP_FILE_EXTENSION,
)

PathLike = Union[str, Path]


def readdir_recursive(
    directory: PathLike,
    include: Optional[Sequence[str]] = None,
    exclude: Optional[Sequence[str]] = None,
) -> List[Path]:
    """Return every regular file under ``directory`` matched by one of the
    ``include`` globs and by none of the ``exclude`` globs.

    Globs are relative to ``directory``: ``*`` stays within one path segment
    and ``**`` spans any number of directories. Returned paths begin with
    ``directory``. Files inside dependency-manager directories (``node_modules``)
    are skipped.
    """
    root = Path(directory)
    # glob() hides ENOENT / ENOTDIR / EACCES on the root; surface them first.
    os.listdir(root)

    include_patterns = list(include) if include else DEFAULT_INCLUDE_PATTERNS
    selected = _glob_files(root, include_patterns)
    excluded = _glob_files(root, exclude or [])
    return sorted(selected - excluded)


def _glob_files(root: Path, patterns: Iterable[str]) -> Set[Path]:
    matches: Set[Path] = set()
    for pattern in patterns:
        for path in root.glob(pattern):
            if IGNORED_DIRECTORY_NAMES.intersection(path.relative_to(root).parts[:-1]):
                continue
            if path.is_file():
                matches.add(path)
    return matches


def open_binary_stream(path: PathLike) -> BinaryIO:
    return open(path, "rb")


def read_lines(path: PathLike) -> Iterator[str]:
    """Yield the lines of a UTF-8 text file without their terminators.

    ``\\n`` and ``\\r\\n`` both end a line; all other characters, including
    trailing whitespace, are preserved.
    """
    with open(path, "r", encoding="utf-8", errors="surrogateescape") as fp:
        for line in fp:
            yield line[:-1] if line.endswith("\n") else line


def get_temp_file_path(path: PathLike) -> Path:
    target = Path(path)
    return target.parent / f".{target.name}{TEMP_FILE_EXTENSION}"


def overwrite_file_contents(path: PathLike, lines: Iterable[str]) -> None:
    """Replace the contents of ``path`` with ``lines``.

    The new contents are written to a sibling temporary file which is then
    renamed over ``path``, so readers only ever see the old or the new file.
    """
    temp_path = get_temp_file_path(path)
    with open(temp_path, "w", encoding="utf-8", errors="surrogateescape") as fp:
        for line in lines:
            fp.write(line)
            fp.write("\n")
    os.replace(temp_path, path)


def cleanup_temporary_files(directory: PathLike) -> List[Path]:
    removed: List[Path] = []
    for path in readdir_recursive(directory):
        if path.name.endswith(TEMP_FILE_EXTENSION):
            path.unlink()
            removed.append(path)
    return removed
