"""
User-facing error translation.

Filesystem failures are classified into a small closed set of ``ErrorKind``
values and paired with the ``FileOperation`` that was running. Only pairs that
have a message in ``_MESSAGES`` become a ``UserFriendlyError``; everything else
is re-raised untouched.
"""
from __future__ import annotations

import errno
from enum import Enum
from pathlib import Path
from typing import Dict, NoReturn, Optional, Tuple, Union


class ErrorKind(Enum):
    MISSING = "missing"
    PERMISSION_DENIED = "permission_denied"
    NOT_A_DIRECTORY = "not_a_directory"
    TOO_MANY_OPEN_FILES = "too_many_open_files"


class FileOperation(Enum):
    READ_SOURCE_MAP = "read_source_map"
    READ_JS_FILE = "read_js_file"
    OVERWRITE_JS_FILE = "overwrite_js_file"
    READ_INJECT_DIRECTORY = "read_inject_directory"
    READ_UPLOAD_DIRECTORY = "read_upload_directory"
    READ_DSYMS_PATH = "read_dsyms_path"


class UserFriendlyError(Exception):
    """An error whose message can be shown to the user as-is."""

    def __init__(self, original_error: Optional[BaseException], message: str) -> None:
        super().__init__(message)
        self.original_error = original_error
        self.message = message


_ERRNO_KINDS: Dict[int, ErrorKind] = {
    errno.ENOENT: ErrorKind.MISSING,
    errno.EACCES: ErrorKind.PERMISSION_DENIED,
    errno.EPERM: ErrorKind.PERMISSION_DENIED,
    errno.ENOTDIR: ErrorKind.NOT_A_DIRECTORY,
    errno.EMFILE: ErrorKind.TOO_MANY_OPEN_FILES,
}

# Templates are formatted with ``path`` and ``directory``.
_MESSAGES: Dict[Tuple[FileOperation, ErrorKind], str] = {
    (FileOperation.READ_SOURCE_MAP, ErrorKind.MISSING): (
        'Failed to open the source map file "{path}" because the file does not exist.\n'
        'Make sure that your source map files are being emitted to "{directory}".  '
        "Regenerate your source map files, then rerun the command."
    ),
    (FileOperation.READ_SOURCE_MAP, ErrorKind.PERMISSION_DENIED): (
        'Failed to open the source map file "{path}" because of missing file permissions.\n'
        'Make sure that the CLI tool will have both "read" and "write" access to all files '
        'inside "{directory}", then rerun the command.'
    ),
    (FileOperation.READ_JS_FILE, ErrorKind.MISSING): (
        'Failed to open the JavaScript file "{path}" because the file no longer exists.\n'
        'Make sure that no other processes are removing files in "{directory}" while the '
        "CLI tool is running.  Regenerate your JavaScript files, then rerun the inject command."
    ),
    (FileOperation.READ_JS_FILE, ErrorKind.PERMISSION_DENIED): (
        'Failed to open the JavaScript file "{path}" because of missing file permissions.\n'
        'Make sure that the CLI tool will have both "read" and "write" access to all files '
        'inside "{directory}", then rerun the inject command.'
    ),
    (FileOperation.OVERWRITE_JS_FILE, ErrorKind.MISSING): (
        'Failed to inject "{path}" with its sourceMapId because the file no longer exists.\n'
        'Make sure that no other processes are removing files in "{directory}" while the '
        "CLI tool is running, then rerun the inject command."
    ),
    (FileOperation.OVERWRITE_JS_FILE, ErrorKind.PERMISSION_DENIED): (
        'Failed to inject "{path}" with its sourceMapId because of missing permissions.\n'
        'Make sure that the CLI tool will have "read" and "write" access to the "{directory}" '
        "directory and all files inside it, then rerun the inject command."
    ),
    (FileOperation.READ_INJECT_DIRECTORY, ErrorKind.PERMISSION_DENIED): (
        'Failed to inject JavaScript files in "{directory}" because of missing permissions.\n'
        'Make sure that the CLI tool will have "read" and "write" access to the directory '
        "and all files inside it, then rerun the inject command."
    ),
    (FileOperation.READ_INJECT_DIRECTORY, ErrorKind.MISSING): (
        'Unable to start the inject command because the directory "{directory}" does not exist.\n'
        "Make sure the correct path is being passed to --directory, then rerun the inject command."
    ),
    (FileOperation.READ_INJECT_DIRECTORY, ErrorKind.NOT_A_DIRECTORY): (
        'Unable to start the inject command because the path "{directory}" is not a directory.\n'
        "Make sure a valid directory path is being passed to --directory, then rerun the inject command."
    ),
    (FileOperation.READ_UPLOAD_DIRECTORY, ErrorKind.PERMISSION_DENIED): (
        'Failed to upload the source map files in "{directory}" because of missing permissions.\n'
        'Make sure that the CLI tool will have "read" access to the directory and all files '
        "inside it, then rerun the upload command."
    ),
    (FileOperation.READ_UPLOAD_DIRECTORY, ErrorKind.MISSING): (
        'Unable to start the upload command because the directory "{directory}" does not exist.\n'
        "Make sure the correct path is being passed to --directory, then rerun the upload command."
    ),
    (FileOperation.READ_UPLOAD_DIRECTORY, ErrorKind.NOT_A_DIRECTORY): (
        'Unable to start the upload command because the path "{directory}" is not a directory.\n'
        "Make sure a valid directory path is being passed to --directory, then rerun the upload command."
    ),
    (FileOperation.READ_DSYMS_PATH, ErrorKind.MISSING): (
        'Path not found: "{path}" does not exist.\n'
        "Make sure the correct path is being passed to --path, then rerun the ios upload command."
    ),
    (FileOperation.READ_DSYMS_PATH, ErrorKind.PERMISSION_DENIED): (
        'Failed to read "{path}" because of missing permissions.\n'
        'Make sure that the CLI tool will have "read" access to the dSYM files, then rerun the ios upload command.'
    ),
}


def classify_error(err: BaseException) -> Optional[ErrorKind]:
    if isinstance(err, OSError) and err.errno is not None:
        return _ERRNO_KINDS.get(err.errno)
    return None


def user_friendly_message(
    operation: FileOperation,
    kind: ErrorKind,
    path: Union[str, Path, None] = None,
    directory: Union[str, Path, None] = None,
) -> Optional[str]:
    template = _MESSAGES.get((operation, kind))
    if template is None:
        return None
    return template.format(path=path or "", directory=directory or "")


def raise_user_friendly(
    err: BaseException,
    operation: FileOperation,
    path: Union[str, Path, None] = None,
    directory: Union[str, Path, None] = None,
) -> NoReturn:
    """Raise ``err`` as a ``UserFriendlyError`` when its kind has a message for
    ``operation``; otherwise re-raise ``err`` unchanged."""
    kind = classify_error(err)
    message = user_friendly_message(operation, kind, path, directory) if kind else None
    if message is None:
        raise err
    raise UserFriendlyError(err, message) from err
