"""
rum-symbols - source map workflows

``run_injection`` pairs every JavaScript file in a build output directory with
its source map and injects the sourceMapId snippet. ``run_upload`` sends the
source maps themselves to the backend, keyed by the same sourceMapId.

Both workflows process one file at a time. A failure on one file is logged
and recorded in the summary, and the loop moves on to the next file.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from .constants import DEFAULT_JS_MAP_GLOB_PATTERNS, JS_FILE_PATTERN, JS_MAP_FILE_PATTERN
from .discovery import discover_map_path
from .errors import FileOperation, UserFriendlyError, raise_user_friendly
from .filesystem import cleanup_temporary_files, readdir_recursive
from .http_client import (
    BackendClient,
    BackendError,
    build_list_url,
    build_upload_url,
    open_backend_client,
)
from .injection import InjectResult, inject_file
from .source_map_id import compute_source_map_id
from .spinner import Spinner
from .verification import was_inject_already_run

LOGGER = logging.getLogger(__name__)


@dataclass
class InjectOptions:
    directory: Path
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    dry_run: bool = False


@dataclass
class UploadOptions:
    directory: Path
    realm: str
    token: str
    app_name: Optional[str] = None
    app_version: Optional[str] = None
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    dry_run: bool = False


@dataclass
class FileFailure:
    path: Path
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"path": str(self.path), "message": self.message}


@dataclass
class InjectionSummary:
    js_files_found: int = 0
    map_files_found: int = 0
    injected: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)
    failed: List[FileFailure] = field(default_factory=list)
    temporary_files_removed: int = 0

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "js_files_found": self.js_files_found,
            "map_files_found": self.map_files_found,
            "injected_count": len(self.injected),
            "skipped_count": len(self.skipped),
            "failed_count": len(self.failed),
            "injected": [str(path) for path in self.injected],
            "skipped": [str(path) for path in self.skipped],
            "failed": [failure.to_dict() for failure in self.failed],
            "temporary_files_removed": self.temporary_files_removed,
        }


@dataclass
class UploadSummary:
    map_files_found: int = 0
    uploaded: List[Path] = field(default_factory=list)
    unverified: List[Path] = field(default_factory=list)
    failed: List[FileFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "map_files_found": self.map_files_found,
            "uploaded_count": len(self.uploaded),
            "unverified_count": len(self.unverified),
            "failed_count": len(self.failed),
            "uploaded": [str(path) for path in self.uploaded],
            "unverified": [str(path) for path in self.unverified],
            "failed": [failure.to_dict() for failure in self.failed],
        }


def is_js_file_path(path: Path) -> bool:
    return bool(JS_FILE_PATTERN.search(str(path)))


def is_js_map_file_path(path: Path) -> bool:
    return bool(JS_MAP_FILE_PATTERN.search(str(path)))


# =============================================================================
# INJECT
# =============================================================================


def run_injection(
    options: InjectOptions, logger: Optional[logging.Logger] = None
) -> InjectionSummary:
    """Inject sourceMapIds into every applicable JavaScript file.

    For each JavaScript file under ``options.directory``:
      1. find its source map
      2. compute the sourceMapId by hashing the source map
      3. inject the sourceMapId into the JavaScript file
    """
    logger = logger or LOGGER
    directory = Path(options.directory)

    try:
        file_paths = readdir_recursive(directory, options.include, options.exclude)
        # Map files must all be known, whatever subset of JS files was selected.
        map_candidates = readdir_recursive(directory, DEFAULT_JS_MAP_GLOB_PATTERNS)
    except OSError as err:
        raise_user_friendly(err, FileOperation.READ_INJECT_DIRECTORY, directory=directory)

    js_file_paths = [path for path in file_paths if is_js_file_path(path)]
    js_map_file_paths = [path for path in map_candidates if is_js_map_file_path(path)]

    summary = InjectionSummary(
        js_files_found=len(js_file_paths),
        map_files_found=len(js_map_file_paths),
    )
    logger.info(f"Found {len(js_file_paths)} JavaScript file(s) in {directory}")
    logger.debug(f"Found {len(js_map_file_paths)} source map file(s) in {directory}")

    for js_path in js_file_paths:
        try:
            map_path = discover_map_path(js_path, js_map_file_paths, directory, logger)
            if map_path is None:
                logger.info(f"No source map was detected for {js_path}.  Skipping injection.")
                summary.skipped.append(js_path)
                continue

            source_map_id = compute_source_map_id(map_path, directory)
            result = inject_file(js_path, source_map_id, directory, options.dry_run, logger)
        except (UserFriendlyError, OSError) as err:
            _record_failure(summary.failed, js_path, err, logger)
            continue

        if result is InjectResult.UNCHANGED:
            logger.debug(f"{js_path} was already up to date")
        summary.injected.append(js_path)

    # Leftover temp files can only come from an earlier run that was interrupted mid-write.
    if options.dry_run:
        logger.debug("Skipping temporary file cleanup (dry run)")
    else:
        removed = cleanup_temporary_files(directory)
        for path in removed:
            logger.debug(f"removed leftover temporary file {path}")
        summary.temporary_files_removed = len(removed)

    logger.info(
        f"Finished source map injection for {len(summary.injected)} JavaScript file(s) in {directory}"
    )
    if summary.js_files_found == 0:
        logger.warning(
            f"No JavaScript files were found.  Verify that {directory} is the correct "
            "directory for your JavaScript files."
        )
    elif not summary.injected:
        logger.warning(
            "No JavaScript files were injected.  Verify that your build is configured "
            "to generate source maps for your JavaScript files."
        )
    if summary.failed:
        logger.error(f"{len(summary.failed)} JavaScript file(s) could not be injected")
    return summary


# =============================================================================
# UPLOAD
# =============================================================================


def run_upload(
    options: UploadOptions,
    logger: Optional[logging.Logger] = None,
    spinner: Optional[Spinner] = None,
    client: Optional[BackendClient] = None,
) -> UploadSummary:
    """Upload every source map file under ``options.directory``.

    For each source map file:
      1. compute the sourceMapId by hashing the file
      2. warn when its JavaScript file does not appear to be injected
      3. upload the file to the sourceMapId URL
    """
    logger = logger or LOGGER
    directory = Path(options.directory)

    try:
        file_paths = readdir_recursive(
            directory, options.include or DEFAULT_JS_MAP_GLOB_PATTERNS, options.exclude
        )
    except OSError as err:
        raise_user_friendly(err, FileOperation.READ_UPLOAD_DIRECTORY, directory=directory)
    js_map_file_paths = [path for path in file_paths if is_js_map_file_path(path)]

    summary = UploadSummary(map_files_found=len(js_map_file_paths))
    logger.info(f"Upload URL: {build_upload_url(options.realm, '{id}')}")
    logger.info(f"Found {len(js_map_file_paths)} source map(s) to upload")

    if spinner is not None and not options.dry_run:
        spinner.start("")
    try:
        with open_backend_client(options.token, client) as backend:
            for index, map_path in enumerate(js_map_file_paths):
                files_remaining = len(js_map_file_paths) - index
                _upload_one(options, map_path, files_remaining, summary, backend, logger, spinner)
    finally:
        if spinner is not None:
            spinner.stop()

    if options.dry_run:
        logger.info(f"Dry run complete - {len(js_map_file_paths)} source map(s) would be uploaded")
    else:
        logger.info(f"{len(summary.uploaded)} source map(s) were uploaded successfully")
    if summary.failed:
        logger.error(f"{len(summary.failed)} source map(s) could not be uploaded")
    if summary.map_files_found == 0:
        logger.warning(
            f"No source map files were found.  Verify that {directory} is the correct "
            "directory for your source map files."
        )
    return summary


def _upload_one(
    options: UploadOptions,
    map_path: Path,
    files_remaining: int,
    summary: UploadSummary,
    client: BackendClient,
    logger: logging.Logger,
    spinner: Optional[Spinner],
) -> None:
    try:
        source_map_id = compute_source_map_id(map_path, options.directory)
    except (UserFriendlyError, OSError) as err:
        _record_failure(summary.failed, map_path, err, logger)
        return

    verification = was_inject_already_run(map_path, logger)
    if not verification.verified:
        logger.warning(verification.message)
        summary.unverified.append(map_path)

    url = build_upload_url(options.realm, source_map_id)
    parameters = {
        key: value
        for key, value in (
            ("appName", options.app_name),
            ("appVersion", options.app_version),
            ("sourceMapId", source_map_id),
        )
        if value is not None
    }

    if options.dry_run:
        logger.info(f"{map_path} would be uploaded to {url}")
        return

    logger.debug(f"Uploading {map_path}")
    logger.debug(f"POST {url}")
    if spinner is not None:
        spinner.update_text(f"Uploading {map_path} ({files_remaining} file(s) remaining)")
    try:
        client.upload_file(url, map_path, parameters)
    except (BackendError, httpx.HTTPError, OSError) as err:
        logger.error(f"Upload failed for {map_path}")
        _record_failure(summary.failed, map_path, err, logger, already_logged=True)
        return
    summary.uploaded.append(map_path)


# =============================================================================
# LIST
# =============================================================================


def list_source_maps(
    realm: str, token: str, client: Optional[BackendClient] = None
) -> List[Dict[str, Any]]:
    with open_backend_client(token, client) as backend:
        return backend.fetch_metadata(build_list_url(realm))


# =============================================================================
# HELPERS
# =============================================================================


def _record_failure(
    failures: List[FileFailure],
    path: Path,
    err: BaseException,
    logger: logging.Logger,
    already_logged: bool = False,
) -> None:
    message = err.message if isinstance(err, UserFriendlyError) else str(err)
    if not already_logged:
        logger.error(message)
    original = err.original_error if isinstance(err, UserFriendlyError) else err
    logger.debug(f"{type(original).__name__}: {original}")
    failures.append(FileFailure(path=path, message=message))
