"""
rum-symbols - iOS dSYM files

Uploads zipped dSYM bundles and lists the dSYMs already uploaded. ``--path``
is either a ``.dSYM.zip`` / ``.dSYMs.zip`` archive or a ``dSYMs`` directory
holding such archives. Unzipped ``.dSYM`` bundles are not archived here; the
build has to zip them first.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import httpx

from .constants import (
    DSYM_BUNDLE_SUFFIX,
    DSYM_CONTENT_TYPE,
    DSYM_ZIP_SUFFIXES,
    DSYMS_DIRECTORY_NAME,
)
from .errors import FileOperation, UserFriendlyError, raise_user_friendly
from .http_client import (
    BackendClient,
    BackendError,
    build_ios_list_url,
    build_ios_upload_url,
    open_backend_client,
)
from .sourcemaps import FileFailure
from .spinner import Spinner

LOGGER = logging.getLogger(__name__)


@dataclass
class DsymUploadOptions:
    path: Path
    realm: str
    token: str
    dry_run: bool = False


@dataclass
class DsymUploadSummary:
    files_found: int = 0
    uploaded: List[Path] = field(default_factory=list)
    failed: List[FileFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def validate_dsyms_path(dsyms_path: Union[str, Path]) -> Path:
    path = Path(dsyms_path).resolve()

    if path.name == DSYMS_DIRECTORY_NAME:
        if not _stat_path(path).is_dir():
            raise UserFriendlyError(
                None, "Invalid input: Expected a 'dSYMs/' directory but got a file."
            )
        return path

    if path.name.endswith(DSYM_ZIP_SUFFIXES):
        if not _stat_path(path).is_file():
            raise UserFriendlyError(
                None, "Invalid input: Expected a '.dSYM.zip' or '.dSYMs.zip' file."
            )
        return path

    if path.name.endswith(DSYM_BUNDLE_SUFFIX):
        raise UserFriendlyError(
            None,
            f"Invalid input: {path} is an unzipped dSYM bundle. Zip it into a "
            "'.dSYM.zip' archive, then rerun the ios upload command.",
        )

    raise UserFriendlyError(
        None,
        "Invalid input: Expected a path named 'dSYMs' or ending in '.dSYMs.zip' or '.dSYM.zip'.",
    )


def _stat_path(path: Path) -> Path:
    try:
        path.stat()
    except OSError as err:
        raise_user_friendly(err, FileOperation.READ_DSYMS_PATH, path=path)
    return path


def collect_dsym_archives(path: Path, logger: Optional[logging.Logger] = None) -> List[Path]:
    """Return the archives to upload for a validated ``path``."""
    logger = logger or LOGGER
    if path.is_file():
        return [path]

    try:
        entries = sorted(path.iterdir())
    except OSError as err:
        raise_user_friendly(err, FileOperation.READ_DSYMS_PATH, path=path)

    archives = []
    for entry in entries:
        if entry.is_file() and entry.name.endswith(DSYM_ZIP_SUFFIXES):
            archives.append(entry)
        elif entry.is_dir() and entry.name.endswith(DSYM_BUNDLE_SUFFIX):
            logger.warning(f"Skipping {entry}: dSYM bundles must be zipped before upload")
    return archives


def upload_dsyms(
    options: DsymUploadOptions,
    logger: Optional[logging.Logger] = None,
    spinner: Optional[Spinner] = None,
    client: Optional[BackendClient] = None,
) -> DsymUploadSummary:
    logger = logger or LOGGER
    path = validate_dsyms_path(options.path)
    archives = collect_dsym_archives(path, logger)
    summary = DsymUploadSummary(files_found=len(archives))

    if options.dry_run:
        if not archives:
            logger.info(f"Dry run mode: No files found to upload for {options.path}.")
        else:
            logger.info("Dry run mode: Would upload the following file(s):")
            for archive in archives:
                logger.info(f"\t{archive.name}")
        return summary

    url = build_ios_upload_url(options.realm)
    logger.info(f"Upload URL: {url}")
    logger.info(f"Preparing to upload dSYM files from {options.path}")

    with open_backend_client(options.token, client) as backend:
        for archive in archives:
            if spinner is not None:
                spinner.start(f"Uploading file: {archive}")
            try:
                backend.put_file(url, archive, DSYM_CONTENT_TYPE)
            except (BackendError, httpx.HTTPError, OSError) as err:
                logger.error(f"Unable to upload {archive}")
                logger.debug(f"{type(err).__name__}: {err}")
                summary.failed.append(FileFailure(path=archive, message=str(err)))
                continue
            finally:
                if spinner is not None:
                    spinner.stop()
            logger.info(f"Upload complete for {archive}")
            summary.uploaded.append(archive)

    if summary.failed:
        logger.error(f"Upload failed for {len(summary.failed)} file(s)")
    elif archives:
        logger.info("All files uploaded successfully.")
    else:
        logger.warning(f"No dSYM archives were found in {options.path}")
    return summary


def list_dsyms(
    realm: str, token: str, client: Optional[BackendClient] = None
) -> List[Dict[str, Any]]:
    with open_backend_client(token, client) as backend:
        return backend.fetch_metadata(build_ios_list_url(realm))
