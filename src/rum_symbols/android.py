"""
rum-symbols - Android mapping files

Uploads ProGuard/R8 mapping files keyed by application ID and version code,
and lists the mapping files already uploaded for an application.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import httpx

from .constants import ANDROID_MAPPING_FILE_EXTENSIONS
from .errors import UserFriendlyError
from .http_client import (
    BackendClient,
    BackendError,
    build_android_list_url,
    build_android_upload_url,
    open_backend_client,
)
from .spinner import Spinner

LOGGER = logging.getLogger(__name__)


@dataclass
class AndroidUploadOptions:
    file: Path
    app_id: str
    version_code: str
    realm: str
    token: str
    uuid: Optional[str] = None
    dry_run: bool = False


# =============================================================================
# INPUT VALIDATION
# =============================================================================


def is_valid_file(path: Union[str, Path]) -> bool:
    return Path(path).is_file()


def has_valid_extension(path: Union[str, Path], *extensions: str) -> bool:
    return Path(path).suffix in extensions


def is_valid_app_id(app_id: Any) -> bool:
    return isinstance(app_id, str) and len(app_id) > 0


def is_valid_version_code(version_code: Any) -> bool:
    """Integers and strings holding an integer are valid version codes."""
    if isinstance(version_code, bool):
        return False
    if isinstance(version_code, int):
        return True
    if isinstance(version_code, str):
        try:
            int(version_code)
        except ValueError:
            return False
        return True
    return False


def is_valid_uuid(uuid: Any) -> bool:
    return isinstance(uuid, str) and len(uuid) > 0


def validate_upload_options(options: AndroidUploadOptions) -> None:
    if not is_valid_app_id(options.app_id):
        raise UserFriendlyError(None, "Invalid Application ID. It must be a non-empty string.")
    if not is_valid_version_code(options.version_code):
        raise UserFriendlyError(None, "Invalid Version Code. It must be an integer.")
    if not is_valid_file(options.file):
        raise UserFriendlyError(None, f"Invalid mapping file path: {options.file}.")
    if not has_valid_extension(options.file, *ANDROID_MAPPING_FILE_EXTENSIONS):
        raise UserFriendlyError(
            None, f"Mapping file does not have correct extension: {options.file}."
        )
    if options.uuid is not None and not is_valid_uuid(options.uuid):
        raise UserFriendlyError(None, "Invalid UUID. It must be a non-empty string.")


# =============================================================================
# UPLOAD
# =============================================================================


def upload_android_mapping(
    options: AndroidUploadOptions,
    logger: Optional[logging.Logger] = None,
    spinner: Optional[Spinner] = None,
    client: Optional[BackendClient] = None,
) -> None:
    """Validate ``options`` and upload the mapping file.

    Raises ``UserFriendlyError`` for invalid input and for a failed upload.
    """
    logger = logger or LOGGER
    validate_upload_options(options)
    file_path = Path(options.file)

    logger.info(
        "Preparing to upload Android mapping file:\n"
        f"  File: {file_path}\n"
        f"  App ID: {options.app_id}\n"
        f"  Version Code: {options.version_code}\n"
        f"  UUID: {options.uuid or 'Not provided'}"
    )
    if options.dry_run:
        logger.info("Dry run complete - no file will be uploaded.")
        return

    url = build_android_upload_url(
        options.realm, options.app_id, str(options.version_code), options.uuid
    )
    logger.debug(f"POST {url}")
    if spinner is not None:
        spinner.start(f"Uploading Android mapping file: {file_path}")
    try:
        with open_backend_client(options.token, client) as backend:
            backend.upload_file(url, file_path, {}, content_type=None)
    except BackendError as err:
        raise UserFriendlyError(err, f"Unable to upload {file_path}: {err}") from err
    except httpx.HTTPError as err:
        raise UserFriendlyError(
            err,
            f"Unable to upload {file_path}. Check your network connection and the "
            "--realm value, then rerun the command.",
        ) from err
    finally:
        if spinner is not None:
            spinner.stop()
    logger.info("Upload complete")


# =============================================================================
# LIST
# =============================================================================


def list_android_mappings(
    realm: str, token: str, app_id: str, client: Optional[BackendClient] = None
) -> List[Dict[str, Any]]:
    if not is_valid_app_id(app_id):
        raise UserFriendlyError(None, "Invalid Application ID. It must be a non-empty string.")
    with open_backend_client(token, client) as backend:
        return backend.fetch_metadata(build_android_list_url(realm, app_id))
