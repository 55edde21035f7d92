"""HTTP access to the symbolication backend."""
from __future__ import annotations

import json
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import httpx

from .constants import (
    ANDROID_PATH_FOR_METADATA,
    ANDROID_PATH_FOR_UPLOAD,
    API_VERSION_STRING,
    BASE_URL_TEMPLATE,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    IOS_PATH_FOR_METADATA,
    IOS_PATH_FOR_UPLOAD,
    SOURCEMAPS_PATH_FOR_METADATA,
    SOURCEMAPS_PATH_FOR_UPLOAD,
    TOKEN_HEADER,
    UPLOAD_FILE_FIELD_NAME,
)


class BackendError(Exception):
    """The backend rejected a request or returned something unusable."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def build_base_url(realm: str) -> str:
    return f"{BASE_URL_TEMPLATE.format(realm=realm)}/{API_VERSION_STRING}"


def build_upload_url(realm: str, source_map_id: str) -> str:
    return f"{build_base_url(realm)}/{SOURCEMAPS_PATH_FOR_UPLOAD}/id/{source_map_id}"


def build_list_url(realm: str) -> str:
    return f"{build_base_url(realm)}/{SOURCEMAPS_PATH_FOR_METADATA}"


def build_android_upload_url(
    realm: str, app_id: str, version_code: str, uuid: Optional[str] = None
) -> str:
    url = f"{build_base_url(realm)}/{ANDROID_PATH_FOR_UPLOAD}/{app_id}/{version_code}"
    if uuid:
        url += f"/{uuid}"
    return url


def build_android_list_url(realm: str, app_id: str) -> str:
    return f"{build_base_url(realm)}/{ANDROID_PATH_FOR_METADATA.format(app_id=app_id)}"


def build_ios_upload_url(realm: str) -> str:
    return f"{build_base_url(realm)}/{IOS_PATH_FOR_UPLOAD}"


def build_ios_list_url(realm: str) -> str:
    return f"{build_base_url(realm)}/{IOS_PATH_FOR_METADATA}"


class BackendClient:
    def __init__(
        self,
        token: str,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.token = token
        self.timeout = timeout
        self.transport = transport
        self._client: Optional[httpx.Client] = None

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                headers={TOKEN_HEADER: self.token},
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self.transport,
            )
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "BackendClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def upload_file(
        self,
        url: str,
        file_path: Path,
        parameters: Dict[str, str],
        content_type: Optional[str] = "application/json",
    ) -> None:
        """POST ``file_path`` as a multipart form with ``parameters`` as extra fields.

        With ``content_type=None`` the part's type is guessed from the file name.
        """
        with file_path.open("rb") as fp:
            part = (file_path.name, fp, content_type) if content_type else (file_path.name, fp)
            response = self.client.post(
                url,
                files={UPLOAD_FILE_FIELD_NAME: part},
                data=parameters,
            )
        _raise_for_status(response)

    def put_file(self, url: str, file_path: Path, content_type: str) -> None:
        """PUT the raw bytes of ``file_path`` as the request body."""
        with file_path.open("rb") as fp:
            response = self.client.put(
                url,
                content=fp,
                headers={"Content-Type": content_type},
            )
        _raise_for_status(response)

    def fetch_metadata(self, url: str) -> List[Dict[str, Any]]:
        response = self.client.get(url, headers={"Accept": "application/json"})
        _raise_for_status(response)
        try:
            payload = response.json()
        except json.JSONDecodeError as err:
            raise BackendError("Invalid response format from API", response.status_code) from err
        if not isinstance(payload, list):
            raise BackendError("Invalid response format from API", response.status_code)
        return payload


@contextmanager
def open_backend_client(
    token: str, client: Optional[BackendClient] = None
) -> Iterator[BackendClient]:
    """Yield ``client`` untouched, or a new ``BackendClient`` closed on exit."""
    if client is not None:
        yield client
        return
    with BackendClient(token) as owned:
        yield owned


def _raise_for_status(response: httpx.Response) -> None:
    if response.status_code in (401, 403):
        raise BackendError(
            "The backend rejected the access token. Verify the --token and --realm values.",
            response.status_code,
        )
    if response.status_code == 413:
        raise BackendError(
            f"Request to {response.request.url} was rejected because the file is too large",
            response.status_code,
        )
    if response.status_code >= 400:
        raise BackendError(
            f"Request to {response.request.url} failed with status {response.status_code}",
            response.status_code,
        )
