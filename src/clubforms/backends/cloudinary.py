"""Cloudinary REST client implementing the object storage interfaces."""

from __future__ import annotations

import hashlib
import time
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

import httpx

from clubforms import logger
from clubforms.exceptions import StorageError
from clubforms.media import media_asset_from_resource
from clubforms.typing.models import FileUpload, MediaAsset, UploadedAsset

if TYPE_CHECKING:
    from clubforms.settings import Settings


def sign_params(params: Mapping[str, object], api_secret: str) -> str:
    """Sign API parameters the way Cloudinary expects.

    Args:
        params (Mapping[str, object]): Parameters to sign, without `api_key` and `file`.
        api_secret (str): API secret.

    Returns:
        str: SHA-1 hex digest of the sorted `key=value` pairs followed by the secret.
    """
    payload = "&".join(f"{key}={params[key]}" for key in sorted(params) if params[key] not in (None, ""))
    return hashlib.sha1(f"{payload}{api_secret}".encode(), usedforsecurity=False).hexdigest()


class CloudinaryStorage:
    """Upload, search and delete images on Cloudinary.

    Uploads use an unsigned preset. Search and delete need the API key and
    secret and must only run server-side.
    """

    def __init__(
        self,
        *,
        cloud_name: str,
        client: httpx.Client,
        upload_preset: str | None = None,
        api_key: str | None = None,
        api_secret: str | None = None,
        root_folder: str = "club",
        base_url: str = "https://api.cloudinary.com/v1_1",
        max_results: int = 100,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the client.

        Args:
            cloud_name (str): Cloudinary cloud name.
            client (httpx.Client): HTTP client used for every call.
            upload_preset (str | None): Unsigned upload preset.
            api_key (str | None): API key for search and delete.
            api_secret (str | None): API secret for search and delete.
            root_folder (str): Folder holding every logical media folder.
            base_url (str): REST API base URL.
            max_results (int): Search result cap.
            clock (Callable[[], float]): Source of signature timestamps.
        """
        self._cloud_name = cloud_name
        self._client = client
        self._upload_preset = upload_preset
        self._api_key = api_key
        self._api_secret = api_secret
        self._root_folder = root_folder.strip("/")
        self._base_url = base_url.rstrip("/")
        self._max_results = max_results
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> CloudinaryStorage:
        """Build the client from runtime settings.

        Args:
            settings (Settings): Runtime settings.

        Raises:
            StorageError: If no cloud name is configured.

        Returns:
            CloudinaryStorage: Configured client sharing the settings' HTTP client.
        """
        if not settings.cloudinary_cloud_name:
            raise StorageError(message="CLOUDINARY_CLOUD_NAME is not configured")
        return cls(
            cloud_name=settings.cloudinary_cloud_name,
            client=settings.http_client,
            upload_preset=settings.cloudinary_upload_preset,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            root_folder=settings.media_root_folder,
            base_url=settings.cloudinary_api_base_url,
            max_results=settings.media_search_max_results,
        )

    def folder_path(self, folder: str | None) -> str:
        """Return the full storage path of a folder relative to the media root.

        Args:
            folder (str | None): Relative folder.

        Returns:
            str: Path prefixed with the media root.
        """
        relative = (folder or "").strip("/")
        return f"{self._root_folder}/{relative}" if relative else self._root_folder

    def upload(self, file: FileUpload, folder: str) -> UploadedAsset:
        """Upload a file with the unsigned preset.

        Args:
            file (FileUpload): File to upload.
            folder (str): Folder relative to the media root.

        Raises:
            StorageError: If no preset is configured or the upload is rejected.

        Returns:
            UploadedAsset: Stored file.
        """
        if not self._upload_preset:
            raise StorageError(message="CLOUDINARY_UPLOAD_PRESET is not configured")
        target = self.folder_path(folder)
        payload = self._post(
            "auto/upload",
            operation="upload",
            data={"upload_preset": self._upload_preset, "folder": target},
            files={"file": (file.file_name, file.content, file.content_type)},
        )
        public_id = payload.get("public_id")
        url = payload.get("secure_url") or payload.get("url")
        if not isinstance(public_id, str) or not isinstance(url, str):
            raise StorageError(message="Upload response is missing public_id or url")
        logger.info("File uploaded", extra={"public_id": public_id, "folder": target})
        return UploadedAsset(
            public_id=public_id,
            url=url,
            folder=payload.get("folder") or target,
            size=payload.get("bytes", file.size),
            width=payload.get("width"),
            height=payload.get("height"),
            format=payload.get("format"),
        )

    def search_images(self, folder: str | None = None) -> list[MediaAsset]:
        """List images, newest first.

        Args:
            folder (str | None): Folder relative to the media root; None lists every image.

        Raises:
            StorageError: If credentials are missing or the search fails.

        Returns:
            list[MediaAsset]: Matching images.
        """
        api_key, api_secret = self._credentials()
        expression = f"folder:{self.folder_path(folder)}/*" if folder else "resource_type:image"
        payload = self._post(
            "resources/search",
            operation="search",
            json={
                "expression": expression,
                "sort_by": [{"created_at": "desc"}],
                "max_results": self._max_results,
            },
            auth=(api_key, api_secret),
        )
        resources = payload.get("resources") or []
        return [media_asset_from_resource(resource) for resource in resources if isinstance(resource, dict)]

    def delete(self, public_id: str) -> None:
        """Delete an image with a signed destroy call.

        Args:
            public_id (str): Storage identifier.

        Raises:
            StorageError: If the id is empty, credentials are missing, or the
                provider does not answer `ok`.
        """
        if not public_id:
            raise StorageError(message="Public ID is required", status_code=400)
        api_key, api_secret = self._credentials()
        params: dict[str, object] = {"public_id": public_id, "timestamp": int(self._clock())}
        payload = self._post(
            "image/destroy",
            operation="delete",
            data={**params, "api_key": api_key, "signature": sign_params(params, api_secret)},
        )
        result = payload.get("result")
        if result != "ok":
            raise StorageError(message=f"Failed to delete image '{public_id}': {result}")
        logger.info("File deleted", extra={"public_id": public_id})

    def _credentials(self) -> tuple[str, str]:
        if not self._api_key or not self._api_secret:
            raise StorageError(message="CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET are required")
        return self._api_key, self._api_secret

    def _post(self, endpoint: str, *, operation: str, **kwargs: Any) -> dict[str, Any]:
        """POST to the REST API and decode the JSON answer.

        Args:
            endpoint (str): Path below the cloud URL.
            operation (str): Operation name used in error messages.
            **kwargs (Any): Extra `httpx.Client.post` arguments.

        Raises:
            StorageError: On transport failures, error statuses or non-JSON bodies.

        Returns:
            dict[str, Any]: Decoded payload.
        """
        url = f"{self._base_url}/{self._cloud_name}/{endpoint}"
        try:
            response = self._client.post(url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Object storage request failed", extra={"operation": operation, "error": str(exc)})
            raise StorageError(message=f"Object storage {operation} failed: {exc}") from exc
        if response.status_code >= 400:  # noqa: PLR2004
            logger.warning(
                "Object storage rejected request",
                extra={"operation": operation, "status_code": response.status_code},
            )
            raise StorageError(message=f"Object storage {operation} failed", status_code=response.status_code)
        try:
            payload = response.json()
        except ValueError as exc:
            raise StorageError(message=f"Object storage {operation} returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise StorageError(message=f"Object storage {operation} returned an unexpected payload")
        return payload
