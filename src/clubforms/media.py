"""Media browser: folder mapping, folder-aware uploads and listing."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from clubforms import logger
from clubforms.exceptions import StorageError
from clubforms.typing.enums import MediaFolder, MediaFolderUi
from clubforms.typing.models import MediaAsset

if TYPE_CHECKING:
    from clubforms.typing.models import FileUpload, UploadedAsset
    from clubforms.typing.protocol import MediaStorage

_UI_FOLDER_BY_SEGMENT: dict[str, MediaFolderUi] = {
    "committee_members": MediaFolderUi.COMMITTEE_MEMBERS,
    "events": MediaFolderUi.EVENTS,
    "upcoming_events": MediaFolderUi.EVENTS,
    "form_register": MediaFolderUi.FORM_REGISTER,
    "form_builder": MediaFolderUi.FORM_REGISTER,
    "user_profiles": MediaFolderUi.PROFILES,
    "community_members": MediaFolderUi.PROFILES,
    "general": MediaFolderUi.GENERAL,
}

UPLOAD_FOLDER_BY_UI: dict[MediaFolderUi, MediaFolder] = {
    MediaFolderUi.EVENTS: MediaFolder.EVENTS,
    MediaFolderUi.FORM_REGISTER: MediaFolder.FORM_REGISTER,
    MediaFolderUi.COMMITTEE_MEMBERS: MediaFolder.COMMITTEE_MEMBERS,
    MediaFolderUi.PROFILES: MediaFolder.USER_PROFILES,
    MediaFolderUi.GENERAL: MediaFolder.GENERAL,
}


def original_folder(public_id: str) -> str:
    """Return the storage folder right below the media root.

    Args:
        public_id (str): Storage identifier such as `club/events/poster`.

    Returns:
        str: Second path segment, or `general` when there is none.
    """
    parts = public_id.split("/")
    return parts[1] if len(parts) > 1 and parts[1] else MediaFolder.GENERAL.value


def map_folder_to_ui(public_id: str) -> MediaFolderUi:
    """Map a storage identifier to the folder shown by the media browser.

    Args:
        public_id (str): Storage identifier.

    Returns:
        MediaFolderUi: Browser folder; unknown folders map to `general`.
    """
    parts = public_id.split("/")
    if len(parts) < 2:  # noqa: PLR2004
        return MediaFolderUi.GENERAL
    return _UI_FOLDER_BY_SEGMENT.get(parts[1], MediaFolderUi.GENERAL)


def media_asset_from_resource(resource: Mapping[str, Any]) -> MediaAsset:
    """Build a media asset from one search result resource.

    Args:
        resource (Mapping[str, Any]): Raw resource payload.

    Raises:
        StorageError: If the payload lacks an id or URL.

    Returns:
        MediaAsset: Normalized asset.
    """
    public_id = resource.get("public_id")
    url = resource.get("secure_url") or resource.get("url")
    if not isinstance(public_id, str) or not isinstance(url, str):
        raise StorageError(message="Search result is missing public_id or url")
    try:
        return MediaAsset(
            public_id=public_id,
            url=url,
            name=public_id.split("/")[-1],
            folder=map_folder_to_ui(public_id),
            original_folder=original_folder(public_id),
            size=resource.get("bytes"),
            width=resource.get("width"),
            height=resource.get("height"),
            format=resource.get("format"),
            created_at=_parse_timestamp(resource.get("created_at")),
        )
    except ValidationError as exc:
        raise StorageError(message=f"Invalid search result for '{public_id}': {exc}") from exc


def _parse_timestamp(value: object) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


class MediaLibrary:
    """Admin media browser over the object storage."""

    def __init__(self, storage: MediaStorage) -> None:
        """Bind the library to a storage backend.

        Args:
            storage (MediaStorage): Object storage with search support.
        """
        self.storage = storage

    def upload(self, file: FileUpload, folder: MediaFolder | str = MediaFolder.GENERAL) -> UploadedAsset:
        """Upload a file into a logical folder.

        Args:
            file (FileUpload): File to upload.
            folder (MediaFolder | str): Logical folder, or a sub-path below one.

        Returns:
            UploadedAsset: Stored file.
        """
        asset = self.storage.upload(file, str(folder))
        logger.info("Media uploaded", extra={"public_id": asset.public_id, "folder": str(folder)})
        return asset

    def upload_to_ui_folder(self, file: FileUpload, ui_folder: MediaFolderUi | str) -> UploadedAsset:
        """Upload a file into the storage folder behind a browser folder.

        Args:
            file (FileUpload): File to upload.
            ui_folder (MediaFolderUi | str): Folder selected in the browser.

        Returns:
            UploadedAsset: Stored file.
        """
        target = UPLOAD_FOLDER_BY_UI.get(MediaFolderUi.from_str(str(ui_folder)), MediaFolder.GENERAL)
        return self.upload(file, target)

    def upload_event_image(self, file: FileUpload) -> UploadedAsset:
        """Upload an event poster."""
        return self.upload(file, MediaFolder.EVENTS)

    def upload_committee_member_image(self, file: FileUpload) -> UploadedAsset:
        """Upload a committee member photo."""
        return self.upload(file, MediaFolder.COMMITTEE_MEMBERS)

    def upload_profile_image(self, file: FileUpload) -> UploadedAsset:
        """Upload a community member photo."""
        return self.upload(file, MediaFolder.USER_PROFILES)

    def upload_form_builder_image(self, file: FileUpload) -> UploadedAsset:
        """Upload an image authored in the form builder."""
        return self.upload(file, MediaFolder.FORM_BUILDER)

    def upload_form_file(self, file: FileUpload, form_title: str) -> UploadedAsset:
        """Upload a file attached to a registration.

        Args:
            file (FileUpload): File to upload.
            form_title (str): Title of the activity registered for.

        Returns:
            UploadedAsset: Stored file.
        """
        return self.upload(file, f"{MediaFolder.FORM_REGISTER.value}/{form_title}")

    def list_images(self, ui_folder: MediaFolderUi | str | None = None) -> list[MediaAsset]:
        """List images, optionally restricted to one browser folder.

        Args:
            ui_folder (MediaFolderUi | str | None): Browser folder; None or `all` lists everything.

        Returns:
            list[MediaAsset]: Images, newest first.
        """
        assets = self.storage.search_images()
        if ui_folder is None or str(ui_folder) == "all":
            return assets
        wanted = MediaFolderUi.from_str(str(ui_folder))
        return [asset for asset in assets if asset.folder == wanted]

    def delete(self, public_id: str) -> None:
        """Delete an image.

        Args:
            public_id (str): Storage identifier.
        """
        self.storage.delete(public_id)
        logger.info("Media deleted", extra={"public_id": public_id})
