"""Interfaces of the hosted services the package consumes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from clubforms.typing.models import Activity, FileUpload, MediaAsset, SubmissionRecord, UploadedAsset


class ObjectStorage(Protocol):
    """Hosted file storage / CDN."""

    def upload(self, file: FileUpload, folder: str) -> UploadedAsset:
        """Upload a file below a logical folder.

        Args:
            file: Raw file to upload.
            folder: Destination folder path relative to the media root.

        Returns:
            UploadedAsset: Public URL and identifier of the stored file.
        """

    def delete(self, public_id: str) -> None:
        """Delete a stored file.

        Args:
            public_id: Storage identifier returned by `upload`.
        """


class MediaSearch(Protocol):
    """Privileged listing of stored images."""

    def search_images(self, folder: str | None = None) -> list[MediaAsset]:
        """List images, newest first.

        Args:
            folder: Optional folder path relative to the media root.

        Returns:
            list[MediaAsset]: Matching images.
        """


class DocumentStore(Protocol):
    """Hosted document database holding activities and registrations.

    Registrations live under their activity and are duplicated into a flat
    collection for cross-activity admin queries.
    """

    def list_activities(self) -> list[Activity]:
        """Return every activity."""

    def get_activity(self, activity_id: str) -> Activity | None:
        """Return one activity, or None when it does not exist."""

    def create_activity(self, document: dict[str, Any]) -> str:
        """Create an activity document and return its id."""

    def update_activity(self, activity_id: str, document: dict[str, Any]) -> None:
        """Replace the stored fields of an activity document."""

    def delete_activity(self, activity_id: str) -> None:
        """Delete an activity document."""

    def list_registrations(self, activity_id: str) -> list[SubmissionRecord]:
        """Return the registrations stored under an activity."""

    def list_all_registrations(self) -> list[SubmissionRecord]:
        """Return every registration of the flat collection."""

    def add_registration(self, record: SubmissionRecord) -> str:
        """Store a registration under its activity and in the flat collection; return its id."""

    def update_registration(
        self,
        activity_id: str,
        registration_id: str,
        updates: dict[str, Any],
        *,
        flat: bool = False,
    ) -> None:
        """Merge fields into a registration of the activity (or of the flat collection)."""

    def delete_registration(self, activity_id: str, registration_id: str) -> None:
        """Delete a registration from both collections."""

    def delete_registrations(self, activity_id: str) -> int:
        """Delete every registration of an activity from both collections; return the count."""


class MediaStorage(ObjectStorage, MediaSearch, Protocol):
    """Object storage that can also list its images."""
