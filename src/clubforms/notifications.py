"""User-facing notifications built at operation boundaries."""

from __future__ import annotations

from clubforms.exceptions import (
    ActivityValidationError,
    DocumentStoreError,
    ExportError,
    PackageError,
    StorageError,
    SubmissionValidationError,
)
from clubforms.typing.enums import NotificationLevel
from clubforms.typing.models import Notification

REGISTRATION_SUBMITTED = "Registration submitted successfully!"
REGISTRATION_FAILED = "Failed to submit registration. Please try again."
UPLOAD_FAILED = "Failed to upload file. Please try again."
ACTIVITY_SAVED = "Activity saved successfully!"
ACTIVITY_SAVE_FAILED = "Failed to save activity. Please try again."
ACTIVITY_DELETED = "Activity deleted successfully!"
ACTIVITY_DELETE_FAILED = "Failed to delete activity. Please try again."
STATUS_UPDATED = "Status updated successfully"
STATUS_UPDATE_FAILED = "Failed to update status"
SUBMISSION_DELETED = "Submission deleted successfully"
SUBMISSION_DELETE_FAILED = "Failed to delete submission"
SUBMISSIONS_UNAVAILABLE = "Unable to load submissions. Please check your permissions."
NOT_AUTHENTICATED = "User not authenticated"
LOGIN_REQUIRED = "You must be logged in to create or edit activities. Please log in as an admin."
PERMISSION_DENIED = "Permission denied. Please check if you're logged in as an admin."
SERVICE_UNAVAILABLE = "The service is currently unavailable. Please try again later."

PERMISSION_DENIED_CODE = "permission-denied"
UNAUTHENTICATED_CODE = "unauthenticated"
UNAVAILABLE_CODE = "unavailable"


def success(message: str) -> Notification:
    """Build a success notification.

    Args:
        message (str): Message shown to the user.

    Returns:
        Notification: Success notification.
    """
    return Notification(level=NotificationLevel.SUCCESS, message=message)


def describe_failure(
    exc: PackageError,
    fallback: str,
    *,
    upload_message: str = UPLOAD_FAILED,
    include_detail: bool = False,
) -> Notification:
    """Convert a caught failure into the notification shown to the user.

    Permission and availability failures are recognised by their provider
    code only and offer a full retry.

    Args:
        exc (PackageError): Failure caught at the operation boundary.
        fallback (str): Message for failures without a dedicated wording.
        upload_message (str): Message for object storage failures.
        include_detail (bool): Whether to surface the error text instead of `fallback`.

    Returns:
        Notification: Error notification.
    """
    match exc:
        case SubmissionValidationError():
            return _error(str(exc), missing_fields=list(exc.missing_labels))
        case ActivityValidationError():
            return _error(str(exc), missing_fields=list(exc.missing))
        case DocumentStoreError(code=code) if code == UNAUTHENTICATED_CODE:
            return _error(str(exc))
        case DocumentStoreError(code=code) if code == PERMISSION_DENIED_CODE:
            return _error(PERMISSION_DENIED, retryable=True)
        case DocumentStoreError(code=code) if code == UNAVAILABLE_CODE:
            return _error(SERVICE_UNAVAILABLE, retryable=True)
        case StorageError():
            return _error(upload_message)
        case ExportError():
            return _error(str(exc))
    if include_detail and str(exc):
        return _error(f"Error: {exc}")
    return _error(fallback)


def _error(message: str, *, retryable: bool = False, missing_fields: list[str] | None = None) -> Notification:
    return Notification(
        level=NotificationLevel.ERROR,
        message=message,
        retryable=retryable,
        missing_fields=missing_fields or [],
    )
