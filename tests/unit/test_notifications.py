from __future__ import annotations

import pytest

from clubforms.exceptions import (
    ActivityValidationError,
    DocumentStoreError,
    ExportError,
    PackageError,
    PermissionDeniedError,
    SchemaStoreError,
    StorageError,
)
from clubforms.notifications import (
    PERMISSION_DENIED,
    SERVICE_UNAVAILABLE,
    UPLOAD_FAILED,
    describe_failure,
    success,
)
from clubforms.typing.enums import NotificationLevel


def test_success_notification() -> None:
    notification = success("Saved")
    assert notification.ok
    assert notification.level == NotificationLevel.SUCCESS


@pytest.mark.parametrize(
    ("error", "message", "retryable"),
    [
        (PermissionDeniedError(), PERMISSION_DENIED, True),
        (DocumentStoreError(message="down", code="unavailable"), SERVICE_UNAVAILABLE, True),
        (DocumentStoreError(message="User not authenticated", code="unauthenticated"), "User not authenticated", False),
        (StorageError(message="boom"), UPLOAD_FAILED, False),
        (ExportError(message="No submissions to export"), "No submissions to export", False),
        (DocumentStoreError(message="other", code="aborted"), "Fallback", False),
        (SchemaStoreError(message="bad"), "Fallback", False),
    ],
)
def test_describe_failure(error: PackageError, message: str, retryable: bool) -> None:
    notification = describe_failure(error, "Fallback")

    assert notification.level == NotificationLevel.ERROR
    assert notification.message == message
    assert notification.retryable is retryable


def test_describe_failure_lists_missing_activity_fields() -> None:
    notification = describe_failure(ActivityValidationError(missing=["Title", "Event Date"]), "Fallback")

    assert notification.missing_fields == ["Title", "Event Date"]
    assert notification.message == "Please fill in all required fields: Title, Event Date"


def test_describe_failure_with_detail() -> None:
    notification = describe_failure(DocumentStoreError(message="quota exceeded"), "Fallback", include_detail=True)
    assert notification.message == "Error: quota exceeded"


def test_describe_failure_custom_upload_message() -> None:
    notification = describe_failure(StorageError(message="x"), "Fallback", upload_message="Image upload failed")
    assert notification.message == "Image upload failed"
