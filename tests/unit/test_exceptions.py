from __future__ import annotations

from clubforms.exceptions import (
    ActivityValidationError,
    DependencyError,
    DocumentStoreError,
    ExportError,
    FieldNotFoundError,
    PackageError,
    PermissionDeniedError,
    SchemaFileError,
    SchemaStoreError,
    SettingsError,
    StorageError,
    SubmissionValidationError,
)


def test_root_exception_hierarchy() -> None:
    for error in (
        SettingsError,
        DependencyError,
        SchemaStoreError,
        SchemaFileError,
        SubmissionValidationError,
        ActivityValidationError,
        StorageError,
        DocumentStoreError,
        ExportError,
    ):
        assert issubclass(error, PackageError)
    assert issubclass(FieldNotFoundError, SchemaStoreError)
    assert issubclass(PermissionDeniedError, DocumentStoreError)


def test_submission_validation_error_lists_labels() -> None:
    error = SubmissionValidationError(missing_labels=["Full Name", "Email Address"])
    assert str(error) == "Please fill in the following required fields: Full Name, Email Address"


def test_storage_error_mentions_status_code() -> None:
    assert str(StorageError(message="Upload failed")) == "Upload failed"
    assert str(StorageError(message="Upload failed", status_code=502)) == "Upload failed (status 502)"


def test_permission_denied_defaults() -> None:
    error = PermissionDeniedError()
    assert error.code == "permission-denied"
    assert str(error) == "Permission denied"


def test_field_not_found_keeps_field_id() -> None:
    error = FieldNotFoundError(message="Unknown field id: x", field_id="x")
    assert error.field_id == "x"
    assert str(error) == "Unknown field id: x"


def test_dependency_error_message() -> None:
    error = DependencyError(missing_package=["supabase"], message="export")
    assert str(error) == "Missing runtime dependencies for 'export': supabase"
