"""Package exceptions."""

from __future__ import annotations

from dataclasses import dataclass, field


class PackageError(Exception):
    """Root exception for the package."""


@dataclass(frozen=True)
class SettingsError(PackageError):
    """Raised when settings cannot be loaded or validated."""

    message: str = "Failed to load settings"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class DependencyError(PackageError):
    """Raised when optional runtime dependencies are missing."""

    missing_package: list[str]
    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Missing runtime dependencies for '{self.message}': {', '.join(self.missing_package)}"


@dataclass
class SchemaStoreError(PackageError):
    """Raised when a schema mutation would break a schema invariant."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass
class FieldNotFoundError(SchemaStoreError):
    """Raised when a field id is not part of the schema."""

    field_id: str = ""


@dataclass
class SchemaFileError(PackageError):
    """Raised when a schema file cannot be read or written."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass
class ResponseError(PackageError):
    """Raised when a change event cannot be routed into the response map."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class SubmissionValidationError(PackageError):
    """Raised when required inputs are missing from a response map."""

    missing_labels: list[str]

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Please fill in the following required fields: {', '.join(self.missing_labels)}"


@dataclass(frozen=True)
class ActivityValidationError(PackageError):
    """Raised when an activity draft misses required metadata."""

    missing: list[str]

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Please fill in all required fields: {', '.join(self.missing)}"


@dataclass(frozen=True)
class StorageError(PackageError):
    """Raised when the object storage rejects an upload, search or delete."""

    message: str
    status_code: int | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        if self.status_code is None:
            return self.message
        return f"{self.message} (status {self.status_code})"


@dataclass(frozen=True)
class DocumentStoreError(PackageError):
    """Raised when a document read or write fails."""

    message: str
    code: str | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class PermissionDeniedError(DocumentStoreError):
    """Raised when the hosted backend refuses access."""

    message: str = "Permission denied"
    code: str | None = field(default="permission-denied")


@dataclass(frozen=True)
class ExportError(PackageError):
    """Raised when submissions cannot be exported."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message
