"""Clubforms package."""

from clubforms.exceptions import (
    DependencyError,
    DocumentStoreError,
    PackageError,
    PermissionDeniedError,
    SchemaStoreError,
    SettingsError,
    StorageError,
    SubmissionValidationError,
)
from clubforms.logging import configure_logging, get_logger
from clubforms.settings import Settings, get_settings

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger("clubforms")

__all__ = [
    "DependencyError",
    "DocumentStoreError",
    "PackageError",
    "PermissionDeniedError",
    "SchemaStoreError",
    "Settings",
    "SettingsError",
    "StorageError",
    "SubmissionValidationError",
    "__version__",
    "configure_logging",
    "get_logger",
    "get_settings",
    "logger",
]
