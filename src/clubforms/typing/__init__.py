"""Typing-centric domain modules."""

from clubforms.typing.enums import (
    Alignment,
    ButtonStyle,
    FieldCategory,
    FieldKind,
    FontSize,
    ImageSize,
    ImageSourceMode,
    MediaFolder,
    MediaFolderUi,
    MoveDirection,
    NotificationLevel,
    SubmissionStatus,
)
from clubforms.typing.protocol import DocumentStore, MediaSearch, MediaStorage, ObjectStorage

__all__ = [
    "Alignment",
    "ButtonStyle",
    "DocumentStore",
    "FieldCategory",
    "FieldKind",
    "FontSize",
    "ImageSize",
    "ImageSourceMode",
    "MediaFolder",
    "MediaFolderUi",
    "MediaSearch",
    "MediaStorage",
    "MoveDirection",
    "NotificationLevel",
    "ObjectStorage",
    "SubmissionStatus",
]
