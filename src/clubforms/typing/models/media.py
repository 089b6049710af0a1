"""Media asset models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from clubforms.typing.enums import MediaFolderUi


class UploadedAsset(BaseModel):
    """Result of one upload to the object storage."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    public_id: str
    url: str
    folder: str | None = None
    size: int | None = None
    width: int | None = None
    height: int | None = None
    format: str | None = None


class MediaAsset(BaseModel):
    """Image listed by the admin media browser."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    public_id: str
    url: str
    name: str
    folder: MediaFolderUi = MediaFolderUi.GENERAL
    original_folder: str = "general"
    size: int | None = Field(default=None, ge=0)
    width: int | None = None
    height: int | None = None
    format: str | None = None
    created_at: datetime | None = None
