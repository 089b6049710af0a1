"""Response map and submission record models."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from clubforms.typing.enums import SubmissionStatus
from clubforms.typing.models.fields import FieldDescriptor, SchemaCarrierModel


class FileUpload(BaseModel):
    """Raw file chosen in a file input, not uploaded yet."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    file_name: str = Field(min_length=1)
    content: bytes = Field(repr=False)
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        """Return the file size in bytes."""
        return len(self.content)


class FileReference(BaseModel):
    """Uploaded file as stored on a submission record."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True, alias_generator=to_camel)

    file_name: str
    file_url: str
    file_size: int | None = None
    file_type: str | None = None
    public_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("publicId", "cloudinaryPublicId", "public_id"),
        serialization_alias="publicId",
    )


ResponseValue = str | list[str] | FileUpload | FileReference
ResponseMap = dict[str, ResponseValue]
AnswerValue = str | list[str] | FileReference


class SubmissionRecord(SchemaCarrierModel):
    """Finalized registration of one visitor.

    `form_schema` is a full copy of the schema the visitor filled in, so records
    stay readable after the activity's live schema changes. `form_version` keeps
    the activity timestamp for compatibility with older records.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True, alias_generator=to_camel)

    id: str | None = None
    activity_id: str
    activity_title: str
    submitted_at: datetime
    status: SubmissionStatus
    answers: dict[str, AnswerValue] = Field(default_factory=dict)
    form_version: str | None = None
    form_schema: tuple[FieldDescriptor, ...] = ()
    updated_at: datetime | None = None
    updated_by: str | None = None

    @field_validator("answers", mode="before")
    @classmethod
    def _coerce_file_answers(cls, value: Any) -> Any:
        """Read file references stored as plain mappings.

        Args:
            value (Any): Raw answers payload.

        Returns:
            Any: Answers with file reference mappings parsed.
        """
        if not isinstance(value, dict):
            return value
        coerced: dict[str, Any] = {}
        for key, item in value.items():
            if isinstance(item, dict) and "fileUrl" in item:
                coerced[key] = FileReference.model_validate(item)
            else:
                coerced[key] = item
        return coerced

    def to_document(self) -> dict[str, Any]:
        """Serialize for the document store (without the document id).

        Returns:
            dict[str, Any]: camelCase JSON payload.
        """
        payload = self.model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True,
            exclude={"id", "form_schema", "answers"},
        )
        payload["answers"] = {key: _answer_payload(value) for key, value in self.answers.items()}
        payload["formSchema"] = [field.to_payload() for field in self.form_schema]
        return payload

    def flat_row(self) -> dict[str, str]:
        """Return a flat string view used for exports and tables.

        Returns:
            dict[str, str]: Metadata columns followed by one column per answer.
        """
        row = {
            "id": self.id or "",
            "activityId": self.activity_id,
            "activityTitle": self.activity_title,
            "submittedAt": self.submitted_at.isoformat(),
            "status": self.status.value,
            "formVersion": self.form_version or "",
        }
        if self.updated_at is not None:
            row["updatedAt"] = self.updated_at.isoformat()
        if self.updated_by is not None:
            row["updatedBy"] = self.updated_by
        for key, value in self.answers.items():
            row.setdefault(key, answer_to_text(value))
        return row


def _answer_payload(value: AnswerValue) -> Any:
    if isinstance(value, FileReference):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    return value


def answer_to_text(value: AnswerValue | None) -> str:
    """Render one answer as a single text cell.

    Args:
        value (AnswerValue | None): Stored answer.

    Returns:
        str: File URL for files, JSON for lists, the string otherwise.
    """
    if value is None:
        return ""
    if isinstance(value, FileReference):
        return value.file_url
    if isinstance(value, list):
        return json.dumps(value, ensure_ascii=False)
    return value
