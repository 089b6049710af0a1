"""Required-field validation and submission packaging."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from clubforms import logger
from clubforms.exceptions import PackageError, SubmissionValidationError
from clubforms.fields import default_form_schema
from clubforms.notifications import REGISTRATION_FAILED, REGISTRATION_SUBMITTED, describe_failure, success
from clubforms.typing.enums import MediaFolder, SubmissionStatus
from clubforms.typing.models import (
    AnswerValue,
    ChoiceField,
    FieldDescriptor,
    FileField,
    FileReference,
    FileUpload,
    SubmissionRecord,
)

if TYPE_CHECKING:
    from clubforms.rendering.public import PublicForm
    from clubforms.typing.models import Activity, Notification, ResponseMap, ResponseValue
    from clubforms.typing.protocol import DocumentStore, ObjectStorage


def find_missing_required(schema: Iterable[FieldDescriptor], responses: Mapping[str, ResponseValue]) -> list[str]:
    """List the labels of required inputs that are not filled in.

    Strings must be non-empty, checkbox answers must select at least one
    option and file answers must hold a file. Content fields are skipped
    whatever their `required` flag says.

    Args:
        schema (Iterable[FieldDescriptor]): Form schema in display order.
        responses (Mapping[str, ResponseValue]): Captured values by field id.

    Returns:
        list[str]: Labels of the failing fields, in schema order.
    """
    missing: list[str] = []
    for descriptor in schema:
        if descriptor.is_content or not descriptor.required:
            continue
        if not _is_filled(descriptor, responses.get(descriptor.id)):
            missing.append(descriptor.label or descriptor.id)
    return missing


def _is_filled(descriptor: FieldDescriptor, value: ResponseValue | None) -> bool:
    match descriptor:
        case ChoiceField(multiple=True):
            return isinstance(value, list) and len(value) > 0
        case FileField():
            return isinstance(value, FileUpload | FileReference)
        case _:
            return isinstance(value, str) and value != ""


def submission_status(activity: Activity) -> SubmissionStatus:
    """Return the initial status of a registration for `activity`.

    Args:
        activity (Activity): Activity being registered for.

    Returns:
        SubmissionStatus: `pending_payment` for paid activities, `confirmed` otherwise.
    """
    return SubmissionStatus.PENDING_PAYMENT if activity.is_paid else SubmissionStatus.CONFIRMED


def upload_folder(activity: Activity) -> str:
    """Return the storage folder receiving files attached to `activity` registrations.

    Args:
        activity (Activity): Activity being registered for.

    Returns:
        str: Folder path relative to the media root.
    """
    return f"{MediaFolder.FORM_REGISTER.value}/{activity.title}"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SubmissionPackager:
    """Turn a validated response map into a stored submission record."""

    def __init__(
        self,
        storage: ObjectStorage,
        documents: DocumentStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Bind the packager to its collaborators.

        Args:
            storage (ObjectStorage): Receives file answers.
            documents (DocumentStore): Receives the submission record.
            clock (Callable[[], datetime]): Source of the submission timestamp.
        """
        self._storage = storage
        self._documents = documents
        self._clock = clock

    def validate(self, activity: Activity, responses: Mapping[str, ResponseValue]) -> None:
        """Reject a response map with missing required inputs.

        Args:
            activity (Activity): Activity whose schema applies.
            responses (Mapping[str, ResponseValue]): Captured values.

        Raises:
            SubmissionValidationError: If required inputs are missing.
        """
        missing = find_missing_required(_schema_of(activity), responses)
        if missing:
            raise SubmissionValidationError(missing_labels=missing)

    def submit(self, activity: Activity, responses: Mapping[str, ResponseValue]) -> SubmissionRecord:
        """Validate, upload file answers, then store the submission record.

        Validation happens before any upload, and a failed upload aborts the
        whole submission, so no partial record is ever written.

        Args:
            activity (Activity): Activity being registered for.
            responses (Mapping[str, ResponseValue]): Captured values.

        Raises:
            SubmissionValidationError: If required inputs are missing.
            StorageError: If a file upload fails.
            DocumentStoreError: If the record cannot be stored.

        Returns:
            SubmissionRecord: Stored record with its id.
        """
        schema = _schema_of(activity)
        self.validate(activity, responses)
        answers = self._collect_answers(schema, activity, responses)

        record = SubmissionRecord(
            activity_id=activity.id,
            activity_title=activity.title,
            submitted_at=self._clock(),
            status=submission_status(activity),
            answers=answers,
            form_version=activity.form_version,
            form_schema=schema,
        )
        record_id = self._documents.add_registration(record)
        logger.info(
            "Registration stored",
            extra={"activity_id": activity.id, "registration_id": record_id, "status": record.status.value},
        )
        return record.model_copy(update={"id": record_id})

    def _collect_answers(
        self,
        schema: Iterable[FieldDescriptor],
        activity: Activity,
        responses: Mapping[str, ResponseValue],
    ) -> dict[str, AnswerValue]:
        """Keep the answers of the schema's inputs, uploading raw files.

        Keys outside the schema, content fields, and files sent to non-file
        fields are dropped.

        Args:
            schema (Iterable[FieldDescriptor]): Schema the visitor filled in.
            activity (Activity): Activity being registered for.
            responses (Mapping[str, ResponseValue]): Captured values.

        Returns:
            dict[str, AnswerValue]: Answers by field id, in schema order.
        """
        answers: dict[str, AnswerValue] = {}
        folder = upload_folder(activity)
        for descriptor in schema:
            field_id = descriptor.id
            value = responses.get(field_id)
            if descriptor.is_content or value is None:
                continue
            if not isinstance(value, FileUpload):
                answers[field_id] = value
                continue
            if not isinstance(descriptor, FileField):
                continue
            asset = self._storage.upload(value, folder)
            answers[field_id] = FileReference(
                file_name=value.file_name,
                file_url=asset.url,
                file_size=value.size,
                file_type=value.content_type,
                public_id=asset.public_id,
            )
            logger.debug("Registration file uploaded", extra={"field_id": field_id, "public_id": asset.public_id})
        return answers


def _schema_of(activity: Activity) -> tuple[FieldDescriptor, ...]:
    return activity.form_schema or tuple(default_form_schema())


def submit_registration(packager: SubmissionPackager, activity: Activity, form: PublicForm) -> Notification:
    """Submit the visitor's form and report the outcome.

    The form is cleared on success and left untouched on failure so the
    visitor can correct it and resubmit.

    Args:
        packager (SubmissionPackager): Configured packager.
        activity (Activity): Activity being registered for.
        form (PublicForm): Form holding the visitor's responses.

    Returns:
        Notification: Outcome shown to the visitor.
    """
    responses: ResponseMap = dict(form.responses)
    try:
        packager.submit(activity, responses)
    except SubmissionValidationError as exc:
        logger.info("Registration rejected", extra={"activity_id": activity.id, "missing": exc.missing_labels})
        return describe_failure(exc, REGISTRATION_FAILED)
    except PackageError as exc:
        logger.exception("Registration failed", extra={"activity_id": activity.id})
        return describe_failure(exc, REGISTRATION_FAILED)
    form.clear()
    return success(REGISTRATION_SUBMITTED)
