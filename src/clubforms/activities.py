"""Activity authoring and admin submission management."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from clubforms import logger
from clubforms.exceptions import ActivityValidationError, DocumentStoreError, PackageError, PermissionDeniedError
from clubforms.fields import default_form_schema
from clubforms.notifications import (
    ACTIVITY_DELETE_FAILED,
    ACTIVITY_DELETED,
    ACTIVITY_SAVE_FAILED,
    ACTIVITY_SAVED,
    LOGIN_REQUIRED,
    NOT_AUTHENTICATED,
    STATUS_UPDATE_FAILED,
    STATUS_UPDATED,
    SUBMISSION_DELETE_FAILED,
    SUBMISSION_DELETED,
    SUBMISSIONS_UNAVAILABLE,
    UNAUTHENTICATED_CODE,
    describe_failure,
    success,
)
from clubforms.typing.enums import SubmissionStatus
from clubforms.typing.models import Activity, FieldDescriptor, Notification, PaymentDetails, SubmissionRecord
from clubforms.typing.models.fields import SchemaCarrierModel

if TYPE_CHECKING:
    from clubforms.typing.protocol import DocumentStore

_REQUIRED_METADATA: tuple[tuple[str, str], ...] = (
    ("title", "Title"),
    ("description", "Description"),
    ("registration_start", "Registration Start"),
    ("registration_end", "Registration End"),
    ("event_date", "Event Date"),
)

UNKNOWN_ACTIVITY_TITLE = "Unknown Activity"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ActivityDraft(SchemaCarrierModel):
    """Activity form as filled in by an admin, before validation."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)

    title: str = ""
    description: str = ""
    registration_start: datetime | None = None
    registration_end: datetime | None = None
    event_date: datetime | None = None
    max_participants: int | None = Field(default=None, ge=1)
    is_paid: bool = False
    fee: float | None = Field(default=None, ge=0)
    payment_details: PaymentDetails = Field(default_factory=PaymentDetails)
    form_schema: list[FieldDescriptor] = Field(default_factory=default_form_schema)

    @field_validator(
        "registration_start",
        "registration_end",
        "event_date",
        "max_participants",
        "fee",
        mode="before",
    )
    @classmethod
    def _blank_as_none(cls, value: object) -> object:
        """Treat blank form inputs as unset.

        Args:
            value (object): Raw value.

        Returns:
            object: None for blank strings, the value otherwise.
        """
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def from_activity(cls, activity: Activity) -> ActivityDraft:
        """Prefill a draft for editing an existing activity.

        Args:
            activity (Activity): Stored activity.

        Returns:
            ActivityDraft: Editable copy.
        """
        return cls(
            title=activity.title,
            description=activity.description,
            registration_start=activity.registration_start,
            registration_end=activity.registration_end,
            event_date=activity.event_date,
            max_participants=activity.max_participants,
            is_paid=activity.is_paid,
            fee=activity.fee,
            payment_details=activity.payment_details,
            form_schema=list(activity.form_schema) or default_form_schema(),
        )

    def missing_fields(self) -> list[str]:
        """Return the display names of missing required metadata."""
        return [label for name, label in _REQUIRED_METADATA if not getattr(self, name)]


class SubmissionGroup(BaseModel):
    """Registrations of one activity as listed on the admin page."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    activity_id: str
    title: str
    activity: Activity | None = None
    registrations: list[SubmissionRecord] = Field(default_factory=list)


class ActivityService:
    """Activity and registration operations on top of a `DocumentStore`."""

    def __init__(self, documents: DocumentStore, clock: Callable[[], datetime] = _utcnow) -> None:
        """Bind the service to a document store.

        Args:
            documents (DocumentStore): Hosted document store.
            clock (Callable[[], datetime]): Source of timestamps.
        """
        self.documents = documents
        self._clock = clock

    def list_activities(self) -> list[Activity]:
        """Return every stored activity."""
        return self.documents.list_activities()

    def check_draft(self, draft: ActivityDraft, *, admin_id: str | None) -> None:
        """Reject drafts that cannot be saved.

        Args:
            draft (ActivityDraft): Draft to check.
            admin_id (str | None): Signed-in admin, if any.

        Raises:
            ActivityValidationError: If required metadata is missing.
            PermissionDeniedError: If nobody is signed in.
        """
        missing = draft.missing_fields()
        if missing:
            raise ActivityValidationError(missing=missing)
        if not admin_id:
            raise PermissionDeniedError(message=LOGIN_REQUIRED, code=UNAUTHENTICATED_CODE)

    def build_activity(self, draft: ActivityDraft, editing: Activity | None = None) -> Activity:
        """Assemble the activity a draft will be saved as.

        An empty draft schema falls back to the default registration schema.

        Args:
            draft (ActivityDraft): Checked draft.
            editing (Activity | None): Activity being edited, None for a new one.

        Returns:
            Activity: Activity stamped with creation and update times.
        """
        now = self._clock()
        schema = draft.form_schema or default_form_schema()
        return Activity(
            id=editing.id if editing else f"pending-{uuid4().hex}",
            title=draft.title,
            description=draft.description,
            registration_start=draft.registration_start,
            registration_end=draft.registration_end,
            event_date=draft.event_date,
            max_participants=draft.max_participants,
            is_paid=draft.is_paid,
            fee=draft.fee,
            payment_details=draft.payment_details,
            form_schema=tuple(schema),
            created_at=editing.created_at if editing and editing.created_at else now,
            updated_at=now,
        )

    def persist(self, activity: Activity, *, editing: bool) -> Activity:
        """Write an assembled activity.

        Args:
            activity (Activity): Activity from `build_activity`.
            editing (bool): Whether the activity already exists.

        Returns:
            Activity: Stored activity with its document id.
        """
        document = activity.to_document()
        if editing:
            self.documents.update_activity(activity.id, document)
            logger.info("Activity updated", extra={"activity_id": activity.id})
            return activity
        activity_id = self.documents.create_activity(document)
        logger.info("Activity created", extra={"activity_id": activity_id})
        return activity.model_copy(update={"id": activity_id})

    def save_activity(
        self,
        draft: ActivityDraft,
        editing: Activity | None = None,
        *,
        admin_id: str | None,
    ) -> Activity:
        """Check, assemble and store an activity.

        Args:
            draft (ActivityDraft): Filled-in draft.
            editing (Activity | None): Activity being edited, None for a new one.
            admin_id (str | None): Signed-in admin.

        Returns:
            Activity: Stored activity.
        """
        self.check_draft(draft, admin_id=admin_id)
        return self.persist(self.build_activity(draft, editing), editing=editing is not None)

    def delete_activity(self, activity_id: str) -> int:
        """Delete an activity after all of its registrations.

        Args:
            activity_id (str): Activity to delete.

        Returns:
            int: Number of registrations removed.
        """
        removed = self.documents.delete_registrations(activity_id)
        self.documents.delete_activity(activity_id)
        logger.info("Activity deleted", extra={"activity_id": activity_id, "registrations_removed": removed})
        return removed

    def submission_groups(self) -> list[SubmissionGroup]:
        """Return every activity with its registrations.

        When the activities cannot be listed, registrations of the flat
        collection are grouped by activity instead.

        Raises:
            DocumentStoreError: If both sources fail.

        Returns:
            list[SubmissionGroup]: One group per activity.
        """
        try:
            activities = self.documents.list_activities()
        except DocumentStoreError:
            logger.warning("Listing activities failed, grouping flat registrations instead")
            return self._groups_from_flat_collection()

        groups: list[SubmissionGroup] = []
        for activity in activities:
            try:
                registrations = self.documents.list_registrations(activity.id)
            except DocumentStoreError:
                logger.warning("Listing registrations failed", extra={"activity_id": activity.id})
                registrations = []
            groups.append(
                SubmissionGroup(
                    activity_id=activity.id,
                    title=activity.title,
                    activity=activity,
                    registrations=registrations,
                ),
            )
        return groups

    def _groups_from_flat_collection(self) -> list[SubmissionGroup]:
        try:
            records = self.documents.list_all_registrations()
        except DocumentStoreError as exc:
            raise DocumentStoreError(message=SUBMISSIONS_UNAVAILABLE, code=exc.code) from exc

        grouped: dict[str, list[SubmissionRecord]] = {}
        titles: dict[str, str] = {}
        for record in records:
            grouped.setdefault(record.activity_id, []).append(record)
            titles.setdefault(record.activity_id, record.activity_title or UNKNOWN_ACTIVITY_TITLE)
        return [
            SubmissionGroup(activity_id=activity_id, title=titles[activity_id], registrations=registrations)
            for activity_id, registrations in grouped.items()
        ]

    def update_submission_status(
        self,
        activity_id: str,
        registration_id: str,
        status: SubmissionStatus | str,
        *,
        admin_id: str | None,
    ) -> None:
        """Change a registration's status, stamping who changed it and when.

        The registration under the activity is updated first; the flat
        collection copy is the fallback.

        Args:
            activity_id (str): Owning activity.
            registration_id (str): Registration to update.
            status (SubmissionStatus | str): New status.
            admin_id (str | None): Signed-in admin.

        Raises:
            PermissionDeniedError: If nobody is signed in.
        """
        if not admin_id:
            raise PermissionDeniedError(message=NOT_AUTHENTICATED, code=UNAUTHENTICATED_CODE)
        updates = {
            "status": SubmissionStatus.from_str(str(status)).value,
            "updatedAt": self._clock().isoformat(),
            "updatedBy": admin_id,
        }
        try:
            self.documents.update_registration(activity_id, registration_id, updates)
        except DocumentStoreError:
            logger.warning(
                "Updating activity registration failed, trying flat collection",
                extra={"activity_id": activity_id, "registration_id": registration_id},
            )
            self.documents.update_registration(activity_id, registration_id, updates, flat=True)

    def delete_submission(self, activity_id: str, registration_id: str, *, admin_id: str | None) -> None:
        """Delete one registration.

        Args:
            activity_id (str): Owning activity.
            registration_id (str): Registration to delete.
            admin_id (str | None): Signed-in admin.

        Raises:
            PermissionDeniedError: If nobody is signed in.
        """
        if not admin_id:
            raise PermissionDeniedError(message=NOT_AUTHENTICATED, code=UNAUTHENTICATED_CODE)
        self.documents.delete_registration(activity_id, registration_id)
        logger.info("Registration deleted", extra={"activity_id": activity_id, "registration_id": registration_id})


class ActivityBoard:
    """Optimistic activity list shown to admins.

    Saves and deletes show up in `activities` immediately and are rolled back
    when the store rejects them.
    """

    def __init__(self, service: ActivityService, activities: Iterable[Activity] = ()) -> None:
        """Bind the board to a service.

        Args:
            service (ActivityService): Activity operations.
            activities (Iterable[Activity]): Initially known activities.
        """
        self.service = service
        self.activities: list[Activity] = list(activities)

    def refresh(self) -> list[Activity]:
        """Reload the activities from the store.

        Returns:
            list[Activity]: Current activities.
        """
        self.activities = self.service.list_activities()
        return self.activities

    def save(self, draft: ActivityDraft, *, editing: Activity | None = None, admin_id: str | None) -> Notification:
        """Save a draft optimistically.

        Args:
            draft (ActivityDraft): Filled-in draft.
            editing (Activity | None): Activity being edited.
            admin_id (str | None): Signed-in admin.

        Returns:
            Notification: Outcome shown to the admin.
        """
        try:
            self.service.check_draft(draft, admin_id=admin_id)
        except PackageError as exc:
            return describe_failure(exc, ACTIVITY_SAVE_FAILED)

        previous = list(self.activities)
        optimistic = self.service.build_activity(draft, editing)
        if editing is None:
            self.activities = [*self.activities, optimistic]
        else:
            self.activities = [optimistic if item.id == editing.id else item for item in self.activities]

        try:
            stored = self.service.persist(optimistic, editing=editing is not None)
        except PackageError as exc:
            logger.exception("Saving activity failed", extra={"activity_id": optimistic.id})
            self.activities = previous
            return describe_failure(exc, ACTIVITY_SAVE_FAILED, include_detail=True)

        self.activities = [stored if item.id == optimistic.id else item for item in self.activities]
        return success(ACTIVITY_SAVED)

    def delete(self, activity_id: str) -> Notification:
        """Delete an activity optimistically.

        Args:
            activity_id (str): Activity to delete.

        Returns:
            Notification: Outcome shown to the admin.
        """
        previous = list(self.activities)
        self.activities = [item for item in self.activities if item.id != activity_id]
        try:
            self.service.delete_activity(activity_id)
        except PackageError as exc:
            logger.exception("Deleting activity failed", extra={"activity_id": activity_id})
            self.activities = previous
            return describe_failure(exc, ACTIVITY_DELETE_FAILED)
        return success(ACTIVITY_DELETED)


def change_submission_status(
    service: ActivityService,
    activity_id: str,
    registration_id: str,
    status: SubmissionStatus | str,
    *,
    admin_id: str | None,
) -> Notification:
    """Update a registration's status and report the outcome.

    Args:
        service (ActivityService): Activity operations.
        activity_id (str): Owning activity.
        registration_id (str): Registration to update.
        status (SubmissionStatus | str): New status.
        admin_id (str | None): Signed-in admin.

    Returns:
        Notification: Outcome shown to the admin.
    """
    try:
        service.update_submission_status(activity_id, registration_id, status, admin_id=admin_id)
    except PackageError as exc:
        logger.exception("Updating registration status failed", extra={"registration_id": registration_id})
        return describe_failure(exc, STATUS_UPDATE_FAILED)
    return success(STATUS_UPDATED)


def remove_submission(
    service: ActivityService,
    activity_id: str,
    registration_id: str,
    *,
    admin_id: str | None,
) -> Notification:
    """Delete a registration and report the outcome.

    Args:
        service (ActivityService): Activity operations.
        activity_id (str): Owning activity.
        registration_id (str): Registration to delete.
        admin_id (str | None): Signed-in admin.

    Returns:
        Notification: Outcome shown to the admin.
    """
    try:
        service.delete_submission(activity_id, registration_id, admin_id=admin_id)
    except PackageError as exc:
        logger.exception("Deleting registration failed", extra={"registration_id": registration_id})
        return describe_failure(exc, SUBMISSION_DELETE_FAILED)
    return success(SUBMISSION_DELETED)
