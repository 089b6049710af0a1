from __future__ import annotations

from datetime import UTC, datetime

import pytest

from clubforms.activities import (
    ActivityBoard,
    ActivityDraft,
    ActivityService,
    change_submission_status,
    remove_submission,
)
from clubforms.exceptions import ActivityValidationError, DocumentStoreError, PermissionDeniedError
from clubforms.fields import default_form_schema
from clubforms.notifications import (
    ACTIVITY_DELETE_FAILED,
    ACTIVITY_SAVED,
    LOGIN_REQUIRED,
    NOT_AUTHENTICATED,
    PERMISSION_DENIED,
    STATUS_UPDATED,
    SUBMISSION_DELETED,
    SUBMISSIONS_UNAVAILABLE,
)
from clubforms.typing.enums import SubmissionStatus
from clubforms.typing.models import Activity, SubmissionRecord, TextField


def _draft(**overrides: object) -> ActivityDraft:
    payload: dict[str, object] = {
        "title": "Hack Night",
        "description": "Build things",
        "registrationStart": "2024-03-01T00:00:00+00:00",
        "registrationEnd": "2024-03-10T00:00:00+00:00",
        "eventDate": "2024-03-15T18:00:00+00:00",
    }
    payload.update(overrides)
    return ActivityDraft.model_validate(payload)


def _seed_registration(documents, activity_id: str, title: str = "Hack Night") -> str:
    record = SubmissionRecord(
        activity_id=activity_id,
        activity_title=title,
        submitted_at=datetime(2024, 3, 2, tzinfo=UTC),
        status=SubmissionStatus.PENDING_PAYMENT,
        answers={"name": "Asha"},
    )
    return documents.add_registration(record)


def test_draft_treats_blank_inputs_as_unset() -> None:
    draft = ActivityDraft.model_validate({"title": "T", "registrationStart": "", "maxParticipants": "", "fee": ""})

    assert draft.registration_start is None
    assert draft.max_participants is None
    assert draft.fee is None
    assert draft.form_schema == default_form_schema()


def test_draft_missing_fields_use_display_names() -> None:
    assert ActivityDraft().missing_fields() == [
        "Title",
        "Description",
        "Registration Start",
        "Registration End",
        "Event Date",
    ]
    assert _draft().missing_fields() == []


def test_draft_from_activity_prefills_schema() -> None:
    activity = Activity(id="a1", title="T", form_schema=(TextField(id="x", kind="text"),))

    assert [field.id for field in ActivityDraft.from_activity(activity).form_schema] == ["x"]
    assert ActivityDraft.from_activity(Activity(id="a2", title="T")).form_schema == default_form_schema()


def test_check_draft_validates_then_requires_admin(documents) -> None:
    service = ActivityService(documents)

    with pytest.raises(ActivityValidationError):
        service.check_draft(_draft(title=""), admin_id="admin-1")
    with pytest.raises(PermissionDeniedError) as exc_info:
        service.check_draft(_draft(), admin_id=None)
    assert exc_info.value.code == "unauthenticated"


def test_save_new_activity(documents, fixed_clock) -> None:
    service = ActivityService(documents, clock=fixed_clock)

    activity = service.save_activity(_draft(formSchema=[]), admin_id="admin-1")

    assert activity.id == "act-1"
    assert activity.created_at == fixed_clock()
    assert activity.updated_at == fixed_clock()
    assert [field.id for field in activity.form_schema] == ["name", "rollNo", "email", "phone", "year", "branch"]
    assert documents.activities["act-1"]["title"] == "Hack Night"
    assert documents.activities["act-1"]["formSchema"][0]["id"] == "name"


def test_save_existing_activity_keeps_identity(documents, fixed_clock) -> None:
    created = datetime(2024, 1, 1, tzinfo=UTC)
    existing = Activity(id="act-9", title="Old", created_at=created)
    documents.activities["act-9"] = existing.to_document()
    service = ActivityService(documents, clock=fixed_clock)

    saved = service.save_activity(_draft(), existing, admin_id="admin-1")

    assert saved.id == "act-9"
    assert saved.created_at == created
    assert saved.updated_at == fixed_clock()
    assert documents.calls == ["update_activity"]
    assert documents.activities["act-9"]["title"] == "Hack Night"


def test_delete_activity_removes_registrations_first(documents) -> None:
    activity_id = documents.create_activity(Activity(id="x", title="Hack Night").to_document())
    registration_id = _seed_registration(documents, activity_id)
    other = _seed_registration(documents, "act-other", "Other")

    removed = ActivityService(documents).delete_activity(activity_id)

    assert removed == 1
    assert documents.calls[-2:] == ["delete_registrations", "delete_activity"]
    assert registration_id not in documents.all_registrations
    assert other in documents.all_registrations
    assert activity_id not in documents.activities


def test_submission_groups_by_activity(documents) -> None:
    activity_id = documents.create_activity(Activity(id="x", title="Hack Night").to_document())
    _seed_registration(documents, activity_id)

    groups = ActivityService(documents).submission_groups()

    assert len(groups) == 1
    assert groups[0].title == "Hack Night"
    assert groups[0].activity is not None
    assert len(groups[0].registrations) == 1


def test_submission_groups_fall_back_to_flat_collection(documents) -> None:
    _seed_registration(documents, "act-1", "Hack Night")
    _seed_registration(documents, "act-2", "")
    _seed_registration(documents, "act-1", "Hack Night")
    documents.failures["list_activities"] = PermissionDeniedError()

    groups = ActivityService(documents).submission_groups()

    assert [(group.activity_id, group.title, len(group.registrations)) for group in groups] == [
        ("act-1", "Hack Night", 2),
        ("act-2", "Unknown Activity", 1),
    ]


def test_submission_groups_fail_when_both_sources_fail(documents) -> None:
    documents.failures["list_activities"] = PermissionDeniedError()
    documents.failures["list_all_registrations"] = PermissionDeniedError()

    with pytest.raises(DocumentStoreError) as exc_info:
        ActivityService(documents).submission_groups()

    assert str(exc_info.value) == SUBMISSIONS_UNAVAILABLE
    assert exc_info.value.code == "permission-denied"


def test_update_submission_status_stamps_admin(documents, fixed_clock) -> None:
    registration_id = _seed_registration(documents, "act-1")

    ActivityService(documents, clock=fixed_clock).update_submission_status(
        "act-1",
        registration_id,
        "confirmed",
        admin_id="admin-1",
    )

    stored = documents.registrations["act-1"][registration_id]
    assert stored["status"] == "confirmed"
    assert stored["updatedBy"] == "admin-1"
    assert stored["updatedAt"] == fixed_clock().isoformat()


def test_update_submission_status_falls_back_to_flat_collection(documents) -> None:
    registration_id = _seed_registration(documents, "act-1")
    documents.failures["update_registration"] = DocumentStoreError(message="not found", code="not-found")

    ActivityService(documents).update_submission_status("act-1", registration_id, "confirmed", admin_id="admin-1")

    assert documents.all_registrations[registration_id]["status"] == "confirmed"
    assert documents.calls[-1] == "update_registration_flat"


def test_change_submission_status_notifications(documents) -> None:
    registration_id = _seed_registration(documents, "act-1")
    service = ActivityService(documents)

    assert change_submission_status(service, "act-1", registration_id, "confirmed", admin_id=None).message == (
        NOT_AUTHENTICATED
    )
    assert change_submission_status(service, "act-1", registration_id, "confirmed", admin_id="a").message == (
        STATUS_UPDATED
    )


def test_remove_submission_reports_permission_denied(documents) -> None:
    registration_id = _seed_registration(documents, "act-1")
    service = ActivityService(documents)
    documents.failures["delete_registration"] = PermissionDeniedError()

    denied = remove_submission(service, "act-1", registration_id, admin_id="admin-1")
    assert denied.message == PERMISSION_DENIED
    assert denied.retryable is True

    del documents.failures["delete_registration"]
    assert remove_submission(service, "act-1", registration_id, admin_id="admin-1").message == SUBMISSION_DELETED
    assert registration_id not in documents.all_registrations


def test_board_save_is_optimistic(documents, fixed_clock) -> None:
    board = ActivityBoard(ActivityService(documents, clock=fixed_clock))

    notification = board.save(_draft(), admin_id="admin-1")

    assert notification.message == ACTIVITY_SAVED
    assert [activity.id for activity in board.activities] == ["act-1"]


def test_board_save_rolls_back_on_failure(documents) -> None:
    existing = Activity(id="act-0", title="Existing")
    board = ActivityBoard(ActivityService(documents), [existing])
    documents.failures["create_activity"] = DocumentStoreError(message="quota exceeded")

    notification = board.save(_draft(), admin_id="admin-1")

    assert notification.message == "Error: quota exceeded"
    assert board.activities == [existing]


def test_board_save_rejects_invalid_draft_without_writing(documents) -> None:
    board = ActivityBoard(ActivityService(documents))

    missing = board.save(_draft(description=""), admin_id="admin-1")
    anonymous = board.save(_draft(), admin_id=None)

    assert missing.missing_fields == ["Description"]
    assert anonymous.message == LOGIN_REQUIRED
    assert documents.calls == []
    assert board.activities == []


def test_board_delete_rolls_back_on_failure(documents) -> None:
    activity_id = documents.create_activity(Activity(id="x", title="Hack Night").to_document())
    board = ActivityBoard(ActivityService(documents))
    board.refresh()
    documents.failures["delete_activity"] = DocumentStoreError(message="offline")

    notification = board.delete(activity_id)

    assert notification.message == ACTIVITY_DELETE_FAILED
    assert [activity.id for activity in board.activities] == [activity_id]
