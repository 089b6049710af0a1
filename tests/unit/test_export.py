from __future__ import annotations

import csv
import io
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from clubforms.exceptions import ExportError
from clubforms.export import (
    NO_SUBMISSIONS_MESSAGE,
    export_columns,
    export_filename,
    export_submissions_csv,
    write_submissions_csv,
)
from clubforms.typing.enums import SubmissionStatus
from clubforms.typing.models import FileReference, SubmissionRecord

if TYPE_CHECKING:
    from pathlib import Path


def _record(record_id: str, answers: dict[str, object], **extra: object) -> SubmissionRecord:
    return SubmissionRecord(
        id=record_id,
        activity_id="act-1",
        activity_title="Tech Fest 2024",
        submitted_at=datetime(2024, 3, 1, 10, 30, tzinfo=UTC),
        status=SubmissionStatus.CONFIRMED,
        answers=answers,
        **extra,
    )


def test_export_columns_keep_first_seen_answer_order() -> None:
    rows = [
        _record("r1", {"name": "A", "email": "a@x"}).flat_row(),
        _record("r2", {"phone": "1", "name": "B"}).flat_row(),
    ]

    assert export_columns(rows) == [
        "id",
        "activityId",
        "activityTitle",
        "submittedAt",
        "status",
        "formVersion",
        "name",
        "email",
        "phone",
    ]


def test_export_round_trips_through_csv_reader() -> None:
    records = [
        _record("r1", {"name": 'Smith, "JJ"', "skills": ["Python", "Go"]}),
        _record(
            "r2",
            {"name": "Line\nBreak", "cv": FileReference(file_name="cv.pdf", file_url="https://cdn.test/cv.pdf")},
        ),
    ]

    content = export_submissions_csv(records)
    rows = list(csv.DictReader(io.StringIO(content, newline="")))

    assert content.startswith("id,activityId,activityTitle,submittedAt,status,formVersion,name,skills,cv\r\n")
    assert rows[0]["name"] == 'Smith, "JJ"'
    assert rows[0]["skills"] == '["Python", "Go"]'
    assert rows[0]["cv"] == ""
    assert rows[1]["name"] == "Line\nBreak"
    assert rows[1]["cv"] == "https://cdn.test/cv.pdf"
    assert rows[1]["skills"] == ""
    assert rows[0]["submittedAt"] == "2024-03-01T10:30:00+00:00"


def test_export_adds_update_columns_when_present() -> None:
    records = [
        _record("r1", {"name": "A"}),
        _record("r2", {"name": "B"}, updated_by="admin-1", updated_at=datetime(2024, 3, 2, tzinfo=UTC)),
    ]

    header = export_submissions_csv(records).splitlines()[0].split(",")

    assert header[6:8] == ["updatedAt", "updatedBy"]
    assert header[-1] == "name"


def test_export_without_records_fails() -> None:
    with pytest.raises(ExportError, match=NO_SUBMISSIONS_MESSAGE):
        export_submissions_csv([])


def test_export_filename_replaces_whitespace() -> None:
    assert export_filename("Tech  Fest\t2024") == "Tech_Fest_2024_submissions.csv"


def test_write_submissions_csv_into_directory(tmp_path: Path) -> None:
    path = write_submissions_csv([_record("r1", {"name": "A"})], tmp_path)

    assert path == tmp_path / "Tech_Fest_2024_submissions.csv"
    assert path.read_bytes().count(b"\r\n") == 2


def test_write_submissions_csv_to_file(tmp_path: Path) -> None:
    target = tmp_path / "out" / "export.csv"

    path = write_submissions_csv([_record("r1", {"name": "A"})], target)

    assert path == target
    assert "r1" in target.read_text(encoding="utf-8")
