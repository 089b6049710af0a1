"""CSV export of submission records."""

from __future__ import annotations

import csv
import io
import re
from collections.abc import Sequence
from pathlib import Path

from clubforms import logger
from clubforms.exceptions import ExportError
from clubforms.typing.models import SubmissionRecord

METADATA_COLUMNS = ["id", "activityId", "activityTitle", "submittedAt", "status", "formVersion"]
OPTIONAL_METADATA_COLUMNS = ["updatedAt", "updatedBy"]
NO_SUBMISSIONS_MESSAGE = "No submissions to export"


def export_columns(rows: Sequence[dict[str, str]]) -> list[str]:
    """Return the header of an export.

    Metadata columns come first, then answer ids in the order they are first
    seen across the rows.

    Args:
        rows (Sequence[dict[str, str]]): Flat submission rows.

    Returns:
        list[str]: Column names.
    """
    columns = list(METADATA_COLUMNS)
    columns.extend(name for name in OPTIONAL_METADATA_COLUMNS if any(name in row for row in rows))
    known = set(columns) | set(OPTIONAL_METADATA_COLUMNS)
    for row in rows:
        for name in row:
            if name not in known:
                columns.append(name)
                known.add(name)
    return columns


def export_submissions_csv(records: Sequence[SubmissionRecord]) -> str:
    """Serialize submissions as RFC 4180 CSV text.

    File answers are reduced to their URL and list answers are JSON encoded.
    The schema copy stored on each record is not exported.

    Args:
        records (Sequence[SubmissionRecord]): Submissions to export.

    Raises:
        ExportError: If there is nothing to export.

    Returns:
        str: CSV text with a header row.
    """
    if not records:
        raise ExportError(message=NO_SUBMISSIONS_MESSAGE)

    rows = [record.flat_row() for record in records]
    buffer = io.StringIO(newline="")
    writer = csv.DictWriter(buffer, fieldnames=export_columns(rows), restval="", quoting=csv.QUOTE_MINIMAL)
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue()


def export_filename(title: str) -> str:
    """Return the download name of an activity's export.

    Args:
        title (str): Activity title.

    Returns:
        str: Title with whitespace runs replaced by `_`, plus `_submissions.csv`.
    """
    return f"{re.sub(r'\s+', '_', title)}_submissions.csv"


def write_submissions_csv(records: Sequence[SubmissionRecord], path: Path) -> Path:
    """Write an export to disk.

    Args:
        records (Sequence[SubmissionRecord]): Submissions to export.
        path (Path): Target file, or a directory receiving the default file name.

    Returns:
        Path: Written file path.
    """
    content = export_submissions_csv(records)
    if path.is_dir():
        path = path / export_filename(records[0].activity_title)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(content)
    logger.info("Submissions exported", extra={"output_path": str(path), "rows": len(records)})
    return path
