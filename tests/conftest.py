"""Pytest marker auto-assignment by folder and shared service fakes."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from clubforms import logger
from clubforms.exceptions import PackageError, StorageError
from clubforms.typing.models import Activity, FileUpload, MediaAsset, SubmissionRecord, UploadedAsset

FIXED_NOW = datetime(2024, 3, 1, 10, 30, tzinfo=UTC)


def _mark_tests_by_directory(
    config: pytest.Config,
    items: list[pytest.Item],
    marker: str,
) -> None:
    """Mark collected tests located under tests/<marker>/."""
    target_dir = Path(config.rootpath) / "tests" / marker
    target_dir = target_dir.resolve()

    for item in items:
        try:
            path = Path(str(item.fspath)).resolve()
        except OSError:
            logger.warning(
                f"Could not resolve path for test item {item.name!s}; skipping {marker!s} marker assignment",
            )
            continue

        if path == target_dir or target_dir in path.parents:
            item.add_marker(getattr(pytest.mark, marker))


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Apply directory-based markers to test items."""
    _mark_tests_by_directory(config, items, "unit")
    _mark_tests_by_directory(config, items, "integration")
    _mark_tests_by_directory(config, items, "end2end")


class FakeStorage:
    """Object storage recording uploads and deletes in memory."""

    def __init__(self, assets: list[MediaAsset] | None = None) -> None:
        self.uploads: list[tuple[str, str]] = []
        self.deleted: list[str] = []
        self.assets = list(assets or [])
        self.error: StorageError | None = None

    def upload(self, file: FileUpload, folder: str) -> UploadedAsset:
        if self.error is not None:
            raise self.error
        self.uploads.append((file.file_name, folder))
        return UploadedAsset(
            public_id=f"club/{folder}/{file.file_name}",
            url=f"https://cdn.test/club/{folder}/{file.file_name}",
            folder=f"club/{folder}",
            size=file.size,
        )

    def delete(self, public_id: str) -> None:
        if self.error is not None:
            raise self.error
        self.deleted.append(public_id)

    def search_images(self, folder: str | None = None) -> list[MediaAsset]:
        _ = folder
        return list(self.assets)


class InMemoryDocumentStore:
    """Document store keeping camelCase documents in dictionaries.

    `failures` maps a method name to the error it raises.
    """

    def __init__(self) -> None:
        self.activities: dict[str, dict[str, Any]] = {}
        self.registrations: dict[str, dict[str, dict[str, Any]]] = {}
        self.all_registrations: dict[str, dict[str, Any]] = {}
        self.failures: dict[str, PackageError] = {}
        self.calls: list[str] = []
        self._counter = 0

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.failures:
            raise self.failures[operation]

    def _next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}-{self._counter}"

    def list_activities(self) -> list[Activity]:
        self._enter("list_activities")
        return [Activity.model_validate({**doc, "id": key}) for key, doc in self.activities.items()]

    def get_activity(self, activity_id: str) -> Activity | None:
        self._enter("get_activity")
        doc = self.activities.get(activity_id)
        return Activity.model_validate({**doc, "id": activity_id}) if doc is not None else None

    def create_activity(self, document: dict[str, Any]) -> str:
        self._enter("create_activity")
        activity_id = self._next_id("act")
        self.activities[activity_id] = dict(document)
        return activity_id

    def update_activity(self, activity_id: str, document: dict[str, Any]) -> None:
        self._enter("update_activity")
        self.activities[activity_id] = dict(document)

    def delete_activity(self, activity_id: str) -> None:
        self._enter("delete_activity")
        self.activities.pop(activity_id, None)

    def list_registrations(self, activity_id: str) -> list[SubmissionRecord]:
        self._enter("list_registrations")
        docs = self.registrations.get(activity_id, {})
        return [SubmissionRecord.model_validate({**doc, "id": key}) for key, doc in docs.items()]

    def list_all_registrations(self) -> list[SubmissionRecord]:
        self._enter("list_all_registrations")
        return [SubmissionRecord.model_validate({**doc, "id": key}) for key, doc in self.all_registrations.items()]

    def add_registration(self, record: SubmissionRecord) -> str:
        self._enter("add_registration")
        registration_id = self._next_id("reg")
        document = record.to_document()
        self.registrations.setdefault(record.activity_id, {})[registration_id] = document
        self.all_registrations[registration_id] = dict(document)
        return registration_id

    def update_registration(
        self,
        activity_id: str,
        registration_id: str,
        updates: dict[str, Any],
        *,
        flat: bool = False,
    ) -> None:
        self._enter("update_registration_flat" if flat else "update_registration")
        if flat:
            self.all_registrations[registration_id].update(updates)
        else:
            self.registrations[activity_id][registration_id].update(updates)

    def delete_registration(self, activity_id: str, registration_id: str) -> None:
        self._enter("delete_registration")
        self.registrations.get(activity_id, {}).pop(registration_id, None)
        self.all_registrations.pop(registration_id, None)

    def delete_registrations(self, activity_id: str) -> int:
        self._enter("delete_registrations")
        removed = self.registrations.pop(activity_id, {})
        for registration_id in removed:
            self.all_registrations.pop(registration_id, None)
        return len(removed)


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def documents() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW
