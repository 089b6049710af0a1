"""Supabase-backed document store.

Each collection is a table with an `id` primary key, an `activity_id` column
(registrations only) and the camelCase JSON `document`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import uuid4

import httpx
from postgrest.exceptions import APIError
from pydantic import ValidationError

from clubforms import logger
from clubforms.exceptions import DocumentStoreError, PermissionDeniedError
from clubforms.notifications import PERMISSION_DENIED_CODE, UNAVAILABLE_CODE
from clubforms.typing.models import Activity, SubmissionRecord

if TYPE_CHECKING:
    from supabase import Client

    from clubforms.settings import Settings

_PERMISSION_CODES = frozenset({"42501", "PGRST301", "PGRST302", "401", "403"})


class SupabaseDocumentStore:
    """`DocumentStore` implementation over three Supabase tables."""

    def __init__(
        self,
        client: Client,
        *,
        activities_table: str = "upcoming_activities",
        registrations_table: str = "registrations",
        all_registrations_table: str = "all_registrations",
    ) -> None:
        """Initialize the store.

        Args:
            client (Client): Supabase client.
            activities_table (str): Table holding activities.
            registrations_table (str): Table holding registrations per activity.
            all_registrations_table (str): Flat registrations table.
        """
        self._client = client
        self._activities = activities_table
        self._registrations = registrations_table
        self._all_registrations = all_registrations_table

    @classmethod
    def from_settings(cls, settings: Settings) -> SupabaseDocumentStore:
        """Build the store from runtime settings.

        Args:
            settings (Settings): Runtime settings.

        Raises:
            DocumentStoreError: If the Supabase URL or key is missing.

        Returns:
            SupabaseDocumentStore: Configured store.
        """
        from supabase import create_client  # noqa: PLC0415

        if not settings.supabase_url or not settings.supabase_key:
            raise DocumentStoreError(message="SUPABASE_URL and SUPABASE_KEY are required")
        return cls(
            create_client(settings.supabase_url, settings.supabase_key),
            activities_table=settings.activities_table,
            registrations_table=settings.registrations_table,
            all_registrations_table=settings.all_registrations_table,
        )

    def list_activities(self) -> list[Activity]:
        """Return every activity."""
        rows = self._run(self._client.table(self._activities).select("id, document"), "list activities")
        return [_activity(row) for row in rows]

    def get_activity(self, activity_id: str) -> Activity | None:
        """Return one activity, or None when it does not exist."""
        query = self._client.table(self._activities).select("id, document").eq("id", activity_id).limit(1)
        rows = self._run(query, "get activity")
        return _activity(rows[0]) if rows else None

    def create_activity(self, document: dict[str, Any]) -> str:
        """Create an activity document and return its id."""
        activity_id = uuid4().hex
        self._run(
            self._client.table(self._activities).insert({"id": activity_id, "document": document}),
            "create activity",
        )
        return activity_id

    def update_activity(self, activity_id: str, document: dict[str, Any]) -> None:
        """Replace the stored document of an activity."""
        self._run(
            self._client.table(self._activities).update({"document": document}).eq("id", activity_id),
            "update activity",
        )

    def delete_activity(self, activity_id: str) -> None:
        """Delete an activity document."""
        self._run(self._client.table(self._activities).delete().eq("id", activity_id), "delete activity")

    def list_registrations(self, activity_id: str) -> list[SubmissionRecord]:
        """Return the registrations stored under an activity."""
        query = self._client.table(self._registrations).select("id, document").eq("activity_id", activity_id)
        return [_record(row) for row in self._run(query, "list registrations")]

    def list_all_registrations(self) -> list[SubmissionRecord]:
        """Return every registration of the flat table."""
        query = self._client.table(self._all_registrations).select("id, document")
        return [_record(row) for row in self._run(query, "list all registrations")]

    def add_registration(self, record: SubmissionRecord) -> str:
        """Store a registration in both tables under one id.

        When the flat insert fails the per-activity row is removed again, so a
        resubmission does not leave a duplicate behind.
        """
        registration_id = uuid4().hex
        row = {"id": registration_id, "activity_id": record.activity_id, "document": record.to_document()}
        self._run(self._client.table(self._registrations).insert(row), "add registration")
        try:
            self._run(self._client.table(self._all_registrations).insert(row), "add registration")
        except DocumentStoreError:
            try:
                self._run(
                    self._client.table(self._registrations).delete().eq("id", registration_id),
                    "roll back registration",
                )
            except DocumentStoreError:
                logger.exception("Rolling back registration failed", extra={"registration_id": registration_id})
            raise
        return registration_id

    def update_registration(
        self,
        activity_id: str,
        registration_id: str,
        updates: dict[str, Any],
        *,
        flat: bool = False,
    ) -> None:
        """Merge fields into a registration document.

        Args:
            activity_id (str): Owning activity.
            registration_id (str): Registration to update.
            updates (dict[str, Any]): camelCase fields to merge.
            flat (bool): Update the flat table instead of the per-activity one.

        Raises:
            DocumentStoreError: If the registration does not exist.
        """
        table = self._all_registrations if flat else self._registrations
        query = self._client.table(table).select("id, document").eq("id", registration_id)
        if not flat:
            query = query.eq("activity_id", activity_id)
        rows = self._run(query, "read registration")
        if not rows:
            raise DocumentStoreError(message=f"Registration not found: {registration_id}", code="not-found")
        document = {**(rows[0].get("document") or {}), **updates}
        self._run(
            self._client.table(table).update({"document": document}).eq("id", registration_id),
            "update registration",
        )

    def delete_registration(self, activity_id: str, registration_id: str) -> None:
        """Delete a registration from both tables."""
        self._run(
            self._client.table(self._registrations)
            .delete()
            .eq("id", registration_id)
            .eq("activity_id", activity_id),
            "delete registration",
        )
        self._run(
            self._client.table(self._all_registrations).delete().eq("id", registration_id),
            "delete registration",
        )

    def delete_registrations(self, activity_id: str) -> int:
        """Delete every registration of an activity, per-activity table first."""
        removed = self._run(
            self._client.table(self._registrations).delete().eq("activity_id", activity_id),
            "delete registrations",
        )
        self._run(
            self._client.table(self._all_registrations).delete().eq("activity_id", activity_id),
            "delete registrations",
        )
        return len(removed)

    @staticmethod
    def _run(query: Any, operation: str) -> list[dict[str, Any]]:
        """Execute a query and translate provider failures.

        Args:
            query (Any): Prepared PostgREST request builder.
            operation (str): Operation name used in messages.

        Raises:
            PermissionDeniedError: If the provider refuses access.
            DocumentStoreError: On any other provider or transport failure.

        Returns:
            list[dict[str, Any]]: Returned rows.
        """
        try:
            response = query.execute()
        except APIError as exc:
            code = str(exc.code) if exc.code is not None else None
            logger.warning("Document store request failed", extra={"operation": operation, "code": code})
            if code in _PERMISSION_CODES:
                raise PermissionDeniedError(message=f"Permission denied: {operation}", code=PERMISSION_DENIED_CODE) from exc
            raise DocumentStoreError(message=f"Failed to {operation}: {exc.message}", code=code) from exc
        except httpx.HTTPError as exc:
            logger.warning("Document store unreachable", extra={"operation": operation, "error": str(exc)})
            raise DocumentStoreError(message=f"Failed to {operation}: {exc}", code=UNAVAILABLE_CODE) from exc
        return list(response.data or [])


def _activity(row: dict[str, Any]) -> Activity:
    try:
        return Activity.model_validate({**(row.get("document") or {}), "id": row["id"]})
    except ValidationError as exc:
        raise DocumentStoreError(message=f"Invalid activity document {row.get('id')}: {exc}") from exc


def _record(row: dict[str, Any]) -> SubmissionRecord:
    try:
        return SubmissionRecord.model_validate({**(row.get("document") or {}), "id": row["id"]})
    except ValidationError as exc:
        raise DocumentStoreError(message=f"Invalid registration document {row.get('id')}: {exc}") from exc
