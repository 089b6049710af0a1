"""Activity document models."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from clubforms.typing.models.fields import FieldDescriptor, SchemaCarrierModel


class PaymentDetails(BaseModel):
    """Payment instructions shown to registrants of a paid activity."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True, alias_generator=to_camel)

    payment_url: str = ""
    instructions: str = ""


class Activity(SchemaCarrierModel):
    """Persisted upcoming activity with its registration form."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True, alias_generator=to_camel)

    id: str
    title: str
    description: str = ""
    registration_start: datetime | None = None
    registration_end: datetime | None = None
    event_date: datetime | None = None
    max_participants: int | None = Field(default=None, ge=1)
    is_paid: bool = False
    fee: float | None = Field(default=None, ge=0)
    payment_details: PaymentDetails = Field(default_factory=PaymentDetails)
    form_schema: tuple[FieldDescriptor, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("max_participants", "fee", mode="before")
    @classmethod
    def _blank_as_none(cls, value: object) -> object:
        """Treat blank form inputs as unset numbers.

        Args:
            value (object): Raw value.

        Returns:
            object: None for blank strings, the value otherwise.
        """
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def form_version(self) -> str | None:
        """Return the timestamp identifying the schema revision registrants saw."""
        stamp = self.updated_at or self.created_at
        return stamp.isoformat() if stamp else None

    def is_registration_open(self, now: datetime | None = None) -> bool:
        """Return whether `now` falls inside the registration window.

        Args:
            now (datetime | None): Reference time, defaults to the current UTC time.

        Returns:
            bool: True when registrations are accepted.
        """
        if self.registration_start is None or self.registration_end is None:
            return False
        current = now or datetime.now(UTC)
        return _aware(self.registration_start) <= _aware(current) <= _aware(self.registration_end)

    def can_register(self, registration_count: int, now: datetime | None = None) -> bool:
        """Return whether one more registration is accepted.

        Args:
            registration_count (int): Registrations already stored.
            now (datetime | None): Reference time.

        Returns:
            bool: True when the window is open and seats remain.
        """
        has_space = self.max_participants is None or registration_count < self.max_participants
        return self.is_registration_open(now) and has_space

    def to_document(self) -> dict[str, object]:
        """Serialize for the document store (without the document id).

        Returns:
            dict[str, object]: camelCase JSON payload.
        """
        payload = self.model_dump(mode="json", by_alias=True, exclude_none=True, exclude={"id", "form_schema"})
        payload["formSchema"] = [field.to_payload() for field in self.form_schema]
        return payload


def _aware(value: datetime) -> datetime:
    """Assume UTC for naive timestamps.

    Args:
        value (datetime): Timestamp.

    Returns:
        datetime: Timezone-aware timestamp.
    """
    return value if value.tzinfo else value.replace(tzinfo=UTC)
