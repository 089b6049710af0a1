"""User-facing notification model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from clubforms.typing.enums import NotificationLevel


class Notification(BaseModel):
    """Synchronous message shown once an operation finishes or fails."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    level: NotificationLevel
    message: str
    retryable: bool = False
    missing_fields: list[str] = []

    @property
    def ok(self) -> bool:
        """Return whether the operation succeeded."""
        return self.level == NotificationLevel.SUCCESS
