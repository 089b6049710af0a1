"""Project enums."""

from __future__ import annotations

from enum import StrEnum


class _EnumMixin(StrEnum):
    """Shared conversion helpers for user-facing enums."""

    @classmethod
    def from_str(cls, value: str) -> _EnumMixin:
        """Parse enum from string.

        Args:
            value: Raw string value.

        Raises:
            ValueError: If the value is not supported.

        Returns:
            _EnumMixin: Parsed enum value.
        """
        try:
            return cls(value)
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            message = f"Unsupported {cls.__name__} value '{value}'. Expected one of: {supported}"
            raise ValueError(message) from exc

    def to_str(self) -> str:
        """Return string representation.

        Returns:
            str: Enum string value.
        """
        return self.value


class FieldKind(_EnumMixin):
    """Every kind a form schema entry can take."""

    TEXT = "text"
    TEXTAREA = "textarea"
    EMAIL = "email"
    PHONE = "phone"
    NUMBER = "number"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    FILE = "file"
    DATE = "date"
    TIME = "time"
    URL = "url"
    LABEL = "label"
    IMAGE = "image"
    LINK = "link"

    @property
    def category(self) -> FieldCategory:
        """Return the picker category of this kind."""
        if self in _CONTENT_KINDS:
            return FieldCategory.CONTENT
        if self in _CHOICE_KINDS:
            return FieldCategory.CHOICE
        return FieldCategory.INPUT

    @property
    def is_content(self) -> bool:
        """Return whether the kind renders static content instead of an input."""
        return self in _CONTENT_KINDS

    @property
    def is_input(self) -> bool:
        """Return whether the kind captures an answer."""
        return self not in _CONTENT_KINDS


class FieldCategory(_EnumMixin):
    """Picker grouping of field kinds."""

    INPUT = "input"
    CHOICE = "choice"
    CONTENT = "content"


_CHOICE_KINDS = frozenset({FieldKind.SELECT, FieldKind.RADIO, FieldKind.CHECKBOX})
_CONTENT_KINDS = frozenset({FieldKind.LABEL, FieldKind.IMAGE, FieldKind.LINK})


class MoveDirection(_EnumMixin):
    """Direction for reordering a schema entry."""

    UP = "up"
    DOWN = "down"


class FontSize(_EnumMixin):
    """Typographic size of a label content field."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    XL = "xl"


class Alignment(_EnumMixin):
    """Horizontal alignment of content fields."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class ImageSize(_EnumMixin):
    """Display width of an image content field."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    FULL = "full"


class ImageSourceMode(_EnumMixin):
    """How the builder obtained an image URL."""

    URL = "url"
    UPLOAD = "upload"


class ButtonStyle(_EnumMixin):
    """Visual style of a link content field."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    OUTLINE = "outline"
    LINK = "link"


class SubmissionStatus(_EnumMixin):
    """Lifecycle state of a registration."""

    CONFIRMED = "confirmed"
    PENDING_PAYMENT = "pending_payment"


class MediaFolder(_EnumMixin):
    """Logical storage folders used by the media browser."""

    EVENTS = "events"
    FORM_REGISTER = "form_register"
    FORM_BUILDER = "form_builder"
    COMMITTEE_MEMBERS = "committee_members"
    USER_PROFILES = "user_profiles"
    GENERAL = "general"


class MediaFolderUi(_EnumMixin):
    """Folder names shown by the admin media browser."""

    EVENTS = "events"
    FORM_REGISTER = "formregister"
    COMMITTEE_MEMBERS = "commitymembers"
    PROFILES = "profiles"
    GENERAL = "general"


class NotificationLevel(_EnumMixin):
    """Severity of a user-facing notification."""

    SUCCESS = "success"
    ERROR = "error"
