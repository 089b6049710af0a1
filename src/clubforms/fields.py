"""Field-type catalogue, default descriptors and the default registration schema."""

from __future__ import annotations

from typing import NamedTuple
from uuid import uuid4

from clubforms.typing.enums import FieldCategory, FieldKind
from clubforms.typing.models import (
    ChoiceField,
    FieldDescriptor,
    FileField,
    ImageField,
    LabelField,
    LinkField,
    TextField,
)


class FieldType(NamedTuple):
    """Display metadata of one field kind."""

    kind: FieldKind
    title: str
    icon: str

    @property
    def category(self) -> FieldCategory:
        """Return the picker category of the kind."""
        return self.kind.category


FIELD_TYPES: dict[FieldKind, FieldType] = {
    field_type.kind: field_type
    for field_type in (
        FieldType(FieldKind.TEXT, "Short Text", "📝"),
        FieldType(FieldKind.TEXTAREA, "Long Text", "📄"),
        FieldType(FieldKind.EMAIL, "Email", "📧"),
        FieldType(FieldKind.PHONE, "Phone Number", "📞"),
        FieldType(FieldKind.NUMBER, "Number", "🔢"),
        FieldType(FieldKind.SELECT, "Dropdown", "📋"),
        FieldType(FieldKind.RADIO, "Multiple Choice", "⚪"),
        FieldType(FieldKind.CHECKBOX, "Checkboxes", "☑️"),
        FieldType(FieldKind.FILE, "File Upload", "📎"),
        FieldType(FieldKind.DATE, "Date", "📅"),
        FieldType(FieldKind.TIME, "Time", "⏰"),
        FieldType(FieldKind.URL, "Website URL", "🌐"),
        FieldType(FieldKind.LABEL, "Label/Description", "📋"),
        FieldType(FieldKind.IMAGE, "Image Display", "🖼️"),
        FieldType(FieldKind.LINK, "Link/Button", "🔗"),
    )
}

ACCEPTED_FILE_TYPES: dict[str, str] = {
    "*": "All files",
    "image/*": "Images only",
    ".pdf": "PDF only",
    "image/*,.pdf": "Images and PDF",
    ".doc,.docx": "Word documents",
    ".xls,.xlsx": "Excel spreadsheets",
}

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/400x200?text=Image"
PLACEHOLDER_LINK_URL = "https://example.com"
PLACEHOLDER_LABEL_CONTENT = "Add your description or instructions here."

YEAR_OPTIONS = ["1st Year", "2nd Year", "3rd Year", "4th Year"]
BRANCH_OPTIONS = [
    "Computer Science Engineering",
    "Computer Science Engineering (AI & ML)",
    "Computer Science Engineering (Data Science)",
    "Computer Science Engineering (Cyber Security)",
    "Computer Science Engineering (IoT)",
    "Electronics and Communication Engineering",
    "Electrical and Electronics Engineering",
    "Mechanical Engineering",
]


def new_field_id() -> str:
    """Return a fresh, collision-free field id.

    Returns:
        str: Identifier prefixed with `field_`.
    """
    return f"field_{uuid4().hex[:12]}"


def field_title(kind: FieldKind | str) -> str:
    """Return the display title of a kind.

    Args:
        kind (FieldKind | str): Field kind.

    Returns:
        str: Human readable title.
    """
    return FIELD_TYPES[FieldKind.from_str(str(kind))].title


def create_default(kind: FieldKind | str, *, field_id: str | None = None) -> FieldDescriptor:
    """Build a new descriptor with kind-appropriate defaults.

    Args:
        kind (FieldKind | str): Kind of the new field.
        field_id (str | None): Id to use; a fresh one is generated when omitted.

    Raises:
        ValueError: If the kind is not supported.

    Returns:
        FieldDescriptor: New descriptor labelled "New <title>".
    """
    parsed = FieldKind.from_str(str(kind))
    identifier = field_id or new_field_id()
    label = f"New {FIELD_TYPES[parsed].title}"

    match parsed:
        case FieldKind.SELECT | FieldKind.RADIO | FieldKind.CHECKBOX:
            return ChoiceField(
                id=identifier,
                kind=parsed.value,
                label=label,
                options=["Option 1", "Option 2"],
                placeholder="",
                help_text="",
            )
        case FieldKind.FILE:
            return FileField(
                id=identifier,
                kind="file",
                label=label,
                accepted_file_types="*",
                placeholder="",
                help_text="",
            )
        case FieldKind.LABEL:
            return LabelField(id=identifier, kind="label", label=label, content=PLACEHOLDER_LABEL_CONTENT)
        case FieldKind.IMAGE:
            return ImageField(
                id=identifier,
                kind="image",
                label=label,
                image_url=PLACEHOLDER_IMAGE_URL,
                alt_text="Form image",
            )
        case FieldKind.LINK:
            return LinkField(
                id=identifier,
                kind="link",
                label=label,
                link_url=PLACEHOLDER_LINK_URL,
                link_text="Click here",
            )
        case _:
            return TextField(id=identifier, kind=parsed.value, label=label, placeholder="", help_text="")


def default_form_schema() -> list[FieldDescriptor]:
    """Return the schema a new activity starts with.

    Returns:
        list[FieldDescriptor]: Name, roll number, email, phone, year and branch inputs.
    """
    return [
        TextField(id="name", kind="text", label="Full Name", required=True, placeholder="Enter your full name"),
        TextField(
            id="rollNo",
            kind="text",
            label="Roll Number",
            required=True,
            placeholder="Enter your roll number",
        ),
        TextField(
            id="email",
            kind="email",
            label="Email Address",
            required=True,
            placeholder="your.email@hitam.org",
        ),
        TextField(id="phone", kind="phone", label="Phone Number", required=True, placeholder="+91 XXXXXXXXXX"),
        ChoiceField(id="year", kind="select", label="Academic Year", required=True, options=list(YEAR_OPTIONS)),
        ChoiceField(
            id="branch",
            kind="select",
            label="Branch",
            required=True,
            options=list(BRANCH_OPTIONS),
        ),
    ]
