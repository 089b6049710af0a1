"""Form field descriptor models.

A descriptor is one entry of a registration form schema. Each kind maps to
exactly one model below; the `FieldDescriptor` union is discriminated on
`kind`, so consumers branch with `match` on the model class. Attributes that do
not apply to a kind simply do not exist on its model and are therefore absent
from the serialized payload.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from pydantic.alias_generators import to_camel

from clubforms.typing.enums import (
    Alignment,
    ButtonStyle,
    FieldKind,
    FontSize,
    ImageSize,
    ImageSourceMode,
)

TextKind = Literal["text", "textarea", "email", "phone", "number", "date", "time", "url"]
ChoiceKind = Literal["select", "radio", "checkbox"]


class _FieldBase(BaseModel):
    """Attributes shared by every descriptor."""

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    id: str = Field(min_length=1)
    label: str = ""
    required: bool = False

    @property
    def field_kind(self) -> FieldKind:
        """Return the kind as a `FieldKind` member."""
        return FieldKind(getattr(self, "kind"))  # noqa: B009

    @property
    def is_content(self) -> bool:
        """Return whether the descriptor is a static content element."""
        return self.field_kind.is_content

    def to_payload(self) -> dict[str, Any]:
        """Serialize for persistence, leaving unset attributes out.

        Returns:
            dict[str, Any]: camelCase JSON payload.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TextField(_FieldBase):
    """Single-value input: text, textarea, email, phone, number, date, time, url."""

    kind: TextKind
    placeholder: str | None = None
    help_text: str | None = None


class ChoiceField(_FieldBase):
    """Input choosing among `options`; checkbox allows several."""

    kind: ChoiceKind
    options: list[str] = Field(default_factory=list)
    placeholder: str | None = None
    help_text: str | None = None

    @property
    def multiple(self) -> bool:
        """Return whether several options can be selected."""
        return self.kind == FieldKind.CHECKBOX


class FileField(_FieldBase):
    """File upload input."""

    kind: Literal["file"]
    accepted_file_types: str = "*"
    placeholder: str | None = None
    help_text: str | None = None


class LabelField(_FieldBase):
    """Static text block; `content` may hold `[text](url)` links."""

    kind: Literal["label"]
    content: str = ""
    font_size: FontSize = FontSize.MEDIUM
    alignment: Alignment = Alignment.LEFT


class ImageField(_FieldBase):
    """Static image, optionally clickable."""

    kind: Literal["image"]
    image_url: str = ""
    alt_text: str | None = None
    alignment: Alignment = Alignment.CENTER
    image_size: ImageSize = ImageSize.MEDIUM
    show_border: bool = False
    click_url: str | None = None
    source_mode: ImageSourceMode = ImageSourceMode.URL


class LinkField(_FieldBase):
    """Static link rendered as a button or plain link."""

    kind: Literal["link"]
    link_url: str = ""
    link_text: str = "Click here"
    open_in_new_tab: bool = False
    button_style: ButtonStyle = ButtonStyle.PRIMARY


InputField = TextField | ChoiceField | FileField
ContentField = LabelField | ImageField | LinkField

FieldDescriptor = Annotated[
    TextField | ChoiceField | FileField | LabelField | ImageField | LinkField,
    Field(discriminator="kind"),
]

FIELD_ADAPTER: TypeAdapter[FieldDescriptor] = TypeAdapter(FieldDescriptor)
FIELDS_ADAPTER: TypeAdapter[list[FieldDescriptor]] = TypeAdapter(list[FieldDescriptor])


class SchemaCarrierModel(BaseModel):
    """Base for models embedding a schema loaded from stored documents."""

    @model_validator(mode="before")
    @classmethod
    def _migrate_schema_key(cls, data: Any) -> Any:
        """Accept descriptors stored with the legacy `type` key.

        Args:
            data (Any): Raw model input.

        Returns:
            Any: Input with descriptors migrated.
        """
        if not isinstance(data, dict):
            return data
        for key in ("formSchema", "form_schema"):
            raw = data.get(key)
            if isinstance(raw, list | tuple):
                data = {**data, key: [migrate_field_payload(item) for item in raw]}
        return data


def migrate_field_payload(payload: Any) -> Any:
    """Rename the legacy `type` key of a stored descriptor to `kind`.

    Args:
        payload (Any): Raw descriptor payload.

    Returns:
        Any: Migrated payload, or the input unchanged when it is not a mapping.
    """
    if not isinstance(payload, dict) or "kind" in payload or "type" not in payload:
        return payload
    migrated = {key: value for key, value in payload.items() if key != "type"}
    migrated["kind"] = payload["type"]
    return migrated


def parse_field(payload: Any) -> FieldDescriptor:
    """Validate one descriptor payload.

    Args:
        payload (Any): Descriptor mapping or model.

    Returns:
        FieldDescriptor: Validated descriptor.
    """
    return FIELD_ADAPTER.validate_python(migrate_field_payload(payload))


def parse_fields(payload: Any) -> list[FieldDescriptor]:
    """Validate a list of descriptor payloads.

    Args:
        payload (Any): Sequence of descriptor mappings.

    Returns:
        list[FieldDescriptor]: Validated descriptors in order.
    """
    if isinstance(payload, list | tuple):
        payload = [migrate_field_payload(item) for item in payload]
    return FIELDS_ADAPTER.validate_python(payload)
