"""View models produced by the builder and public renderers."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from clubforms.typing.enums import FieldCategory, FieldKind


class FieldTypeOption(BaseModel):
    """One entry of the builder's "add field" picker."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: FieldKind
    title: str
    icon: str
    category: FieldCategory


class BuilderCard(BaseModel):
    """Editable card for one schema entry."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    field_id: str
    kind: FieldKind
    title: str
    icon: str
    position: int
    can_move_up: bool
    can_move_down: bool
    values: dict[str, object] = Field(default_factory=dict)
    editable: list[str] = Field(default_factory=list)
    options: list[str] | None = None
    preview_html: str | None = None
    editing: bool = False


class ChoiceOption(BaseModel):
    """One option of a choice control with its selection state."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    value: str
    selected: bool = False
    dom_id: str


class PublicControl(BaseModel):
    """Fillable control, or static content, of the public form."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    field_id: str
    kind: FieldKind
    is_content: bool
    label: str = ""
    display_label: str = ""
    required: bool = False
    input_type: str | None = None
    placeholder: str | None = None
    help_text: str | None = None
    value: str = ""
    options: list[ChoiceOption] = Field(default_factory=list)
    accept: str | None = None
    file_name: str | None = None
    content_html: str | None = None
