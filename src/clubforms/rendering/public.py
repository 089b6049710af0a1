"""Fillable public registration form."""

from __future__ import annotations

from collections.abc import Iterable

from clubforms.exceptions import ResponseError
from clubforms.rendering.content import render_content
from clubforms.rendering.environment import render_template
from clubforms.typing.models import (
    ChoiceField,
    ChoiceOption,
    FieldDescriptor,
    FileField,
    FileReference,
    FileUpload,
    ImageField,
    LabelField,
    LinkField,
    PublicControl,
    ResponseMap,
    TextField,
)

INPUT_TYPES: dict[str, str] = {
    "text": "text",
    "email": "email",
    "phone": "tel",
    "number": "number",
    "date": "date",
    "time": "time",
    "url": "url",
}


class PublicForm:
    """Live response map bound to a frozen schema.

    Change events are routed by field id into `responses`; nothing is validated
    here beyond the shape of each value. Required fields are only marked.
    """

    def __init__(self, schema: Iterable[FieldDescriptor], responses: ResponseMap | None = None) -> None:
        """Bind a schema snapshot and an optional initial response map.

        Args:
            schema (Iterable[FieldDescriptor]): Descriptors in display order.
            responses (ResponseMap | None): Previously captured values.
        """
        self._schema = tuple(schema)
        self._by_id = {descriptor.id: descriptor for descriptor in self._schema}
        self.responses: ResponseMap = dict(responses or {})

    @property
    def schema(self) -> tuple[FieldDescriptor, ...]:
        """Return the bound schema."""
        return self._schema

    def clear(self) -> None:
        """Drop every captured value."""
        self.responses = {}

    def set_value(self, field_id: str, value: str) -> ResponseMap:
        """Store the raw string value of a text-like, select or radio input.

        Args:
            field_id (str): Target field id.
            value (str): New value; an empty string clears a choice.

        Raises:
            ResponseError: If the field cannot hold a single string or the value
                is not one of its options.

        Returns:
            ResponseMap: Updated responses.
        """
        descriptor = self._input(field_id)
        match descriptor:
            case TextField():
                self.responses[field_id] = value
            case ChoiceField(multiple=False):
                if value and value not in descriptor.options:
                    raise ResponseError(message=f"'{value}' is not an option of field '{field_id}'")
                self.responses[field_id] = value
            case ChoiceField():
                raise ResponseError(message=f"Field '{field_id}' takes several values; use toggle_option")
            case FileField():
                raise ResponseError(message=f"Field '{field_id}' takes a file; use attach_file")
        return self.responses

    def toggle_option(self, field_id: str, option: str, checked: bool | None = None) -> ResponseMap:
        """Check or uncheck one option of a checkbox field.

        Checked options are kept in the order they were selected.

        Args:
            field_id (str): Target checkbox field id.
            option (str): Option text.
            checked (bool | None): Desired state; flips the current state when None.

        Raises:
            ResponseError: If the field is not a checkbox or the option is unknown.

        Returns:
            ResponseMap: Updated responses.
        """
        descriptor = self._input(field_id)
        if not isinstance(descriptor, ChoiceField) or not descriptor.multiple:
            raise ResponseError(message=f"Field '{field_id}' is not a checkbox field")
        if option not in descriptor.options:
            raise ResponseError(message=f"'{option}' is not an option of field '{field_id}'")

        current = self.responses.get(field_id)
        selected = list(current) if isinstance(current, list) else []
        want = option not in selected if checked is None else checked
        if want and option not in selected:
            selected.append(option)
        elif not want:
            selected = [value for value in selected if value != option]
        self.responses[field_id] = selected
        return self.responses

    def attach_file(self, field_id: str, file: FileUpload | None) -> ResponseMap:
        """Store the raw file chosen for a file input, or clear it.

        Args:
            field_id (str): Target file field id.
            file (FileUpload | None): Chosen file; None removes the selection.

        Raises:
            ResponseError: If the field is not a file field.

        Returns:
            ResponseMap: Updated responses.
        """
        descriptor = self._input(field_id)
        if not isinstance(descriptor, FileField):
            raise ResponseError(message=f"Field '{field_id}' is not a file field")
        if file is None:
            self.responses.pop(field_id, None)
        else:
            self.responses[field_id] = file
        return self.responses

    def controls(self) -> list[PublicControl]:
        """Return one control per descriptor, in schema order.

        Returns:
            list[PublicControl]: Input controls with their current values and
                static content renderings.
        """
        return [self._control(descriptor) for descriptor in self._schema]

    def render_html(self, *, title: str | None = None, action: str | None = None) -> str:
        """Render the whole form.

        Args:
            title (str | None): Optional heading.
            action (str | None): Optional form action URL.

        Returns:
            str: Form markup.
        """
        return render_template("public_form.html.j2", controls=self.controls(), title=title, action=action)

    def _input(self, field_id: str) -> TextField | ChoiceField | FileField:
        descriptor = self._by_id.get(field_id)
        if descriptor is None:
            raise ResponseError(message=f"Unknown field id: {field_id}")
        if descriptor.is_content:
            raise ResponseError(message=f"Field '{field_id}' is static content and takes no value")
        return descriptor  # type: ignore[return-value]

    def _control(self, descriptor: FieldDescriptor) -> PublicControl:
        current = self.responses.get(descriptor.id)
        match descriptor:
            case LabelField() | ImageField() | LinkField():
                return PublicControl(
                    field_id=descriptor.id,
                    kind=descriptor.field_kind,
                    is_content=True,
                    label=descriptor.label,
                    content_html=str(render_content(descriptor)),
                )
            case TextField():
                return PublicControl(
                    **_input_base(descriptor),
                    input_type=INPUT_TYPES.get(descriptor.kind),
                    placeholder=descriptor.placeholder or None,
                    help_text=descriptor.help_text or None,
                    value=current if isinstance(current, str) else "",
                )
            case ChoiceField():
                selected = set(current) if isinstance(current, list) else {current}
                return PublicControl(
                    **_input_base(descriptor),
                    placeholder=descriptor.placeholder or None,
                    help_text=descriptor.help_text or None,
                    value=current if isinstance(current, str) else "",
                    options=[
                        ChoiceOption(value=option, selected=option in selected, dom_id=f"{descriptor.id}-{index}")
                        for index, option in enumerate(descriptor.options)
                    ],
                )
            case FileField():
                file_name = current.file_name if isinstance(current, FileUpload | FileReference) else None
                return PublicControl(
                    **_input_base(descriptor),
                    help_text=descriptor.help_text or None,
                    accept=descriptor.accepted_file_types or "*",
                    file_name=file_name,
                )


def _input_base(descriptor: TextField | ChoiceField | FileField) -> dict[str, object]:
    return {
        "field_id": descriptor.id,
        "kind": descriptor.field_kind,
        "is_content": False,
        "label": descriptor.label,
        "display_label": f"{descriptor.label} *" if descriptor.required else descriptor.label,
        "required": descriptor.required,
    }
