"""Authoring surface for form schemas."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from clubforms import logger
from clubforms.exceptions import SchemaStoreError, StorageError
from clubforms.fields import FIELD_TYPES
from clubforms.rendering.content import render_content
from clubforms.rendering.environment import render_template
from clubforms.rendering.public import PublicForm
from clubforms.typing.enums import FieldCategory, FieldKind, ImageSourceMode, MediaFolder, MoveDirection
from clubforms.typing.models import BuilderCard, ChoiceField, FieldDescriptor, FieldTypeOption, ImageField

if TYPE_CHECKING:
    from clubforms.schema_store import SchemaStore
    from clubforms.typing.models import FileUpload
    from clubforms.typing.protocol import ObjectStorage

_READ_ONLY_ATTRIBUTES = frozenset({"id", "kind"})


class FormBuilder:
    """Editable view over a `SchemaStore`.

    Every edit goes through the store; the builder only adds the confirmation
    step for deletes and the image upload side effect.
    """

    def __init__(self, store: SchemaStore, storage: ObjectStorage | None = None) -> None:
        """Bind the builder to a store.

        Args:
            store (SchemaStore): Schema being authored.
            storage (ObjectStorage | None): Object storage used for image uploads.
        """
        self.store = store
        self.storage = storage

    def picker(self) -> dict[FieldCategory, list[FieldTypeOption]]:
        """Return the field types grouped by category.

        Returns:
            dict[FieldCategory, list[FieldTypeOption]]: Input, choice and content groups.
        """
        groups: dict[FieldCategory, list[FieldTypeOption]] = {category: [] for category in FieldCategory}
        for field_type in FIELD_TYPES.values():
            groups[field_type.category].append(
                FieldTypeOption(
                    kind=field_type.kind,
                    title=field_type.title,
                    icon=field_type.icon,
                    category=field_type.category,
                ),
            )
        return groups

    def cards(self) -> list[BuilderCard]:
        """Return one editable card per descriptor.

        Returns:
            list[BuilderCard]: Cards in schema order.
        """
        descriptors = self.store.snapshot()
        last = len(descriptors) - 1
        return [self._card(descriptor, position, last) for position, descriptor in enumerate(descriptors)]

    def render_html(self) -> str:
        """Render the authoring surface.

        Returns:
            str: Builder markup.
        """
        return render_template("builder.html.j2", picker=self.picker(), cards=self.cards())

    def render_preview_html(self, *, title: str | None = None) -> str:
        """Render the form exactly as visitors will see it.

        Args:
            title (str | None): Optional heading.

        Returns:
            str: Public form markup.
        """
        return PublicForm(self.store.snapshot()).render_html(title=title)

    def add_field(self, kind: FieldKind | str) -> FieldDescriptor:
        """Add a field of `kind`; content fields open their settings right away.

        Args:
            kind (FieldKind | str): Kind picked by the author.

        Returns:
            FieldDescriptor: The new descriptor.
        """
        return self.store.add_field(kind)

    def update_field(self, field_id: str, patch: Mapping[str, Any]) -> list[FieldDescriptor]:
        """Forward an attribute edit to the store.

        Args:
            field_id (str): Edited field id.
            patch (Mapping[str, Any]): Changed attributes.

        Returns:
            list[FieldDescriptor]: Updated schema.
        """
        return self.store.update_field(field_id, patch)

    def delete_field(self, field_id: str, *, confirmed: bool = False) -> list[FieldDescriptor]:
        """Delete a field once the author confirmed.

        Args:
            field_id (str): Field to delete.
            confirmed (bool): Whether the author confirmed the deletion.

        Raises:
            SchemaStoreError: If the deletion was not confirmed.

        Returns:
            list[FieldDescriptor]: Updated schema.
        """
        if not confirmed:
            raise SchemaStoreError(message=f"Deleting field '{field_id}' requires confirmation")
        return self.store.delete_field(field_id)

    def duplicate_field(self, field_id: str) -> list[FieldDescriptor]:
        """Duplicate a field right after itself."""
        return self.store.duplicate_field(field_id)

    def move_field(self, field_id: str, direction: MoveDirection | str) -> list[FieldDescriptor]:
        """Move a field one step up or down."""
        return self.store.move_field(field_id, direction)

    def add_option(self, field_id: str, value: str | None = None) -> list[FieldDescriptor]:
        """Append an option to a choice field."""
        return self.store.add_option(field_id, value)

    def update_option(self, field_id: str, position: int, value: str) -> list[FieldDescriptor]:
        """Rename an option of a choice field."""
        return self.store.update_option(field_id, position, value)

    def remove_option(self, field_id: str, position: int) -> list[FieldDescriptor]:
        """Remove an option of a choice field."""
        return self.store.remove_option(field_id, position)

    def open_settings(self, field_id: str) -> None:
        """Flag a field as being edited.

        Args:
            field_id (str): Field whose settings are opened.
        """
        self.store.get(field_id)
        self.store.pending_edit_id = field_id

    def close_settings(self) -> None:
        """Clear the field flagged for editing."""
        self.store.pending_edit_id = None

    def upload_image(self, field_id: str, file: FileUpload) -> FieldDescriptor:
        """Upload an image and record its URL on an image field.

        Args:
            field_id (str): Target image field id.
            file (FileUpload): Image chosen by the author.

        Raises:
            SchemaStoreError: If the field is not an image field.
            StorageError: If no storage is configured or the upload fails.

        Returns:
            FieldDescriptor: Updated image descriptor.
        """
        descriptor = self.store.get(field_id)
        if not isinstance(descriptor, ImageField):
            raise SchemaStoreError(message=f"Field '{field_id}' is not an image field")
        if self.storage is None:
            raise StorageError(message="No object storage configured for image uploads")

        asset = self.storage.upload(file, MediaFolder.FORM_BUILDER.value)
        self.store.update_field(field_id, {"image_url": asset.url, "source_mode": ImageSourceMode.UPLOAD})
        logger.info("Builder image uploaded", extra={"field_id": field_id, "public_id": asset.public_id})
        return self.store.get(field_id)

    def _card(self, descriptor: FieldDescriptor, position: int, last: int) -> BuilderCard:
        field_type = FIELD_TYPES[descriptor.field_kind]
        values = descriptor.to_payload()
        editable = [
            info.alias or name
            for name, info in type(descriptor).model_fields.items()
            if name not in _READ_ONLY_ATTRIBUTES
        ]
        return BuilderCard(
            field_id=descriptor.id,
            kind=descriptor.field_kind,
            title=field_type.title,
            icon=field_type.icon,
            position=position,
            can_move_up=position > 0,
            can_move_down=position < last,
            values={key: value for key, value in values.items() if key not in _READ_ONLY_ATTRIBUTES},
            editable=editable,
            options=list(descriptor.options) if isinstance(descriptor, ChoiceField) else None,
            preview_html=str(render_content(descriptor)) if descriptor.is_content else None,
            editing=self.store.pending_edit_id == descriptor.id,
        )
