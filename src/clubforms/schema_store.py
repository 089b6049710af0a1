"""In-memory form schema store and schema file persistence."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_snake

from clubforms import logger
from clubforms.exceptions import FieldNotFoundError, SchemaFileError, SchemaStoreError
from clubforms.fields import create_default, default_form_schema, new_field_id
from clubforms.typing.enums import FieldKind, MoveDirection
from clubforms.typing.models import ChoiceField, FieldDescriptor, parse_field, parse_fields

_SCHEMA_FILE_VERSION = 1
_IMMUTABLE_ATTRIBUTES = frozenset({"id", "kind"})


class SchemaStore(BaseModel):
    """Ordered form schema with invariant-preserving mutations.

    Every mutation is synchronous and returns the full updated sequence. The
    store never persists anything; callers decide when to save the schema.
    """

    model_config = ConfigDict(extra="forbid")

    descriptors: list[FieldDescriptor] = Field(default_factory=list, description="Schema in display order.")
    pending_edit_id: str | None = Field(
        default=None,
        description="Id of a freshly added content field whose settings should open right away.",
    )

    @classmethod
    def from_fields(cls, fields: Iterable[FieldDescriptor | Mapping[str, Any]]) -> SchemaStore:
        """Build a store from descriptors or stored payloads.

        Args:
            fields (Iterable[FieldDescriptor | Mapping[str, Any]]): Schema entries.

        Returns:
            SchemaStore: Store holding the validated schema.
        """
        return cls(descriptors=parse_fields(list(fields)))

    @classmethod
    def with_default_schema(cls) -> SchemaStore:
        """Build a store holding the default registration schema.

        Returns:
            SchemaStore: Store for a new activity.
        """
        return cls(descriptors=default_form_schema())

    def snapshot(self) -> tuple[FieldDescriptor, ...]:
        """Return an immutable copy of the schema.

        Returns:
            tuple[FieldDescriptor, ...]: Frozen descriptors in display order.
        """
        return tuple(self.descriptors)

    def get(self, field_id: str) -> FieldDescriptor:
        """Return the descriptor with the given id.

        Args:
            field_id (str): Field id.

        Returns:
            FieldDescriptor: Matching descriptor.
        """
        return self.descriptors[self._index_of(field_id)]

    def add_field(self, kind: FieldKind | str) -> FieldDescriptor:
        """Append a new default descriptor of `kind`.

        Args:
            kind (FieldKind | str): Kind of the new field.

        Returns:
            FieldDescriptor: The appended descriptor.
        """
        descriptor = create_default(kind, field_id=self._fresh_id())
        self.descriptors = [*self.descriptors, descriptor]
        if descriptor.is_content:
            self.pending_edit_id = descriptor.id
        logger.info("Field added", extra={"field_id": descriptor.id, "kind": descriptor.kind})
        return descriptor

    def update_field(self, field_id: str, patch: Mapping[str, Any]) -> list[FieldDescriptor]:
        """Merge attributes into one descriptor.

        Args:
            field_id (str): Id of the descriptor to update.
            patch (Mapping[str, Any]): Attributes to merge, snake_case or camelCase keys.

        Raises:
            SchemaStoreError: If the patch changes `id`/`kind`, sets an attribute the kind
                does not have, or produces an invalid descriptor.

        Returns:
            list[FieldDescriptor]: Updated schema.
        """
        index = self._index_of(field_id)
        current = self.descriptors[index]
        changes = _normalize_patch(current, patch)
        try:
            updated = parse_field({**current.model_dump(), **changes})
        except ValidationError as exc:
            raise SchemaStoreError(message=f"Invalid update for field '{field_id}': {exc}") from exc
        return self._replace(index, updated)

    def delete_field(self, field_id: str) -> list[FieldDescriptor]:
        """Remove a descriptor.

        Args:
            field_id (str): Id of the descriptor to remove.

        Returns:
            list[FieldDescriptor]: Updated schema.
        """
        index = self._index_of(field_id)
        self.descriptors = [*self.descriptors[:index], *self.descriptors[index + 1 :]]
        if self.pending_edit_id == field_id:
            self.pending_edit_id = None
        logger.info("Field deleted", extra={"field_id": field_id})
        return list(self.descriptors)

    def duplicate_field(self, field_id: str) -> list[FieldDescriptor]:
        """Insert a copy of a descriptor right after it.

        Args:
            field_id (str): Id of the source descriptor.

        Returns:
            list[FieldDescriptor]: Updated schema.
        """
        index = self._index_of(field_id)
        source = self.descriptors[index]
        copy = source.model_copy(
            update={"id": self._fresh_id(), "label": f"{source.label} (Copy)"},
            deep=True,
        )
        self.descriptors = [*self.descriptors[: index + 1], copy, *self.descriptors[index + 1 :]]
        return list(self.descriptors)

    def move_field(self, field_id: str, direction: MoveDirection | str) -> list[FieldDescriptor]:
        """Swap a descriptor with its neighbour.

        Moving the first entry up or the last entry down leaves the schema unchanged.

        Args:
            field_id (str): Id of the descriptor to move.
            direction (MoveDirection | str): `up` or `down`.

        Returns:
            list[FieldDescriptor]: Updated schema.
        """
        index = self._index_of(field_id)
        step = -1 if MoveDirection.from_str(str(direction)) == MoveDirection.UP else 1
        target = index + step
        if not 0 <= target < len(self.descriptors):
            return list(self.descriptors)
        reordered = list(self.descriptors)
        reordered[index], reordered[target] = reordered[target], reordered[index]
        self.descriptors = reordered
        return list(self.descriptors)

    def add_option(self, field_id: str, value: str | None = None) -> list[FieldDescriptor]:
        """Append an option to a choice field.

        Args:
            field_id (str): Id of a select, radio or checkbox field.
            value (str | None): Option text; defaults to "Option <n>".

        Returns:
            list[FieldDescriptor]: Updated schema.
        """
        index, field = self._choice_field(field_id)
        option = value if value is not None else f"Option {len(field.options) + 1}"
        updated = field.model_copy(update={"options": [*field.options, option]})
        return self._replace(index, updated)

    def update_option(self, field_id: str, position: int, value: str) -> list[FieldDescriptor]:
        """Replace the text of one option.

        Args:
            field_id (str): Id of a choice field.
            position (int): Zero-based option index.
            value (str): New option text.

        Returns:
            list[FieldDescriptor]: Updated schema.
        """
        index, field = self._choice_field(field_id)
        _check_option_position(field, position)
        options = list(field.options)
        options[position] = value
        return self._replace(index, field.model_copy(update={"options": options}))

    def remove_option(self, field_id: str, position: int) -> list[FieldDescriptor]:
        """Remove one option, keeping at least one.

        Args:
            field_id (str): Id of a choice field.
            position (int): Zero-based option index.

        Raises:
            SchemaStoreError: If the option is the last one left.

        Returns:
            list[FieldDescriptor]: Updated schema.
        """
        index, field = self._choice_field(field_id)
        _check_option_position(field, position)
        if len(field.options) <= 1:
            raise SchemaStoreError(message=f"Field '{field_id}' must keep at least one option")
        options = [option for i, option in enumerate(field.options) if i != position]
        return self._replace(index, field.model_copy(update={"options": options}))

    def _replace(self, index: int, descriptor: FieldDescriptor) -> list[FieldDescriptor]:
        updated = list(self.descriptors)
        updated[index] = descriptor
        self.descriptors = updated
        return list(self.descriptors)

    def _index_of(self, field_id: str) -> int:
        for index, descriptor in enumerate(self.descriptors):
            if descriptor.id == field_id:
                return index
        raise FieldNotFoundError(message=f"Unknown field id: {field_id}", field_id=field_id)

    def _choice_field(self, field_id: str) -> tuple[int, ChoiceField]:
        index = self._index_of(field_id)
        descriptor = self.descriptors[index]
        if not isinstance(descriptor, ChoiceField):
            raise SchemaStoreError(message=f"Field '{field_id}' of kind '{descriptor.kind}' has no options")
        return index, descriptor

    def _fresh_id(self) -> str:
        existing = {descriptor.id for descriptor in self.descriptors}
        candidate = new_field_id()
        while candidate in existing:
            candidate = new_field_id()
        return candidate


def _normalize_patch(current: FieldDescriptor, patch: Mapping[str, Any]) -> dict[str, Any]:
    """Map patch keys to model attribute names and reject inapplicable ones.

    Args:
        current (FieldDescriptor): Descriptor being updated.
        patch (Mapping[str, Any]): Raw patch.

    Raises:
        SchemaStoreError: If a key is immutable or does not apply to the kind.

    Returns:
        dict[str, Any]: Patch keyed by attribute name.
    """
    known = type(current).model_fields
    changes: dict[str, Any] = {}
    for key, value in patch.items():
        name = to_snake(key)
        if name not in known:
            raise SchemaStoreError(message=f"Attribute '{key}' does not apply to '{current.kind}' fields")
        if name in _IMMUTABLE_ATTRIBUTES and value != getattr(current, name):
            raise SchemaStoreError(message=f"Attribute '{key}' of field '{current.id}' cannot be changed")
        if name == "options" and isinstance(current, ChoiceField) and not value:
            raise SchemaStoreError(message=f"Field '{current.id}' must keep at least one option")
        changes[name] = value
    return changes


def _check_option_position(field: ChoiceField, position: int) -> None:
    if not 0 <= position < len(field.options):
        raise SchemaStoreError(message=f"Field '{field.id}' has no option at position {position}")


def save_schema_file(fields: Iterable[FieldDescriptor], path: Path) -> Path:
    """Write a schema to a versioned JSON file.

    Args:
        fields (Iterable[FieldDescriptor]): Schema entries.
        path (Path): Target file path.

    Returns:
        Path: Written file path.
    """
    envelope = {
        "schema_file_version": _SCHEMA_FILE_VERSION,
        "form_schema": [field.to_payload() for field in fields],
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(envelope, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Schema file written", extra={"schema_path": str(path)})
    return path


def load_schema_file(path: Path) -> list[FieldDescriptor]:
    """Load and validate a schema file.

    Args:
        path (Path): Schema file path.

    Raises:
        SchemaFileError: If the file is missing, not JSON, or holds an invalid schema.

    Returns:
        list[FieldDescriptor]: Validated schema.
    """
    _validate_schema_file_path(path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SchemaFileError(message=f"Schema file is not valid JSON: {path}") from exc
    try:
        return parse_fields(_migrate_schema_payload(payload))
    except ValidationError as exc:
        raise SchemaFileError(message=f"Invalid schema in {path}: {exc}") from exc


def _migrate_schema_payload(payload: object) -> list[object]:
    """Extract the descriptor list from any supported file layout.

    Supported layouts: the versioned envelope, an activity-like object with a
    `formSchema` key, and a bare list of descriptors.

    Args:
        payload (object): Raw JSON payload.

    Raises:
        SchemaFileError: If no descriptor list can be found.

    Returns:
        list[object]: Raw descriptor payloads.
    """
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        raise SchemaFileError(message="Schema payload must be a JSON object or list")

    payload_obj = cast("dict[str, object]", payload)
    for key in ("form_schema", "formSchema"):
        embedded = payload_obj.get(key)
        if isinstance(embedded, list):
            return embedded
    raise SchemaFileError(message="Schema payload has no 'form_schema' list")


def _validate_schema_file_path(path: Path) -> None:
    """Validate schema file path before loading.

    Args:
        path (Path): Schema file path.

    Raises:
        SchemaFileError: If path is not a `pathlib.Path` or not a readable JSON file.
    """
    if not isinstance(path, Path):
        raise SchemaFileError(message=f"Schema path must be a pathlib.Path instance, got: {type(path)!r}")
    if not path.is_file():
        raise SchemaFileError(message=f"Schema path is not a file: {path}")
    if path.suffix != ".json":
        raise SchemaFileError(message=f"Schema path must end with '.json': {path}")
