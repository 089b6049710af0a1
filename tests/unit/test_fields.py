from __future__ import annotations

import pytest

from clubforms.fields import (
    BRANCH_OPTIONS,
    FIELD_TYPES,
    PLACEHOLDER_IMAGE_URL,
    YEAR_OPTIONS,
    create_default,
    default_form_schema,
    field_title,
    new_field_id,
)
from clubforms.typing.enums import FieldKind
from clubforms.typing.models import ChoiceField, FileField, ImageField, LabelField, LinkField, TextField


def test_every_kind_has_a_field_type() -> None:
    assert set(FIELD_TYPES) == set(FieldKind)
    assert field_title("phone") == "Phone Number"


@pytest.mark.parametrize("kind", list(FieldKind))
def test_create_default_labels_new_field(kind: FieldKind) -> None:
    field = create_default(kind, field_id="f1")

    assert field.id == "f1"
    assert field.label == f"New {FIELD_TYPES[kind].title}"
    assert field.field_kind == kind
    assert field.required is False


@pytest.mark.parametrize("kind", ["select", "radio", "checkbox"])
def test_create_default_choice_fields_have_two_options(kind: str) -> None:
    field = create_default(kind)

    assert isinstance(field, ChoiceField)
    assert field.options == ["Option 1", "Option 2"]


def test_create_default_kind_specific_attributes() -> None:
    file_field = create_default("file")
    image = create_default("image")
    link = create_default("link")
    label = create_default("label")
    text = create_default("email")

    assert isinstance(file_field, FileField)
    assert file_field.accepted_file_types == "*"
    assert isinstance(image, ImageField)
    assert image.image_url == PLACEHOLDER_IMAGE_URL
    assert image.alt_text == "Form image"
    assert isinstance(link, LinkField)
    assert link.link_text == "Click here"
    assert link.link_url.startswith("https://")
    assert isinstance(label, LabelField)
    assert label.content
    assert isinstance(text, TextField)
    assert text.placeholder == ""


_KIND_ONLY_ATTRIBUTES: dict[str, set[FieldKind]] = {
    "options": {FieldKind.SELECT, FieldKind.RADIO, FieldKind.CHECKBOX},
    "acceptedFileTypes": {FieldKind.FILE},
    "content": {FieldKind.LABEL},
    "fontSize": {FieldKind.LABEL},
    "imageUrl": {FieldKind.IMAGE},
    "altText": {FieldKind.IMAGE},
    "imageSize": {FieldKind.IMAGE},
    "linkUrl": {FieldKind.LINK},
    "linkText": {FieldKind.LINK},
    "buttonStyle": {FieldKind.LINK},
}


@pytest.mark.parametrize("kind", list(FieldKind))
def test_create_default_payload_omits_inapplicable_attributes(kind: FieldKind) -> None:
    payload = create_default(kind, field_id="f1").to_payload()

    assert payload["kind"] == kind.value
    for attribute, kinds in _KIND_ONLY_ATTRIBUTES.items():
        assert (attribute in payload) is (kind in kinds), attribute
    if kind.is_content:
        assert "placeholder" not in payload
        assert "helpText" not in payload
    else:
        assert "placeholder" in payload
        assert "helpText" in payload


def test_create_default_rejects_unknown_kind() -> None:
    with pytest.raises(ValueError, match="Unsupported FieldKind"):
        create_default("signature")


def test_new_field_id_is_unique() -> None:
    ids = {new_field_id() for _ in range(200)}
    assert len(ids) == 200
    assert all(identifier.startswith("field_") for identifier in ids)


def test_default_form_schema() -> None:
    schema = default_form_schema()

    assert [field.id for field in schema] == ["name", "rollNo", "email", "phone", "year", "branch"]
    assert all(field.required for field in schema)
    year, branch = schema[4], schema[5]
    assert isinstance(year, ChoiceField)
    assert year.options == YEAR_OPTIONS
    assert isinstance(branch, ChoiceField)
    assert branch.options == BRANCH_OPTIONS


def test_default_form_schema_returns_fresh_lists() -> None:
    first = default_form_schema()
    second = default_form_schema()
    assert first == second
    assert first is not second
