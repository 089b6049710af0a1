from __future__ import annotations

import pytest

from clubforms.exceptions import ResponseError
from clubforms.fields import default_form_schema
from clubforms.rendering.public import PublicForm
from clubforms.typing.models import (
    ChoiceField,
    FileField,
    FileUpload,
    LabelField,
    TextField,
)


@pytest.fixture
def form() -> PublicForm:
    schema = [
        LabelField(id="intro", kind="label", content="Welcome!"),
        TextField(id="name", kind="text", label="Full Name", required=True, placeholder="Your name"),
        TextField(id="phone", kind="phone", label="Phone"),
        TextField(id="bio", kind="textarea", label="About you"),
        ChoiceField(id="year", kind="select", label="Year", options=["1st", "2nd"]),
        ChoiceField(id="track", kind="radio", label="Track", options=["Web", "ML"], required=True),
        ChoiceField(id="skills", kind="checkbox", label="Skills", options=["Python", "Go", "Rust"]),
        FileField(id="cv", kind="file", label="CV", accepted_file_types=".pdf"),
    ]
    return PublicForm(schema)


def test_controls_follow_schema_order(form: PublicForm) -> None:
    controls = form.controls()

    assert [control.field_id for control in controls] == [field.id for field in form.schema]
    assert controls[0].is_content is True
    assert controls[0].content_html is not None
    assert "Welcome!" in controls[0].content_html


def test_required_fields_are_marked(form: PublicForm) -> None:
    controls = {control.field_id: control for control in form.controls()}

    assert controls["name"].display_label == "Full Name *"
    assert controls["phone"].display_label == "Phone"
    assert controls["phone"].input_type == "tel"


def test_set_value_routes_by_field_id(form: PublicForm) -> None:
    form.set_value("name", "Asha")
    form.set_value("year", "2nd")
    form.set_value("track", "ML")

    assert form.responses == {"name": "Asha", "year": "2nd", "track": "ML"}


def test_set_value_rejects_unknown_option(form: PublicForm) -> None:
    with pytest.raises(ResponseError, match="not an option"):
        form.set_value("year", "5th")
    form.set_value("year", "")
    assert form.responses["year"] == ""


@pytest.mark.parametrize(
    ("field_id", "message"),
    [
        ("skills", "use toggle_option"),
        ("cv", "use attach_file"),
        ("intro", "static content"),
        ("missing", "Unknown field id"),
    ],
)
def test_set_value_rejects_wrong_targets(form: PublicForm, field_id: str, message: str) -> None:
    with pytest.raises(ResponseError, match=message):
        form.set_value(field_id, "x")


def test_toggle_option_keeps_selection_order(form: PublicForm) -> None:
    form.toggle_option("skills", "Rust")
    form.toggle_option("skills", "Python")
    form.toggle_option("skills", "Go")
    form.toggle_option("skills", "Python")

    assert form.responses["skills"] == ["Rust", "Go"]

    form.toggle_option("skills", "Go", checked=True)
    form.toggle_option("skills", "Python", checked=False)
    assert form.responses["skills"] == ["Rust", "Go"]


def test_toggle_option_requires_checkbox(form: PublicForm) -> None:
    with pytest.raises(ResponseError, match="not a checkbox"):
        form.toggle_option("track", "Web")
    with pytest.raises(ResponseError, match="not an option"):
        form.toggle_option("skills", "Java")


def test_attach_file_and_clear(form: PublicForm) -> None:
    upload = FileUpload(file_name="cv.pdf", content=b"%PDF", content_type="application/pdf")

    form.attach_file("cv", upload)
    controls = {control.field_id: control for control in form.controls()}
    assert form.responses["cv"] == upload
    assert controls["cv"].file_name == "cv.pdf"
    assert controls["cv"].accept == ".pdf"

    form.attach_file("cv", None)
    assert "cv" not in form.responses

    with pytest.raises(ResponseError, match="not a file field"):
        form.attach_file("name", upload)


def test_clear_drops_every_value(form: PublicForm) -> None:
    form.set_value("name", "Asha")
    form.clear()
    assert form.responses == {}


def test_render_html_reflects_responses(form: PublicForm) -> None:
    form.set_value("track", "ML")
    form.toggle_option("skills", "Go")

    html = form.render_html(title="Hack Night", action="/register")

    assert "<h2" in html
    assert "Hack Night" in html
    assert 'action="/register"' in html
    assert 'id="track-1" name="track" value="ML" checked required' in html
    assert 'id="skills-1" name="skills" value="Go" checked' in html
    assert 'id="skills-0" name="skills" value="Python">' in html
    assert "<textarea" in html
    assert 'type="tel"' in html
    assert ">Select an option</option>" in html
    assert 'accept=".pdf"' in html
    assert "Submit Registration" in html


def test_render_html_escapes_authored_text() -> None:
    form = PublicForm([TextField(id="name", kind="text", label="<b>Name</b>", placeholder='"quoted"')])

    html = form.render_html()

    assert "<b>Name</b>" not in html
    assert "&lt;b&gt;Name&lt;/b&gt;" in html
    assert "&#34;quoted&#34;" in html


def test_default_schema_renders_every_input() -> None:
    html = PublicForm(default_form_schema()).render_html()

    for field_id in ("name", "rollNo", "email", "phone", "year", "branch"):
        assert f'name="{field_id}"' in html
    assert html.count(" required") == 6
