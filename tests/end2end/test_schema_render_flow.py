from __future__ import annotations

from typing import TYPE_CHECKING

from clubforms import cli
from clubforms.schema_store import SchemaStore, load_schema_file, save_schema_file
from clubforms.settings import Settings
from clubforms.typing.enums import FieldKind

if TYPE_CHECKING:
    from pathlib import Path


def test_schema_init_edit_render_flow(mocker, tmp_path: Path) -> None:
    mocker.patch("clubforms.cli.get_settings", return_value=Settings(site_name="Coding Club", log_json=False))
    schema_path = tmp_path / "schemas" / "hack-night.json"

    assert cli.main(["schema", "init", "--output", str(schema_path)]) == 0

    store = SchemaStore.from_fields(load_schema_file(schema_path))
    link = store.add_field(FieldKind.LINK)
    store.update_field(link.id, {"linkUrl": "https://club.example.org/rules", "linkText": "Rules"})
    save_schema_file(store.snapshot(), schema_path)

    assert cli.main(["schema", "check", "--input", str(schema_path)]) == 0

    public_path = tmp_path / "out" / "form.html"
    builder_path = tmp_path / "out" / "builder.html"
    assert cli.main(["render", "--schema", str(schema_path), "--output", str(public_path)]) == 0
    assert cli.main(["render", "--schema", str(schema_path), "--output", str(builder_path), "--builder"]) == 0

    public_html = public_path.read_text(encoding="utf-8")
    assert "Coding Club" in public_html
    assert "Full Name" in public_html
    assert 'href="https://club.example.org/rules"' in public_html
    assert "Rules" in public_html
    assert "Full Name" in builder_path.read_text(encoding="utf-8")
