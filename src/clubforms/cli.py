"""CLI entry point for clubforms."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from clubforms import __version__, logger
from clubforms.dependencies import ensure_cli_dependencies_for_export
from clubforms.exceptions import ExportError, PackageError
from clubforms.export import write_submissions_csv
from clubforms.fields import default_form_schema
from clubforms.logging import configure_logging
from clubforms.rendering import FormBuilder, PublicForm
from clubforms.schema_store import SchemaStore, load_schema_file, save_schema_file
from clubforms.settings import get_settings
from clubforms.typing.models import ChoiceField

if TYPE_CHECKING:
    from clubforms.settings import Settings


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser.

    Returns:
        argparse.ArgumentParser: The configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="clubforms")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    schema_parser = subparsers.add_parser("schema", help="Create or check form schema files")
    schema_commands = schema_parser.add_subparsers(dest="schema_command")
    init_parser = schema_commands.add_parser("init", help="Write the default registration schema")
    init_parser.add_argument(
        "--output",
        type=Path,
        default=Path("schemas/default.json"),
        dest="output_path",
    )
    check_parser = schema_commands.add_parser("check", help="Validate a schema file")
    check_parser.add_argument("--input", required=True, type=Path, dest="input_path")

    render_parser = subparsers.add_parser("render", help="Render a schema file to HTML")
    render_parser.add_argument("--schema", required=True, type=Path, dest="schema_path")
    render_parser.add_argument("--output", required=True, type=Path, dest="output_path")
    render_parser.add_argument("--builder", action="store_true", help="Render the admin builder view")
    render_parser.add_argument("--title", default=None)

    export_parser = subparsers.add_parser("export", help="Export an activity's submissions as CSV")
    export_parser.add_argument("--activity-id", required=True, dest="activity_id")
    export_parser.add_argument("--output", type=Path, default=Path("results"), dest="output_path")

    media_parser = subparsers.add_parser("media", help="Browse or delete stored images")
    media_commands = media_parser.add_subparsers(dest="media_command")
    list_parser = media_commands.add_parser("list", help="List images, newest first")
    list_parser.add_argument("--folder", default=None, help="Browser folder, or 'all'")
    delete_parser = media_commands.add_parser("delete", help="Delete an image")
    delete_parser.add_argument("public_id")

    return parser


def _schema_init(args: argparse.Namespace) -> int:
    path = save_schema_file(default_form_schema(), args.output_path)
    logger.info("Default schema written", extra={"output_path": str(path)})
    return 0


def _schema_check(args: argparse.Namespace) -> int:
    """Validate a schema file and report choice fields without options.

    Args:
        args (argparse.Namespace): Parsed CLI args.

    Returns:
        int: 0 when the schema is usable, 1 otherwise.
    """
    fields = load_schema_file(args.input_path)
    empty = [field.id for field in fields if isinstance(field, ChoiceField) and not field.options]
    duplicates = sorted({field.id for field in fields if sum(other.id == field.id for other in fields) > 1})
    if empty or duplicates:
        logger.error(
            "Schema check failed",
            extra={"input_path": str(args.input_path), "fields_without_options": empty, "duplicate_ids": duplicates},
        )
        return 1
    logger.info("Schema check passed", extra={"input_path": str(args.input_path), "fields": len(fields)})
    return 0


def _render(args: argparse.Namespace, settings: Settings) -> int:
    fields = load_schema_file(args.schema_path)
    title = args.title or settings.site_name
    if args.builder:
        html = FormBuilder(SchemaStore.from_fields(fields)).render_html()
    else:
        html = PublicForm(fields).render_html(title=title)
    args.output_path.parent.mkdir(parents=True, exist_ok=True)
    args.output_path.write_text(html, encoding="utf-8")
    logger.info("Form rendered", extra={"output_path": str(args.output_path), "builder": args.builder})
    return 0


def _export(args: argparse.Namespace, settings: Settings) -> int:
    ensure_cli_dependencies_for_export()
    from clubforms.backends.supabase_store import SupabaseDocumentStore  # noqa: PLC0415

    store = SupabaseDocumentStore.from_settings(settings)
    records = store.list_registrations(args.activity_id)
    if not args.output_path.suffix:
        args.output_path.mkdir(parents=True, exist_ok=True)
    try:
        path = write_submissions_csv(records, args.output_path)
    except ExportError as exc:
        logger.warning(str(exc), extra={"activity_id": args.activity_id})
        return 1
    logger.info("Export completed", extra={"output_path": str(path)})
    return 0


def _media(args: argparse.Namespace, settings: Settings) -> int:
    from clubforms.backends.cloudinary import CloudinaryStorage  # noqa: PLC0415
    from clubforms.media import MediaLibrary  # noqa: PLC0415

    library = MediaLibrary(CloudinaryStorage.from_settings(settings))
    if args.media_command == "delete":
        library.delete(args.public_id)
        return 0
    for asset in library.list_images(args.folder):
        sys.stdout.write(f"{asset.public_id}\t{asset.folder}\t{asset.url}\n")
    return 0


def _dispatch(parser: argparse.ArgumentParser, args: argparse.Namespace, settings: Settings) -> int:
    """Run the selected command.

    Args:
        parser (argparse.ArgumentParser): Parser used to print help for incomplete commands.
        args (argparse.Namespace): Parsed CLI args.
        settings (Settings): Runtime settings.

    Returns:
        int: Exit code.
    """
    match args.command, getattr(args, "schema_command", None), getattr(args, "media_command", None):
        case "schema", "init", _:
            return _schema_init(args)
        case "schema", "check", _:
            return _schema_check(args)
        case "render", _, _:
            return _render(args, settings)
        case "export", _, _:
            return _export(args, settings)
        case "media", _, "list" | "delete":
            return _media(args, settings)
        case _:
            parser.print_help()
            return 0


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Args:
        argv (list[str] | None): Arguments, defaults to `sys.argv[1:]`.

    Returns:
        int: Exit code (0 for success, 1 for error, 130 when interrupted).
    """
    settings = get_settings()
    configure_logging(settings=settings)

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return _dispatch(parser, args, settings)
    except PackageError:
        logger.exception("Command failed", extra={"command": args.command})
        return 1
    except KeyboardInterrupt:
        logger.info("Command aborted by user")
        return 130
    except Exception:
        logger.exception("Unexpected error", extra={"command": args.command})
        return 1
    finally:
        settings.close_http_client()


if __name__ == "__main__":
    raise SystemExit(main())
