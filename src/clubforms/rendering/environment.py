"""Jinja environment shared by every renderer."""

from __future__ import annotations

from functools import lru_cache

from jinja2 import Environment, PackageLoader, select_autoescape

from clubforms.settings import get_settings


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    """Return the cached template environment.

    Templates ship inside the package and are autoescaped; helpers that build
    markup return `markupsafe.Markup` so they pass through unescaped.

    Returns:
        Environment: Configured Jinja environment.
    """
    environment = Environment(
        loader=PackageLoader("clubforms", "templates"),
        autoescape=select_autoescape(enabled_extensions=("html", "j2"), default_for_string=True),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    environment.globals["site_name"] = get_settings().site_name
    return environment


def render_template(name: str, **context: object) -> str:
    """Render one packaged template.

    Args:
        name (str): Template file name below `clubforms/templates`.
        **context (object): Template variables.

    Returns:
        str: Rendered markup.
    """
    return get_environment().get_template(name).render(**context)
