"""HTML renderers for the builder and the public form."""

from clubforms.rendering.builder import FormBuilder
from clubforms.rendering.content import render_content, render_markdown_links
from clubforms.rendering.public import PublicForm

__all__ = ["FormBuilder", "PublicForm", "render_content", "render_markdown_links"]
