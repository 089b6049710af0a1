"""Static rendering of content fields.

The builder preview and the public form both call `render_content`, so an
authored label, image or link looks the same on both surfaces.
"""

from __future__ import annotations

import re

from markupsafe import Markup, escape

from clubforms.rendering.environment import render_template
from clubforms.typing.enums import Alignment, ButtonStyle, FontSize, ImageSize
from clubforms.typing.models import ContentField, ImageField, LabelField, LinkField

MARKDOWN_LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_SAFE_URL_PATTERN = re.compile(r"^(?:https?://|mailto:|/|#|\./|\.\./)", re.IGNORECASE)
_SCHEME_PATTERN = re.compile(r"^[a-z][a-z0-9+.-]*:", re.IGNORECASE)
_URL_IGNORED_CHARACTERS = re.compile(r"[\t\r\n]")
_C0_AND_SPACE = "".join(chr(code) for code in range(0x21))

FONT_SIZE_CLASSES: dict[FontSize, str] = {
    FontSize.SMALL: "text-sm",
    FontSize.MEDIUM: "text-base",
    FontSize.LARGE: "text-lg",
    FontSize.XL: "text-xl",
}

ALIGNMENT_CLASSES: dict[Alignment, str] = {
    Alignment.LEFT: "text-left",
    Alignment.CENTER: "text-center",
    Alignment.RIGHT: "text-right",
}

IMAGE_SIZE_CLASSES: dict[ImageSize, str] = {
    ImageSize.SMALL: "max-w-xs",
    ImageSize.MEDIUM: "max-w-md",
    ImageSize.LARGE: "max-w-2xl",
    ImageSize.FULL: "w-full",
}

BUTTON_CLASSES: dict[ButtonStyle, str] = {
    ButtonStyle.PRIMARY: "bg-blue-500 text-white hover:bg-blue-600 px-4 py-2 rounded-lg",
    ButtonStyle.SECONDARY: "bg-gray-500 text-white hover:bg-gray-600 px-4 py-2 rounded-lg",
    ButtonStyle.OUTLINE: "border border-blue-500 text-blue-500 hover:bg-blue-50 px-4 py-2 rounded-lg",
    ButtonStyle.LINK: "text-blue-600 hover:underline",
}

DEFAULT_ALT_TEXT = "Form image"
DEFAULT_LINK_TEXT = "Click here"


def is_safe_url(url: str) -> bool:
    """Return whether a URL may be used as a link target.

    Web, mail, anchor and relative URLs are accepted; other schemes
    (`javascript:`, `data:`, ...) are not.

    Args:
        url (str): Candidate URL.

    Returns:
        bool: True when the URL can be emitted in an `href`/`src`.
    """
    # Browsers drop tabs and newlines anywhere and C0 controls around the URL.
    candidate = _URL_IGNORED_CHARACTERS.sub("", url).strip(_C0_AND_SPACE)
    if not candidate:
        return False
    if _SAFE_URL_PATTERN.match(candidate):
        return True
    return not _SCHEME_PATTERN.match(candidate)


def render_markdown_links(text: str | None) -> Markup:
    """Escape text and expand `[text](url)` spans into anchors.

    Spans whose URL is not safe are kept as escaped plain text.

    Args:
        text (str | None): Authored content.

    Returns:
        Markup: HTML-safe markup.
    """
    if not text:
        return Markup("")

    parts: list[str] = []
    cursor = 0
    for match in MARKDOWN_LINK_PATTERN.finditer(text):
        parts.append(escape(text[cursor : match.start()]))
        link_text, url = match.group(1), match.group(2)
        if is_safe_url(url):
            parts.append(
                Markup(
                    '<a href="{}" target="_blank" rel="noopener noreferrer" class="text-blue-600 hover:underline">'
                    "{}</a>",
                ).format(url.strip(), link_text),
            )
        else:
            parts.append(escape(match.group(0)))
        cursor = match.end()
    parts.append(escape(text[cursor:]))
    return Markup("").join(parts)


def render_content(field: ContentField) -> Markup:
    """Render a label, image or link field as static markup.

    Args:
        field (ContentField): Content descriptor.

    Returns:
        Markup: Rendered HTML fragment.
    """
    match field:
        case LabelField():
            html = render_template(
                "content.html.j2",
                field=field,
                align_class=ALIGNMENT_CLASSES[field.alignment],
                font_class=FONT_SIZE_CLASSES[field.font_size],
                body=render_markdown_links(field.content),
            )
        case ImageField():
            html = render_template(
                "content.html.j2",
                field=field,
                align_class=ALIGNMENT_CLASSES[field.alignment],
                size_class=IMAGE_SIZE_CLASSES[field.image_size],
                image_url=field.image_url if is_safe_url(field.image_url) else "",
                click_url=field.click_url if field.click_url and is_safe_url(field.click_url) else None,
                alt_text=field.alt_text or DEFAULT_ALT_TEXT,
            )
        case LinkField():
            html = render_template(
                "content.html.j2",
                field=field,
                href=field.link_url if is_safe_url(field.link_url) else "#",
                button_class=BUTTON_CLASSES[field.button_style],
                link_text=field.link_text or DEFAULT_LINK_TEXT,
            )
    return Markup(html.strip())
