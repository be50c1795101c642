"""
Content formatting utilities for converting Movable Type text to WordPress HTML.

This module provides the Movable Type line-break-to-paragraph transform
(``MT::Util::html_text_transform``), the dispatcher that picks a transform
from an entry's ``convert_breaks`` setting, and the WordPress slug
sanitizer (``sanitize_title_with_dashes``), which has to match WordPress
exactly because slugs end up in permanent URLs.
"""

import re
from typing import Callable, Dict, Optional, Union

from mt_migrator.constants import (
    BLOCK_TAGS,
    CONVERT_DEFAULT,
    CONVERT_NONE,
    KNOWN_UNHANDLED_FORMATS,
)
from mt_migrator.utils.logging import logger

Renderer = Callable[[str], str]

_PARAGRAPH_BREAK = re.compile(r"(?:\r?\n){2,}")
_LINE_BREAK = re.compile(r"\r?\n")
_BLOCK_TAG_START = re.compile(
    r"^</?(?:" + "|".join(BLOCK_TAGS) + r")", re.IGNORECASE
)

_TAG = re.compile(r"<[^>]*>")
_OCTET = re.compile(r"%([a-fA-F0-9][a-fA-F0-9])")
_PRESERVED_OCTET = re.compile(r"---([a-fA-F0-9][a-fA-F0-9])---")
_ENTITY = re.compile(r"&.+?;")
_DISALLOWED = re.compile(r"[^%a-z0-9 _-]")
_WHITESPACE = re.compile(r"\s+")
_DASHES = re.compile(r"-+")
_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)


def convert_line_breaks(content: str) -> str:
    """
    Convert blank-line separated text into HTML paragraphs.

    Paragraphs that already start with a block-level tag are left alone;
    every other paragraph has its single line breaks turned into ``<br/>``
    and is wrapped in ``<p>``.
    """
    if not content:
        return ""

    paragraphs = []
    for paragraph in _PARAGRAPH_BREAK.split(content):
        if not _BLOCK_TAG_START.match(paragraph):
            paragraph = "<p>" + _LINE_BREAK.sub("<br/>\n", paragraph) + "</p>"
        paragraphs.append(paragraph)

    return "\n\n".join(paragraphs)


def join_entry_text(entry_text: Optional[str], entry_text_more: Optional[str]) -> str:
    """Join the entry body and its extended text with a blank line."""
    content = entry_text or ""
    if entry_text_more:
        content += "\n\n" + entry_text_more
    return content


class ContentFormatter:
    """
    Default content-format strategy.

    Called with an entry's text, extended text and ``convert_breaks`` value,
    returns WordPress-ready HTML. ``"0"`` means the text is already HTML,
    ``"__default__"`` applies the line break transform. Renderers for the
    other Movable Type formats (markdown, textile, ...) can be plugged in
    with :meth:`register`; formats without a renderer pass through.
    """

    def __init__(self, renderers: Optional[Dict[str, Renderer]] = None):
        self.renderers: Dict[str, Renderer] = {
            CONVERT_NONE: lambda content: content,
            CONVERT_DEFAULT: convert_line_breaks,
        }
        if renderers:
            self.renderers.update(renderers)

    def register(self, mode: str, renderer: Renderer) -> None:
        """Register (or replace) the renderer for a convert_breaks mode."""
        self.renderers[mode] = renderer

    def __call__(
        self,
        entry_text: Optional[str],
        entry_text_more: Optional[str],
        convert_breaks: Optional[str],
    ) -> str:
        content = join_entry_text(entry_text, entry_text_more)

        renderer = self.renderers.get(convert_breaks) if convert_breaks is not None else None
        if renderer is not None:
            return renderer(content)

        if convert_breaks in KNOWN_UNHANDLED_FORMATS:
            logger.debug(f"No renderer for format '{convert_breaks}', passing through")
        else:
            logger.warning(
                f"Unknown convert_breaks value {convert_breaks!r}, passing content through"
            )
        return content


def seems_utf8(value: bytes) -> bool:
    """Return True if the byte string is valid UTF-8."""
    try:
        value.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


def utf8_uri_encode(utf8_string: str, length: int = 0) -> str:
    """
    Percent-encode the non-ASCII characters of a string, WordPress style.

    Multibyte characters become lowercase ``%xx`` octets. When ``length`` is
    given, encoding stops before the output would exceed it; a multibyte
    character is never split.
    """
    unicode = []
    unicode_length = 0

    for char in utf8_string:
        if ord(char) < 128:
            if length and unicode_length >= length:
                break
            unicode.append(char)
            unicode_length += 1
        else:
            octets = char.encode("utf-8")
            if length and unicode_length + len(octets) * 3 > length:
                break
            unicode.extend(f"%{octet:x}" for octet in octets)
            unicode_length += len(octets) * 3

    return "".join(unicode)


def sanitize_title_with_dashes(title: Union[str, bytes]) -> str:
    """
    Sanitize a title into a URL slug, reproducing WordPress 4.x.

    Limits the output to lowercase alphanumerics, percent octets, underscore
    and dash; whitespace becomes a dash. Existing percent-escapes survive,
    stray percent signs are dropped, HTML entities are removed.
    """
    if isinstance(title, bytes):
        if seems_utf8(title):
            title = title.decode("utf-8")
            is_utf8 = True
        else:
            # Single-byte text: non-ASCII bytes fall to the character filter
            title = title.decode("latin-1")
            is_utf8 = False
    else:
        is_utf8 = True

    title = _TAG.sub("", title)
    # Preserve escaped octets, drop other percent signs, restore octets.
    title = _OCTET.sub(r"---\1---", title)
    title = title.replace("%", "")
    title = _PRESERVED_OCTET.sub(r"%\1", title)

    if is_utf8:
        title = utf8_uri_encode(title.lower(), 200)

    # strtolower: ASCII only
    title = title.translate(_ASCII_LOWER)
    title = _ENTITY.sub("", title)  # kill entities
    title = title.replace(".", "-")

    title = _DISALLOWED.sub("", title)
    title = _WHITESPACE.sub("-", title)
    title = _DASHES.sub("-", title)
    return title.strip("-")
