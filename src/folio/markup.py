"""Seam between user-entered text and the markup fragments records store.

The pipeline never inspects how a fragment was produced.  Callers that
collect raw input (the CLI, an editor) pass it through a
``MarkupConverter`` once and store the result on the record.
"""

from __future__ import annotations

import html
import re
from collections.abc import Callable

MarkupConverter = Callable[[str], str]

_BLANK_LINES = re.compile(r"\n\s*\n")


def paragraphs(text: str) -> str:
    """Escape plain text and wrap blank-line separated blocks in ``<p>``.

    Single newlines inside a block become ``<br>``.
    """
    blocks = [b.strip() for b in _BLANK_LINES.split(text.replace("\r\n", "\n"))]
    return "\n".join(
        "<p>" + "<br>\n".join(html.escape(line) for line in block.splitlines()) + "</p>"
        for block in blocks
        if block
    )


def passthrough(text: str) -> str:
    """Treat the input as markup already."""
    return text


CONVERTERS: dict[str, MarkupConverter] = {
    "text": paragraphs,
    "html": passthrough,
}


def get_converter(name: str) -> MarkupConverter:
    """Look up a converter by name.

    Raises:
        ValueError: If the name is unknown.
    """
    try:
        return CONVERTERS[name]
    except KeyError:
        raise ValueError(f"Unknown markup format: {name!r}") from None
