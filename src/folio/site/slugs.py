"""URL-safe filename stems for published records."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Collection

from folio.errors import SlugCollisionUnresolved

DEFAULT_MAX_ATTEMPTS = 100
FALLBACK_SLUG = "untitled"

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^a-z0-9-]")
_HYPHENS = re.compile(r"-{2,}")
# Stems the tree layout already uses inside blog/ and portfolio/.
_RESERVED = re.compile(r"^(?:index|page-\d+)$")


def slugify(text: str) -> str:
    """Reduce text to lowercase ``[a-z0-9-]``.

    >>> slugify("Hello, World!")
    'hello-world'
    """
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = _WHITESPACE.sub("-", text.lower())
    text = _DISALLOWED.sub("", text)
    return _HYPHENS.sub("-", text).strip("-")


def is_reserved(slug: str) -> bool:
    return bool(_RESERVED.match(slug))


def resolve_slug(
    title: str,
    taken: Collection[str],
    seed: str | None = None,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> str:
    """Derive a slug from ``title`` that is not in ``taken``.

    Falls back to ``seed`` (usually the record id) when the title has no
    usable characters.  Collisions get ``-2``, ``-3``, ... appended.

    Raises:
        SlugCollisionUnresolved: If no free candidate is found within
            ``max_attempts`` tries.
    """
    base = slugify(title) or slugify(seed or "") or FALLBACK_SLUG
    for attempt in range(1, max_attempts + 1):
        candidate = base if attempt == 1 else f"{base}-{attempt}"
        if candidate not in taken and not is_reserved(candidate):
            return candidate
    raise SlugCollisionUnresolved(title, max_attempts)
