"""Listing pages and earlier/later adjacency for published records.

Drafts are filtered out here, once, so nothing downstream can link to
them.  Sorting rules:

- posts: ``published_at`` descending, then ``created_at`` descending
- projects: ``display_order`` ascending, then ``created_at`` ascending

``id`` is the final tie-break in both cases, so output is stable.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from folio.content.models import Post, Project

R = TypeVar("R", Post, Project)

INDEX_FILENAME = "index.html"


@dataclass(frozen=True)
class Adjacency(Generic[R]):
    """Neighbours of one record in its sorted listing."""

    earlier: R | None = None
    later: R | None = None

    def key(self) -> tuple[str | None, str | None, str | None, str | None]:
        """What a page's navigation shows; used to detect stale pages."""
        return (
            self.earlier.slug if self.earlier else None,
            self.earlier.title if self.earlier else None,
            self.later.slug if self.later else None,
            self.later.title if self.later else None,
        )


@dataclass(frozen=True)
class IndexPage(Generic[R]):
    """One page of a listing."""

    number: int
    entries: Sequence[R]
    path: str
    prev_path: str | None = None
    next_path: str | None = None


@dataclass
class IndexListing(Generic[R]):
    """Sorted published records, their pages, and per-record adjacency."""

    entries: list[R] = field(default_factory=list)
    pages: list[IndexPage[R]] = field(default_factory=list)
    adjacency: dict[str, Adjacency[R]] = field(default_factory=dict)

    @property
    def slugs(self) -> set[str]:
        return {r.slug for r in self.entries if r.slug}


def page_path(number: int) -> str:
    """File name of listing page ``number`` (1-based)."""
    return INDEX_FILENAME if number == 1 else f"page-{number}.html"


def published(records: Iterable[R]) -> list[R]:
    return [r for r in records if r.is_published]


def sort_posts(posts: Iterable[Post]) -> list[Post]:
    # Stable sorts applied from the least to the most significant key.
    ordered = sorted(posts, key=lambda p: p.id)
    ordered.sort(key=lambda p: p.created_at, reverse=True)
    ordered.sort(key=lambda p: p.published_at, reverse=True)
    return ordered


def sort_projects(projects: Iterable[Project]) -> list[Project]:
    return sorted(projects, key=lambda p: (p.display_order, p.created_at, p.id))


def compose_posts(posts: Iterable[Post], page_size: int | None = None) -> IndexListing[Post]:
    return _compose(sort_posts(published(posts)), page_size)


def compose_projects(
    projects: Iterable[Project], page_size: int | None = None
) -> IndexListing[Project]:
    return _compose(sort_projects(published(projects)), page_size)


def _compose(entries: list[R], page_size: int | None) -> IndexListing[R]:
    adjacency: dict[str, Adjacency[R]] = {}
    for i, record in enumerate(entries):
        adjacency[record.id] = Adjacency(
            earlier=entries[i + 1] if i + 1 < len(entries) else None,
            later=entries[i - 1] if i > 0 else None,
        )
    return IndexListing(entries=entries, pages=_paginate(entries, page_size), adjacency=adjacency)


def _paginate(entries: list[R], page_size: int | None) -> list[IndexPage[R]]:
    if not page_size or page_size <= 0 or len(entries) <= page_size:
        return [IndexPage(number=1, entries=list(entries), path=INDEX_FILENAME)]

    chunks = [entries[i : i + page_size] for i in range(0, len(entries), page_size)]
    total = len(chunks)
    return [
        IndexPage(
            number=n,
            entries=chunk,
            path=page_path(n),
            prev_path=page_path(n - 1) if n > 1 else None,
            next_path=page_path(n + 1) if n < total else None,
        )
        for n, chunk in enumerate(chunks, start=1)
    ]
