"""Tests for slug derivation and collision handling."""

import pytest

from folio.errors import SlugCollisionUnresolved
from folio.site.slugs import FALLBACK_SLUG, is_reserved, resolve_slug, slugify


class TestSlugify:
    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Hello, World!", "hello-world"),
            ("Launch Day", "launch-day"),
            ("  spaced   out  ", "spaced-out"),
            ("Café Crème", "cafe-creme"),
            ("a -- b", "a-b"),
            ("C++ & Rust", "c-rust"),
            ("2024 Review", "2024-review"),
        ],
    )
    def test_examples(self, title: str, expected: str):
        assert slugify(title) == expected

    def test_only_allowed_characters(self):
        slug = slugify("Ünïcödé / path\\name?query#frag")
        assert slug
        assert all(c.isascii() and (c.isalnum() or c == "-") for c in slug)
        assert slug == slug.lower()

    def test_empty_for_symbols_only(self):
        assert slugify("!!!") == ""


class TestReserved:
    @pytest.mark.parametrize("slug", ["index", "page-2", "page-10"])
    def test_reserved(self, slug: str):
        assert is_reserved(slug)

    @pytest.mark.parametrize("slug", ["indexer", "page", "page-two", "my-index"])
    def test_not_reserved(self, slug: str):
        assert not is_reserved(slug)


class TestResolveSlug:
    def test_free_slug(self):
        assert resolve_slug("Launch Day", set()) == "launch-day"

    def test_appends_counter_on_collision(self):
        assert resolve_slug("Launch Day", {"launch-day"}) == "launch-day-2"
        assert resolve_slug("Launch Day", {"launch-day", "launch-day-2"}) == "launch-day-3"

    def test_skips_reserved_stems(self):
        assert resolve_slug("Index", set()) == "index-2"
        assert resolve_slug("Page 2", set()) == "page-2-2"

    def test_falls_back_to_seed(self):
        assert resolve_slug("???", set(), seed="abc123") == "abc123"

    def test_falls_back_to_constant(self):
        assert resolve_slug("???", set()) == FALLBACK_SLUG

    def test_raises_when_budget_exhausted(self):
        taken = {"post"} | {f"post-{n}" for n in range(2, 4)}
        with pytest.raises(SlugCollisionUnresolved) as exc_info:
            resolve_slug("Post", taken, max_attempts=3)
        assert exc_info.value.attempts == 3
        assert exc_info.value.title == "Post"
