"""Tests for the HTML renderers and tree path helpers."""

from datetime import UTC, datetime

import pytest

from folio.content.models import Post, Project, SiteSettings, Theme
from folio.site.compose import Adjacency, IndexPage
from folio.site.render import (
    artifact_path,
    image_extension,
    image_path,
    index_path,
    render_about,
    render_home,
    render_not_found,
    render_post_index,
    render_post_page,
    render_project_index,
    render_project_page,
    render_stylesheet,
)

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 8


def _make_post(**kwargs: object) -> Post:
    defaults: dict[str, object] = {
        "title": "Hello, World!",
        "subtitle": "First steps",
        "body": "<p>Body text</p>",
        "author": "Ada",
        "slug": "hello-world",
        "draft": False,
        "published_at": datetime(2024, 3, 5, tzinfo=UTC),
    }
    defaults.update(kwargs)
    return Post(**defaults)  # type: ignore[arg-type]


def _make_project(**kwargs: object) -> Project:
    defaults: dict[str, object] = {
        "title": "Folio",
        "subtitle": "Static sites",
        "description": "<p>About it</p>",
        "technologies": ["Python", "HTTP"],
        "slug": "folio",
        "draft": False,
    }
    defaults.update(kwargs)
    return Project(**defaults)  # type: ignore[arg-type]


class TestPaths:
    @pytest.mark.parametrize(
        ("data", "ext"),
        [
            (PNG, "png"),
            (b"\xff\xd8\xff\xe0rest", "jpg"),
            (b"GIF89a....", "gif"),
            (b"RIFF\x00\x00\x00\x00WEBPVP8 ", "webp"),
            (b"<svg xmlns='http://www.w3.org/2000/svg'></svg>", "svg"),
            (b"unknown", "jpg"),
        ],
    )
    def test_image_extension(self, data: bytes, ext: str):
        assert image_extension(data) == ext

    def test_image_path_uses_kind_and_id(self):
        post = _make_post(id="abc", image=PNG)
        assert image_path(post) == "images/post-abc.png"
        assert image_path(_make_post(image=None)) is None

    def test_artifact_path(self):
        assert artifact_path(_make_post()) == "blog/hello-world.html"
        assert artifact_path(_make_project()) == "portfolio/folio.html"

    def test_artifact_path_requires_slug(self):
        with pytest.raises(ValueError):
            artifact_path(_make_post(slug=None))

    def test_index_path(self):
        from folio.content.models import RecordKind

        assert index_path(RecordKind.POST) == "blog/index.html"
        assert index_path(RecordKind.PROJECT, "page-2.html") == "portfolio/page-2.html"


class TestPostPage:
    def test_contains_content(self):
        html = render_post_page(_make_post(), Adjacency(), SiteSettings())
        assert "<h2>Hello, World!</h2>" in html
        assert "<p>Body text</p>" in html
        assert "By Ada on March 5, 2024" in html

    def test_escapes_title(self):
        html = render_post_page(_make_post(title="<script>x</script>"), Adjacency(), SiteSettings())
        assert "<script>x</script>" not in html
        assert "&lt;script&gt;" in html

    def test_links_are_relative(self):
        html = render_post_page(_make_post(), Adjacency(), SiteSettings())
        assert 'href="../css/style.css"' in html
        assert 'href="../index.html"' in html
        assert 'href="index.html"' in html

    def test_adjacency_links(self):
        older = _make_post(slug="older", title="Older one")
        newer = _make_post(slug="newer", title="Newer one")
        html = render_post_page(_make_post(), Adjacency(earlier=older, later=newer), SiteSettings())
        assert 'href="older.html"' in html
        assert 'href="newer.html"' in html

    def test_no_adjacency_nav_when_alone(self):
        html = render_post_page(_make_post(), Adjacency(), SiteSettings())
        assert 'class="adjacent"' not in html

    def test_image_reference(self):
        html = render_post_page(_make_post(id="abc", image=PNG), Adjacency(), SiteSettings())
        assert 'src="../images/post-abc.png"' in html

    def test_deterministic(self):
        post, settings = _make_post(), SiteSettings()
        assert render_post_page(post, Adjacency(), settings) == render_post_page(
            post, Adjacency(), settings
        )


class TestIndexes:
    def test_post_index_lists_entries(self):
        page = IndexPage(number=1, entries=[_make_post()], path="index.html")
        html = render_post_index(page, SiteSettings())
        assert html.count('class="post-card"') == 1
        assert 'href="hello-world.html"' in html
        assert "Thoughts, stories, and ideas" in html

    def test_empty_post_index(self):
        html = render_post_index(IndexPage(number=1, entries=[], path="index.html"), SiteSettings())
        assert "No posts yet." in html

    def test_pagination_links(self):
        page = IndexPage(
            number=2,
            entries=[_make_post()],
            path="page-2.html",
            prev_path="index.html",
            next_path="page-3.html",
        )
        html = render_post_index(page, SiteSettings())
        assert 'href="page-3.html"' in html
        assert "Page 2" in html

    def test_project_index(self):
        page = IndexPage(number=1, entries=[_make_project()], path="index.html")
        html = render_project_index(page, SiteSettings())
        assert 'href="folio.html"' in html
        assert "<li>Python</li>" in html

    def test_empty_project_index(self):
        html = render_project_index(
            IndexPage(number=1, entries=[], path="index.html"), SiteSettings()
        )
        assert "No projects yet." in html


class TestProjectPage:
    def test_external_link(self):
        html = render_project_page(
            _make_project(url="https://example.com"), Adjacency(), SiteSettings()
        )
        assert 'href="https://example.com"' in html

    def test_unsafe_link_dropped(self):
        html = render_project_page(
            _make_project(url="javascript:alert(1)"), Adjacency(), SiteSettings()
        )
        assert "javascript:" not in html
        assert "Visit project" not in html


class TestSitePages:
    def test_home(self):
        html = render_home(SiteSettings(site_name="My Site"))
        assert "My Site" in html
        assert "Your Site, Your Way" in html
        assert 'href="blog/index.html"' in html
        assert 'href="css/style.css"' in html

    def test_about_converts_text(self):
        html = render_about(SiteSettings(about_content="Line <one>\n\nLine two"))
        assert "<p>Line &lt;one&gt;</p>" in html
        assert "<p>Line two</p>" in html

    def test_not_found_names_path(self):
        html = render_not_found("/blog/<missing>")
        assert "404" in html
        assert "/blog/&lt;missing&gt;" in html

    def test_stylesheet_uses_theme(self):
        css = render_stylesheet(SiteSettings(theme=Theme.DARK_BOLD))
        assert f"--bg: {Theme.DARK_BOLD.background_color};" in css
        assert f"--accent: {Theme.DARK_BOLD.default_accent_color};" in css

    def test_stylesheet_accent_override(self):
        css = render_stylesheet(SiteSettings(accent_color="#123456"))
        assert "--accent: #123456;" in css
