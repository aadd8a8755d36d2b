"""Tests for request resolution against a generated site tree."""

from pathlib import Path

import pytest

from folio.server.handler import DEFAULT_MIME_TYPE, content_type_for, resolve_request


@pytest.fixture
def site(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    (root / "blog").mkdir(parents=True)
    (root / "css").mkdir()
    (root / "images").mkdir()
    (root / "index.html").write_text("<h1>Home</h1>", encoding="utf-8")
    (root / "blog" / "index.html").write_text("<h1>Blog</h1>", encoding="utf-8")
    (root / "blog" / "hello-world.html").write_text("<p>Héllo</p>", encoding="utf-8")
    (root / "css" / "style.css").write_text("body{}", encoding="utf-8")
    (root / "images" / "post-1.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\xff")
    (tmp_path / "secret.txt").write_text("top secret", encoding="utf-8")
    return root


class TestFiles:
    def test_root_serves_home(self, site: Path):
        res = resolve_request(site, "/")
        assert res.status == 200
        assert res.body == b"<h1>Home</h1>"
        assert res.content_type == "text/html; charset=utf-8"

    def test_trailing_slash_serves_index(self, site: Path):
        res = resolve_request(site, "/blog/")
        assert res.status == 200
        assert res.body == b"<h1>Blog</h1>"

    def test_explicit_file(self, site: Path):
        res = resolve_request(site, "/blog/hello-world.html")
        assert res.status == 200
        assert "Héllo".encode() in res.body

    def test_extensionless_tries_html(self, site: Path):
        res = resolve_request(site, "/blog/hello-world")
        assert res.status == 200
        assert "Héllo".encode() in res.body

    def test_query_string_ignored(self, site: Path):
        assert resolve_request(site, "/css/style.css?v=2").status == 200

    def test_percent_decoded(self, site: Path):
        assert resolve_request(site, "/blog/hello%2Dworld.html").status == 200

    def test_binary_served_verbatim(self, site: Path):
        res = resolve_request(site, "/images/post-1.png")
        assert res.status == 200
        assert res.content_type == "image/png"
        assert res.body == b"\x89PNG\r\n\x1a\n\x00\xff"


class TestRedirects:
    def test_directory_without_slash(self, site: Path):
        res = resolve_request(site, "/blog")
        assert res.status == 301
        assert res.headers["Location"] == "/blog/"

    def test_blog_landing(self, site: Path):
        res = resolve_request(site, "/", landing="blog")
        assert res.status == 302
        assert res.headers["Location"] == "/blog/"

    def test_home_landing_does_not_redirect(self, site: Path):
        assert resolve_request(site, "/", landing="home").status == 200


class TestNotFound:
    def test_missing_page_names_path(self, site: Path):
        res = resolve_request(site, "/blog/does-not-exist")
        assert res.status == 404
        assert b"/blog/does-not-exist" in res.body
        assert res.content_type.startswith("text/html")

    def test_missing_directory_index(self, site: Path):
        (site / "portfolio").mkdir()
        assert resolve_request(site, "/portfolio/").status == 404

    def test_path_is_escaped(self, site: Path):
        res = resolve_request(site, "/%3Cscript%3E")
        assert b"<script>" not in res.body


class TestTraversal:
    @pytest.mark.parametrize(
        "raw",
        [
            "/../../etc/passwd",
            "/../secret.txt",
            "/blog/../../secret.txt",
            "/%2e%2e/secret.txt",
            "/blog/%2E%2E/%2E%2E/secret.txt",
            "/..%2fsecret.txt",
            "/..\\secret.txt",
        ],
    )
    def test_never_serves_outside_root(self, site: Path, raw: str):
        res = resolve_request(site, raw)
        assert res.status in (403, 404)
        assert b"top secret" not in res.body

    def test_dot_dot_is_forbidden(self, site: Path):
        assert resolve_request(site, "/../../etc/passwd").status == 403

    def test_symlink_out_of_root(self, site: Path):
        link = site / "escape.txt"
        try:
            link.symlink_to(site.parent / "secret.txt")
        except OSError:
            pytest.skip("symlinks not supported")
        res = resolve_request(site, "/escape.txt")
        assert res.status == 403
        assert b"top secret" not in res.body


class TestMimeTypes:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("a.html", "text/html"),
            ("a.HTM", "text/html"),
            ("a.css", "text/css"),
            ("a.js", "application/javascript"),
            ("a.json", "application/json"),
            ("a.png", "image/png"),
            ("a.jpg", "image/jpeg"),
            ("a.jpeg", "image/jpeg"),
            ("a.gif", "image/gif"),
            ("a.svg", "image/svg+xml"),
            ("a.ico", "image/x-icon"),
            ("a.webp", "image/webp"),
            ("a.txt", "text/plain"),
            ("a.bin", DEFAULT_MIME_TYPE),
            ("noext", DEFAULT_MIME_TYPE),
        ],
    )
    def test_table(self, name: str, expected: str):
        assert content_type_for(name) == expected

    def test_text_gets_charset(self, site: Path):
        assert resolve_request(site, "/css/style.css").content_type == "text/css; charset=utf-8"

    def test_non_utf8_text_served_unchanged(self, site: Path):
        raw = "café".encode("latin-1")
        (site / "legacy.txt").write_bytes(raw)
        res = resolve_request(site, "/legacy.txt")

        assert res.body == raw
        assert res.content_type == "text/plain"
