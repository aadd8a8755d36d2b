"""Tests for SiteTree batch writes and deletes."""

from pathlib import Path

import pytest

from folio.site.writer import SiteTree


class TestResolve:
    @pytest.mark.parametrize("rel", ["", "/etc/passwd", "../outside.html", "blog/../../x"])
    def test_rejects_escaping_paths(self, tmp_path: Path, rel: str):
        with pytest.raises(ValueError):
            SiteTree(tmp_path).resolve(rel)

    def test_nested_path(self, tmp_path: Path):
        assert SiteTree(tmp_path).resolve("blog/a.html") == tmp_path / "blog" / "a.html"


class TestApply:
    def test_writes_files_and_parents(self, tmp_path: Path):
        tree = SiteTree(tmp_path)
        result = tree.apply({"blog/a.html": b"A", "css/style.css": b"body{}"})

        assert result.ok
        assert (tmp_path / "blog" / "a.html").read_bytes() == b"A"
        assert tree.list_files() == ["blog/a.html", "css/style.css"]

    def test_overwrites_atomically(self, tmp_path: Path):
        tree = SiteTree(tmp_path)
        tree.apply({"index.html": b"old"})
        tree.apply({"index.html": b"new"})

        assert tree.read_bytes("index.html") == b"new"
        assert not list(tmp_path.glob("*.tmp"))

    def test_delete_prunes_nested_empty_dirs(self, tmp_path: Path):
        tree = SiteTree(tmp_path)
        tree.apply({"blog/2024/01/a.html": b"x"})
        result = tree.apply({}, ["blog/2024/01/a.html"])

        assert result.ok
        assert not (tmp_path / "blog" / "2024").exists()
        assert (tmp_path / "blog").is_dir()

    def test_delete_keeps_shared_top_level_dir(self, tmp_path: Path):
        tree = SiteTree(tmp_path)
        tree.apply({"images/post-1.png": b"x"})
        tree.apply({}, ["images/post-1.png"])

        assert (tmp_path / "images").is_dir()
        assert tree.apply({"images/project-1.png": b"y"}).ok

    def test_delete_missing_is_ok(self, tmp_path: Path):
        result = SiteTree(tmp_path).apply({}, ["blog/gone.html"])
        assert result.ok
        assert result.to_report().deleted == ["blog/gone.html"]

    def test_failure_does_not_stop_batch(self, tmp_path: Path):
        (tmp_path / "blog").write_text("a file where a directory should be")
        tree = SiteTree(tmp_path)
        result = tree.apply({"blog/a.html": b"A", "about.html": b"About"})

        assert not result.ok
        assert result.failed_paths() == {"blog/a.html"}
        assert tree.read_bytes("about.html") == b"About"

    def test_report(self, tmp_path: Path):
        tree = SiteTree(tmp_path)
        tree.apply({"old.html": b"x"})
        report = tree.apply({"new.html": b"y"}, ["old.html"]).to_report()

        assert report.written == ["new.html"]
        assert report.deleted == ["old.html"]
        assert report.summary() == "1 written, 1 deleted"


class TestListFiles:
    def test_missing_subdir(self, tmp_path: Path):
        assert SiteTree(tmp_path).list_files("blog") == []

    def test_subdir_only(self, tmp_path: Path):
        tree = SiteTree(tmp_path)
        tree.apply({"blog/a.html": b"", "portfolio/b.html": b"", "index.html": b""})
        assert tree.list_files("blog") == ["blog/a.html"]
