"""JSON-backed content store.

Persists posts, projects and the settings singleton in a single JSON
file, loaded on init and saved after every write operation.  Writes go
through a temporary sibling and an atomic replace so a crash mid-save
never leaves a truncated store behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from folio.content.models import Post, Project, RecordKind, SiteSettings
from folio.errors import RecordNotFound

logger = logging.getLogger(__name__)

STORE_FILENAME = ".folio-store.json"


class _StoreData(BaseModel):
    """Internal wrapper for JSON serialization."""

    posts: list[Post] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
    settings: SiteSettings | None = None


class ContentStore:
    """JSON-backed repository for posts, projects and site settings.

    Records are returned as copies; callers persist changes through the
    ``save_*`` methods.
    """

    def __init__(self, content_dir: Path) -> None:
        self._path = Path(content_dir) / STORE_FILENAME
        self._lock = threading.RLock()
        self._data = self._load()

    @property
    def path(self) -> Path:
        return self._path

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> _StoreData:
        if not self._path.exists():
            return _StoreData()
        try:
            return _StoreData.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (ValidationError, ValueError, OSError):
            logger.warning("Corrupt content store at %s, starting fresh", self._path)
            return _StoreData()

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(self._data.model_dump_json(indent=2))
            os.replace(tmp, self._path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    # ── Posts ────────────────────────────────────────────────────

    def list_posts(self) -> list[Post]:
        with self._lock:
            return [p.model_copy(deep=True) for p in self._data.posts]

    def get_post(self, post_id: str) -> Post:
        with self._lock:
            for post in self._data.posts:
                if post.id == post_id:
                    return post.model_copy(deep=True)
        raise RecordNotFound(RecordKind.POST, post_id)

    def save_post(self, post: Post) -> None:
        """Insert or replace a post by id, keeping its position."""
        with self._lock:
            self._data.posts = _replace(self._data.posts, post.model_copy(deep=True))
            self._save()

    def delete_post(self, post_id: str) -> None:
        with self._lock:
            remaining = [p for p in self._data.posts if p.id != post_id]
            if len(remaining) == len(self._data.posts):
                raise RecordNotFound(RecordKind.POST, post_id)
            self._data.posts = remaining
            self._save()

    # ── Projects ─────────────────────────────────────────────────

    def list_projects(self) -> list[Project]:
        with self._lock:
            return [p.model_copy(deep=True) for p in self._data.projects]

    def get_project(self, project_id: str) -> Project:
        with self._lock:
            for project in self._data.projects:
                if project.id == project_id:
                    return project.model_copy(deep=True)
        raise RecordNotFound(RecordKind.PROJECT, project_id)

    def save_project(self, project: Project) -> None:
        """Insert or replace a project by id, keeping its position."""
        with self._lock:
            self._data.projects = _replace(self._data.projects, project.model_copy(deep=True))
            self._save()

    def delete_project(self, project_id: str) -> None:
        with self._lock:
            remaining = [p for p in self._data.projects if p.id != project_id]
            if len(remaining) == len(self._data.projects):
                raise RecordNotFound(RecordKind.PROJECT, project_id)
            self._data.projects = remaining
            self._save()

    # ── Settings ─────────────────────────────────────────────────

    def get_settings(self) -> SiteSettings:
        """Return the settings singleton, creating the defaults on first access."""
        with self._lock:
            if self._data.settings is None:
                logger.info("No site settings found, using defaults")
                self._data.settings = SiteSettings()
                self._save()
            return self._data.settings.model_copy(deep=True)

    def save_settings(self, settings: SiteSettings) -> None:
        with self._lock:
            self._data.settings = settings.model_copy(deep=True)
            self._save()


def _replace(records: list, record):
    for i, existing in enumerate(records):
        if existing.id == record.id:
            return records[:i] + [record] + records[i + 1 :]
    return records + [record]
