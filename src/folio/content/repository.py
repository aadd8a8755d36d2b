"""The capability set the publish pipeline needs from a content provider."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from folio.content.models import Post, Project, SiteSettings


@runtime_checkable
class ContentRepository(Protocol):
    """Ordered collections of posts and projects plus the settings singleton.

    ``get_*`` methods raise ``RecordNotFound`` for unknown ids.
    ``get_settings`` creates the defaults on first access.
    """

    def list_posts(self) -> list[Post]: ...

    def get_post(self, post_id: str) -> Post: ...

    def save_post(self, post: Post) -> None: ...

    def delete_post(self, post_id: str) -> None: ...

    def list_projects(self) -> list[Project]: ...

    def get_project(self, project_id: str) -> Project: ...

    def save_project(self, project: Project) -> None: ...

    def delete_project(self, project_id: str) -> None: ...

    def get_settings(self) -> SiteSettings: ...

    def save_settings(self, settings: SiteSettings) -> None: ...
