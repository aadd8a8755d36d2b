"""Publish orchestration: turns content mutations into site-tree updates.

Each command works out which files a mutation affects and writes only
those:

- the record's own page and image
- the listing pages of its kind
- neighbouring pages whose earlier/later links changed

A command never leaves a link to a file that does not exist.

Commands for one record kind are serialised by a per-kind lock.
Full rebuilds take every lock, always in the same order, so they
cannot interleave with a publish or delete.
"""

from __future__ import annotations

import contextlib
import logging
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from folio.content.models import Post, Project, RecordKind, SiteSettings
from folio.content.repository import ContentRepository
from folio.errors import FileSystemError, InvalidTransition, ItemFailure, PublishReport
from folio.site import render
from folio.site.compose import IndexListing, compose_posts, compose_projects
from folio.site.slugs import DEFAULT_MAX_ATTEMPTS, resolve_slug
from folio.site.writer import BatchResult, SiteTree

logger = logging.getLogger(__name__)

# Fields rendered on listing cards or in neighbours' navigation.
POST_INDEX_FIELDS = ("title", "subtitle", "author", "published_at", "image")
PROJECT_INDEX_FIELDS = ("title", "subtitle", "technologies", "display_order", "image")

SHELL_PAGES: dict[str, Callable[[SiteSettings], str]] = {
    render.STYLESHEET_PATH: render.render_stylesheet,
    render.HOME_PATH: render.render_home,
    render.ABOUT_PATH: render.render_about,
}


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _encode(text: str) -> bytes:
    return text.encode("utf-8")


@dataclass(frozen=True)
class _KindOps:
    """Repository and renderer hooks for one record kind."""

    kind: RecordKind
    list: Callable[[], list[Any]]
    get: Callable[[str], Any]
    save: Callable[[Any], None]
    remove: Callable[[str], None]
    compose: Callable[..., IndexListing]
    render_page: Callable[..., str]
    render_index: Callable[..., str]
    index_fields: tuple[str, ...]


def _failures(result: BatchResult) -> list[ItemFailure]:
    return result.to_report().failed


class PublishOrchestrator:
    """Sequences slug resolution, rendering and tree writes for each command.

    Args:
        repository: Source of posts, projects and settings.
        tree: The output site tree.
        page_size: Entries per listing page; ``None`` means a single page.
        max_slug_attempts: Collision budget passed to the slug resolver.
    """

    def __init__(
        self,
        repository: ContentRepository,
        tree: SiteTree,
        *,
        page_size: int | None = None,
        max_slug_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self._repo = repository
        self._tree = tree
        self.page_size = page_size
        self.max_slug_attempts = max_slug_attempts
        self._site_lock = threading.RLock()
        self._locks = {kind: threading.RLock() for kind in RecordKind}
        self._ops = {
            RecordKind.POST: _KindOps(
                kind=RecordKind.POST,
                list=repository.list_posts,
                get=repository.get_post,
                save=repository.save_post,
                remove=repository.delete_post,
                compose=compose_posts,
                render_page=render.render_post_page,
                render_index=render.render_post_index,
                index_fields=POST_INDEX_FIELDS,
            ),
            RecordKind.PROJECT: _KindOps(
                kind=RecordKind.PROJECT,
                list=repository.list_projects,
                get=repository.get_project,
                save=repository.save_project,
                remove=repository.delete_project,
                compose=compose_projects,
                render_page=render.render_project_page,
                render_index=render.render_project_index,
                index_fields=PROJECT_INDEX_FIELDS,
            ),
        }

    @property
    def tree(self) -> SiteTree:
        return self._tree

    # ── Public commands ──────────────────────────────────────────

    def publish_post(self, post_id: str) -> PublishReport:
        return self._publish(RecordKind.POST, post_id)

    def publish_project(self, project_id: str) -> PublishReport:
        return self._publish(RecordKind.PROJECT, project_id)

    def update_post(self, post: Post) -> PublishReport:
        return self._update(RecordKind.POST, post)

    def update_project(self, project: Project) -> PublishReport:
        return self._update(RecordKind.PROJECT, project)

    def unpublish_post(self, post_id: str) -> PublishReport:
        return self._retract(RecordKind.POST, post_id, remove=False)

    def unpublish_project(self, project_id: str) -> PublishReport:
        return self._retract(RecordKind.PROJECT, project_id, remove=False)

    def delete_post(self, post_id: str) -> PublishReport:
        return self._retract(RecordKind.POST, post_id, remove=True)

    def delete_project(self, project_id: str) -> PublishReport:
        return self._retract(RecordKind.PROJECT, project_id, remove=True)

    def update_settings(self, settings: SiteSettings) -> PublishReport:
        """Persist new settings and rebuild every page they style."""
        with self._all_locks():
            self._repo.save_settings(settings)
            return self.regenerate_all()

    def regenerate_all(self) -> PublishReport:
        """Rebuild the whole tree from the current records.

        Best-effort: failures are collected in the report rather than
        raised.  Files under the record directories that no longer
        belong to a published record are removed.
        """
        with self._all_locks():
            settings = self._repo.get_settings()
            writes = {path: _encode(fn(settings)) for path, fn in SHELL_PAGES.items()}
            for ops in self._ops.values():
                listing = ops.compose(ops.list(), self.page_size)
                writes.update(self._index_writes(ops, listing, settings))
                for record in listing.entries:
                    writes.update(self._artifact_writes(ops, record, listing, settings))

            stale = [
                path
                for subdir in (render.BLOG_DIR, render.PORTFOLIO_DIR, render.IMAGES_DIR)
                for path in self._tree.list_files(subdir)
                if path not in writes
            ]
            report = self._tree.apply(writes, stale).to_report()
        logger.info("Regenerated site at %s: %s", self._tree.root, report.summary())
        return report

    def ensure_shell(self) -> PublishReport:
        """Write any missing shared page so navigation links always resolve."""
        if self._shell_complete():
            return PublishReport()
        with self._all_locks():
            settings = self._repo.get_settings()
            writes: dict[str, bytes] = {}
            for path, fn in SHELL_PAGES.items():
                if not self._tree.exists(path):
                    writes[path] = _encode(fn(settings))
            for ops in self._ops.values():
                if not self._tree.exists(render.index_path(ops.kind)):
                    listing = ops.compose(ops.list(), self.page_size)
                    writes.update(self._index_writes(ops, listing, settings))
            return self._tree.apply(writes).to_report()

    # ── Transitions ──────────────────────────────────────────────

    def _publish(self, kind: RecordKind, record_id: str) -> PublishReport:
        ops = self._ops[kind]
        with self._locks[kind]:
            record = ops.get(record_id)
            if not record.draft:
                raise InvalidTransition(record_id, "publish", "already published")

            settings = self._repo.get_settings()
            records = ops.list()
            before = ops.compose(records, self.page_size)
            slug = resolve_slug(
                record.title, before.slugs, seed=record.id, max_attempts=self.max_slug_attempts
            )
            published = record.model_copy(update={"slug": slug, "draft": False, "updated_at": _now()})
            after = ops.compose(_with(records, published), self.page_size)

            own = self._artifact_writes(ops, published, after, settings)
            result = self._tree.apply(own)
            if not result.ok:
                # Draft records own no files: undo whatever did land.
                self._tree.apply({}, [p for p in own if p not in result.failed_paths()])
                raise FileSystemError(
                    f"Could not write {kind} {record_id}; it remains a draft",
                    _failures(result),
                )

            ops.save(published)
            report = result.to_report()
            report.merge(self._sync_listing(ops, before, after, settings, skip={published.id}))
        logger.info("Published %s %s as %s", kind, record_id, render.artifact_path(published))
        return report.merge(self.ensure_shell())

    def _update(self, kind: RecordKind, incoming: Post | Project) -> PublishReport:
        ops = self._ops[kind]
        with self._locks[kind]:
            stored = ops.get(incoming.id)
            record = incoming.model_copy(
                update={
                    "slug": stored.slug,
                    "draft": stored.draft,
                    "created_at": stored.created_at,
                    "updated_at": _now(),
                }
            )
            if not stored.is_published:
                ops.save(record)
                return PublishReport()

            settings = self._repo.get_settings()
            records = ops.list()
            before = ops.compose(records, self.page_size)
            after = ops.compose(_with(records, record), self.page_size)

            own = self._artifact_writes(ops, record, after, settings)
            # The image lands before the page that references it. On failure the
            # old page stays live, so its image stays and any new one is dropped.
            page = render.artifact_path(record)
            old_image = render.image_path(stored)
            new_image = render.image_path(record)
            result = self._tree.apply({p: c for p, c in own.items() if p != page})
            if result.ok:
                result.items.extend(self._tree.apply({page: own[page]}).items)
            if not result.ok:
                if new_image and new_image != old_image and new_image not in result.failed_paths():
                    self._tree.apply({}, [new_image])
                raise FileSystemError(f"Could not rewrite {kind} {incoming.id}", _failures(result))

            ops.save(record)
            report = result.to_report()
            listed = True
            changed = [f for f in ops.index_fields if getattr(stored, f) != getattr(record, f)]
            if changed:
                logger.debug("Index-visible fields changed for %s: %s", incoming.id, changed)
                listing = self._sync_listing(ops, before, after, settings, skip={record.id})
                listed = listing.ok
                report.merge(listing)
            if old_image and old_image not in own:
                if not listed:
                    logger.warning("Keeping %s while listing pages still reference it", old_image)
                else:
                    report.merge(self._tree.apply({}, [old_image]).to_report())
        logger.info("Updated %s %s", kind, incoming.id)
        return report

    def _retract(self, kind: RecordKind, record_id: str, *, remove: bool) -> PublishReport:
        ops = self._ops[kind]
        action = "delete" if remove else "unpublish"
        with self._locks[kind]:
            stored = ops.get(record_id)
            if not stored.is_published:
                if not remove:
                    raise InvalidTransition(record_id, action, "not published")
                ops.remove(record_id)
                logger.info("Deleted draft %s %s", kind, record_id)
                return PublishReport()

            settings = self._repo.get_settings()
            records = ops.list()
            before = ops.compose(records, self.page_size)
            if remove:
                remaining = [r for r in records if r.id != record_id]
            else:
                retracted = stored.model_copy(update={"draft": True, "updated_at": _now()})
                remaining = _with(records, retracted)
            after = ops.compose(remaining, self.page_size)

            result = self._tree.apply({}, [render.artifact_path(stored)])
            if not result.ok:
                raise FileSystemError(f"Could not remove files for {kind} {record_id}", _failures(result))

            if remove:
                ops.remove(record_id)
            else:
                ops.save(retracted)
            report = result.to_report()
            report.merge(self._sync_listing(ops, before, after, settings))
            # Nothing links to the image once the listing is in sync; a failed
            # delete leaves an unreferenced file that the next rebuild removes.
            if image := render.image_path(stored):
                report.merge(self._tree.apply({}, [image]).to_report())
        logger.info("%s %s %s", "Deleted" if remove else "Unpublished", kind, record_id)
        return report

    # ── Helpers ──────────────────────────────────────────────────

    def _artifact_writes(
        self, ops: _KindOps, record: Post | Project, listing: IndexListing, settings: SiteSettings
    ) -> dict[str, bytes]:
        writes = {
            render.artifact_path(record): _encode(
                ops.render_page(record, listing.adjacency[record.id], settings)
            )
        }
        if image := render.image_path(record):
            writes[image] = bytes(record.image or b"")
        return writes

    def _index_writes(
        self, ops: _KindOps, listing: IndexListing, settings: SiteSettings
    ) -> dict[str, bytes]:
        return {
            render.index_path(ops.kind, page.path): _encode(ops.render_index(page, settings))
            for page in listing.pages
        }

    def _sync_listing(
        self,
        ops: _KindOps,
        before: IndexListing,
        after: IndexListing,
        settings: SiteSettings,
        *,
        skip: set[str] | frozenset[str] = frozenset(),
    ) -> PublishReport:
        """Rewrite listing pages and every neighbour whose navigation changed."""
        writes = self._index_writes(ops, after, settings)
        gone = {p.path for p in before.pages} - {p.path for p in after.pages}
        deletes = [render.index_path(ops.kind, path) for path in sorted(gone)]

        for record in after.entries:
            if record.id in skip:
                continue
            old = before.adjacency.get(record.id)
            new = after.adjacency[record.id]
            if old is None or old.key() != new.key():
                writes[render.artifact_path(record)] = _encode(ops.render_page(record, new, settings))
        return self._tree.apply(writes, deletes).to_report()

    def _shell_complete(self) -> bool:
        paths = list(SHELL_PAGES) + [render.index_path(kind) for kind in RecordKind]
        return all(self._tree.exists(path) for path in paths)

    @contextlib.contextmanager
    def _all_locks(self) -> Iterator[None]:
        with contextlib.ExitStack() as stack:
            stack.enter_context(self._site_lock)
            for kind in RecordKind:
                stack.enter_context(self._locks[kind])
            yield


def _with(records: list[Any], record: Any) -> list[Any]:
    """Return ``records`` with ``record`` replacing the entry sharing its id."""
    replaced = [record if r.id == record.id else r for r in records]
    if not any(r.id == record.id for r in records):
        replaced.append(record)
    return replaced
