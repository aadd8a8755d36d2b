"""Static-site generation: slugs, rendering, listings, tree writes, orchestration.

Callers outside this package should only need ``PublishOrchestrator``
and ``SiteTree``; the rest is exposed for tests and tooling.
"""

from folio.site.compose import Adjacency, IndexListing, IndexPage, compose_posts, compose_projects
from folio.site.publish import PublishOrchestrator
from folio.site.slugs import resolve_slug, slugify
from folio.site.writer import BatchResult, ItemResult, SiteTree

__all__ = [
    "Adjacency",
    "BatchResult",
    "IndexListing",
    "IndexPage",
    "ItemResult",
    "PublishOrchestrator",
    "SiteTree",
    "compose_posts",
    "compose_projects",
    "resolve_slug",
    "slugify",
]
