"""Content domain: records, settings, and the repository they live in.

The publish pipeline only depends on the ``ContentRepository`` protocol;
``ContentStore`` is the JSON-file implementation the CLI uses.
"""

from folio.content.models import Post, Project, RecordKind, SiteSettings, Theme
from folio.content.repository import ContentRepository
from folio.content.store import STORE_FILENAME, ContentStore

__all__ = [
    "ContentRepository",
    "ContentStore",
    "Post",
    "Project",
    "RecordKind",
    "STORE_FILENAME",
    "SiteSettings",
    "Theme",
]
