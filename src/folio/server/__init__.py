"""Local HTTP server for previewing the generated site."""

from folio.server.handler import MIME_TYPES, Resolution, SiteRequestHandler, resolve_request
from folio.server.lifecycle import SiteServer

__all__ = [
    "MIME_TYPES",
    "Resolution",
    "SiteRequestHandler",
    "SiteServer",
    "resolve_request",
]
