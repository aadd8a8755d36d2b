"""Read-only HTTP access to the generated site tree.

``resolve_request`` is a pure function from (root, request path) to a
``Resolution``.  ``SiteRequestHandler`` adapts it to ``http.server``.
Nothing outside the site root is ever read: any ``..`` segment is
refused, and so is any path whose real location falls outside the root
after symlinks are followed.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler
from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urlsplit

from folio.errors import RequestResolutionError
from folio.site.render import render_not_found

logger = logging.getLogger(__name__)

MIME_TYPES: dict[str, str] = {
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "js": "application/javascript",
    "json": "application/json",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "ico": "image/x-icon",
    "webp": "image/webp",
    "txt": "text/plain",
}
DEFAULT_MIME_TYPE = "application/octet-stream"
TEXT_MIME_TYPES = {
    "text/html",
    "text/css",
    "text/plain",
    "application/javascript",
    "application/json",
}
INDEX_FILE = "index.html"


def content_type_for(path: Path | str) -> str:
    ext = PurePosixPath(str(path)).suffix.lstrip(".").lower()
    return MIME_TYPES.get(ext, DEFAULT_MIME_TYPE)


@dataclass
class Resolution:
    """What to send back for one request."""

    status: int
    content_type: str
    body: bytes
    path: str
    headers: dict[str, str] = field(default_factory=dict)


def _error_resolution(error: RequestResolutionError) -> Resolution:
    if error.status == HTTPStatus.FORBIDDEN:
        body = b"403 Forbidden"
        return Resolution(error.status, "text/plain; charset=utf-8", body, error.path)
    body = render_not_found(error.path).encode("utf-8")
    return Resolution(error.status, "text/html; charset=utf-8", body, error.path)


def _redirect(status: HTTPStatus, location: str, path: str) -> Resolution:
    return Resolution(int(status), "text/plain; charset=utf-8", b"", path, {"Location": location})


def locate(root: Path, request_path: str) -> Path:
    """Map a decoded URL path to an existing file under ``root``.

    Raises:
        RequestResolutionError: 403 for paths escaping the root, 404 when
            nothing matches.
    """
    segments = [s for s in request_path.split("/") if s]
    if any(s == ".." for s in segments) or "\\" in request_path or "\x00" in request_path:
        raise RequestResolutionError(HTTPStatus.FORBIDDEN, request_path)

    real_root = root.resolve()
    candidate = real_root.joinpath(*segments)
    if request_path.endswith("/") or not segments:
        candidate = candidate / INDEX_FILE
    elif not candidate.exists() and not candidate.suffix:
        candidate = candidate.with_name(candidate.name + ".html")

    real = candidate.resolve()
    if real != real_root and real_root not in real.parents:
        raise RequestResolutionError(HTTPStatus.FORBIDDEN, request_path)
    if not real.is_file():
        raise RequestResolutionError(HTTPStatus.NOT_FOUND, request_path)
    return real


def resolve_request(root: Path | str, raw_path: str, *, landing: str = "home") -> Resolution:
    """Resolve a raw request target (path plus optional query) against ``root``."""
    request_path = unquote(urlsplit(raw_path).path) or "/"
    if not request_path.startswith("/"):
        request_path = "/" + request_path
    root = Path(root)

    if request_path == "/" and landing == "blog":
        return _redirect(HTTPStatus.FOUND, "/blog/", request_path)

    segments = [s for s in request_path.split("/") if s]
    if (
        segments
        and not request_path.endswith("/")
        and ".." not in segments
        and (root / Path(*segments)).is_dir()
    ):
        return _redirect(HTTPStatus.MOVED_PERMANENTLY, request_path + "/", request_path)

    try:
        file_path = locate(root, request_path)
        raw = file_path.read_bytes()
    except RequestResolutionError as exc:
        return _error_resolution(exc)
    except OSError:
        logger.warning("Failed to read %s", request_path, exc_info=True)
        return _error_resolution(RequestResolutionError(HTTPStatus.NOT_FOUND, request_path))

    mime = content_type_for(file_path)
    if mime in TEXT_MIME_TYPES and _is_utf8(raw):
        return Resolution(HTTPStatus.OK, f"{mime}; charset=utf-8", raw, request_path)
    return Resolution(HTTPStatus.OK, mime, raw, request_path)


def _is_utf8(raw: bytes) -> bool:
    try:
        raw.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


class SiteRequestHandler(BaseHTTPRequestHandler):
    """Serves GET requests from the site root; every other method is a 404.

    Built with ``functools.partial`` so each server can pass its own
    root, landing page and cancellation event.
    """

    server_version = "folio"

    def __init__(
        self,
        *args,
        root: Path,
        landing: str = "home",
        cancel: threading.Event | None = None,
        **kwargs,
    ) -> None:
        self.root = Path(root)
        self.landing = landing
        self.cancel = cancel or threading.Event()
        super().__init__(*args, **kwargs)

    def do_GET(self) -> None:  # noqa: N802
        if self.cancel.is_set():
            self._send(
                Resolution(
                    HTTPStatus.SERVICE_UNAVAILABLE,
                    "text/plain; charset=utf-8",
                    b"503 Server shutting down",
                    self.path,
                )
            )
            return
        self._send(resolve_request(self.root, self.path, landing=self.landing))

    def _not_found(self) -> None:
        path = unquote(urlsplit(self.path).path)
        self._send(_error_resolution(RequestResolutionError(HTTPStatus.NOT_FOUND, path)))

    do_HEAD = _not_found
    do_POST = _not_found
    do_PUT = _not_found
    do_DELETE = _not_found
    do_PATCH = _not_found
    do_OPTIONS = _not_found

    def _send(self, resolution: Resolution) -> None:
        self.send_response(resolution.status)
        self.send_header("Content-Type", resolution.content_type)
        self.send_header("Content-Length", str(len(resolution.body)))
        self.send_header("Cache-Control", "no-cache")
        for name, value in resolution.headers.items():
            self.send_header(name, value)
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(resolution.body)

    def log_message(self, format: str, *args) -> None:  # noqa: A002
        logger.info("%s - %s", self.address_string(), format % args)
