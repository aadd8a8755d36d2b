"""Start and stop the local preview server.

The server runs ``ThreadingHTTPServer.serve_forever`` on a daemon
thread.  ``stop`` sets the cancellation event first so in-flight
handlers answer 503, then shuts the loop down and closes the socket,
which frees the port for an immediate restart.
"""

from __future__ import annotations

import logging
import threading
from functools import partial
from http.server import ThreadingHTTPServer
from pathlib import Path

from folio.errors import ServerBindError
from folio.server.handler import SiteRequestHandler

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080


class _ReusableServer(ThreadingHTTPServer):
    allow_reuse_address = True
    daemon_threads = True


class SiteServer:
    """Serves one site root over HTTP.

    Usage::

        with SiteServer(root, port=0) as server:
            print(server.url)
    """

    def __init__(
        self,
        root: Path | str,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        *,
        landing: str = "home",
    ) -> None:
        self.root = Path(root)
        self.host = host
        self.port = port
        self.landing = landing
        self.cancel_event = threading.Event()
        self._httpd: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._httpd is not None

    @property
    def bound_port(self) -> int:
        """Actual listening port; differs from ``port`` when 0 was requested."""
        if self._httpd is None:
            return self.port
        return self._httpd.server_address[1]

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.bound_port}/"

    def start(self) -> None:
        """Bind and begin serving in the background.

        Raises:
            ServerBindError: If the address cannot be bound.
        """
        with self._lock:
            if self._httpd is not None:
                return
            self.root.mkdir(parents=True, exist_ok=True)
            self.cancel_event = threading.Event()
            handler = partial(
                SiteRequestHandler,
                root=self.root,
                landing=self.landing,
                cancel=self.cancel_event,
            )
            try:
                httpd = _ReusableServer((self.host, self.port), handler)
            except OSError as exc:
                raise ServerBindError(self.host, self.port, exc.strerror or str(exc)) from exc
            self._httpd = httpd
            self._thread = threading.Thread(
                target=httpd.serve_forever,
                name=f"folio-server-{self.bound_port}",
                daemon=True,
            )
            self._thread.start()
        logger.info("Serving %s at %s", self.root, self.url)

    def stop(self, timeout: float = 5.0) -> None:
        """Cancel in-flight requests and release the socket.  Idempotent."""
        with self._lock:
            httpd, thread = self._httpd, self._thread
            if httpd is None:
                return
            port = httpd.server_address[1]
            self.cancel_event.set()
            httpd.shutdown()
            httpd.server_close()
            if thread is not None:
                thread.join(timeout)
            self._httpd = None
            self._thread = None
        logger.info("Server on port %d stopped", port)

    def serve_until_interrupted(self) -> None:
        """Block the calling thread until Ctrl-C, then stop."""
        self.start()
        try:
            while self._thread is not None and self._thread.is_alive():
                self._thread.join(0.5)
        except KeyboardInterrupt:
            logger.info("Interrupted")
        finally:
            self.stop()

    def __enter__(self) -> SiteServer:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
