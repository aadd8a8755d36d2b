"""Error types and batch result reports for the publish pipeline."""

from __future__ import annotations

from pydantic import BaseModel, Field


class FolioError(Exception):
    """Base error for everything raised by folio."""


class SlugCollisionUnresolved(FolioError):
    """No free slug could be found within the attempt budget."""

    def __init__(self, title: str, attempts: int) -> None:
        self.title = title
        self.attempts = attempts
        super().__init__(f"Could not find a free slug for {title!r} after {attempts} attempts")


class FileSystemError(FolioError):
    """A record's own artifact could not be written or removed."""

    def __init__(self, message: str, failures: list[ItemFailure] | None = None) -> None:
        self.failures = failures or []
        super().__init__(message)


class ServerBindError(FolioError):
    """The HTTP server could not bind its listening socket."""

    def __init__(self, host: str, port: int, reason: str = "") -> None:
        self.host = host
        self.port = port
        detail = f": {reason}" if reason else ""
        super().__init__(f"Could not bind {host}:{port}{detail}")


class RequestResolutionError(FolioError):
    """A request path could not be mapped to a servable file."""

    def __init__(self, status: int, path: str) -> None:
        self.status = status
        self.path = path
        super().__init__(f"{status} for {path}")


class InvalidTransition(FolioError):
    """A lifecycle action was requested from the wrong state."""

    def __init__(self, record_id: str, action: str, reason: str) -> None:
        self.record_id = record_id
        self.action = action
        super().__init__(f"Cannot {action} {record_id}: {reason}")


class RecordNotFound(FolioError, KeyError):
    """No record with the given id exists in the repository."""

    def __init__(self, kind: str, record_id: str) -> None:
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"No {kind} with id {record_id!r}")

    def __str__(self) -> str:
        return f"No {self.kind} with id {self.record_id!r}"


class ItemFailure(BaseModel):
    """A single path that could not be written or deleted."""

    path: str
    action: str
    error: str


class PublishReport(BaseModel):
    """Outcome of one orchestrated pass over the site tree."""

    written: list[str] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)
    failed: list[ItemFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def merge(self, other: PublishReport) -> PublishReport:
        """Fold another report into this one and return self."""
        self.written.extend(other.written)
        self.deleted.extend(other.deleted)
        self.failed.extend(other.failed)
        return self

    def summary(self) -> str:
        parts = [f"{len(self.written)} written", f"{len(self.deleted)} deleted"]
        if self.failed:
            parts.append(f"{len(self.failed)} failed")
        return ", ".join(parts)
