"""Applies batches of generated files to the on-disk site tree.

Every write lands in a temporary sibling first and is then moved over
the target with ``os.replace``, so the HTTP server never reads a
half-written page.  A failing item is recorded and the rest of the
batch still runs.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from folio.errors import ItemFailure, PublishReport

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".tmp"


@dataclass(frozen=True)
class ItemResult:
    """Outcome of writing or deleting one path."""

    path: str
    action: str  # "write" or "delete"
    ok: bool
    error: str = ""


@dataclass
class BatchResult:
    """Per-item results for one ``SiteTree.apply`` call."""

    items: list[ItemResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(item.ok for item in self.items)

    @property
    def failures(self) -> list[ItemResult]:
        return [item for item in self.items if not item.ok]

    def failed_paths(self) -> set[str]:
        return {item.path for item in self.failures}

    def to_report(self) -> PublishReport:
        report = PublishReport()
        for item in self.items:
            if not item.ok:
                report.failed.append(
                    ItemFailure(path=item.path, action=item.action, error=item.error)
                )
            elif item.action == "write":
                report.written.append(item.path)
            else:
                report.deleted.append(item.path)
        return report


class SiteTree:
    """Filesystem view of the generated site rooted at ``root``.

    All paths given to and returned from this class are POSIX-style and
    relative to the root.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def resolve(self, rel: str) -> Path:
        """Map a tree-relative path to a filesystem path inside the root.

        Raises:
            ValueError: If the path is absolute or escapes the root.
        """
        pure = PurePosixPath(rel)
        if not rel or pure.is_absolute() or ".." in pure.parts:
            raise ValueError(f"Path escapes site root: {rel!r}")
        return self.root.joinpath(*pure.parts)

    def exists(self, rel: str) -> bool:
        return self.resolve(rel).is_file()

    def read_bytes(self, rel: str) -> bytes:
        return self.resolve(rel).read_bytes()

    def list_files(self, subdir: str = "") -> list[str]:
        """Sorted relative paths of every file under ``subdir``."""
        base = self.resolve(subdir) if subdir else self.root
        if not base.is_dir():
            return []
        return sorted(
            p.relative_to(self.root).as_posix()
            for p in base.rglob("*")
            if p.is_file() and not p.name.endswith(TEMP_SUFFIX)
        )

    def apply(
        self, writes: Mapping[str, bytes], deletes: Iterable[str] = ()
    ) -> BatchResult:
        """Write and delete files, attempting every item.

        Writes happen before deletes.  A missing file is not an error for
        a delete.
        """
        result = BatchResult()
        for rel, content in writes.items():
            result.items.append(self._write(rel, content))
        for rel in deletes:
            result.items.append(self._delete(rel))
        for failure in result.failures:
            logger.warning("Failed to %s %s: %s", failure.action, failure.path, failure.error)
        return result

    def _write(self, rel: str, content: bytes) -> ItemResult:
        try:
            target = self.resolve(rel)
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(
                dir=target.parent, prefix=f".{target.name}.", suffix=TEMP_SUFFIX
            )
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(content)
                os.replace(tmp, target)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except (OSError, ValueError) as exc:
            return ItemResult(rel, "write", ok=False, error=str(exc))
        logger.debug("Wrote %s (%d bytes)", rel, len(content))
        return ItemResult(rel, "write", ok=True)

    def _delete(self, rel: str) -> ItemResult:
        try:
            target = self.resolve(rel)
            target.unlink(missing_ok=True)
            self._prune_empty_dirs(target.parent)
        except (OSError, ValueError) as exc:
            return ItemResult(rel, "delete", ok=False, error=str(exc))
        logger.debug("Deleted %s", rel)
        return ItemResult(rel, "delete", ok=True)

    def _prune_empty_dirs(self, directory: Path) -> None:
        """Remove empty directories up to, but not including, the top level.

        Top-level directories such as ``images/`` are shared between record
        kinds and are never removed.
        """
        root = self.root.resolve()
        current = directory
        while root in current.resolve().parent.parents:
            try:
                current.rmdir()
            except OSError:
                return
            current = current.parent
