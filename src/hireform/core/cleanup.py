from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from hireform.storage import AttachmentStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CleanupReport:
    deleted: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class CleanupQueue:
    """Attachment deletions queued behind a committed database change.

    Running the queue never raises: a file that cannot be removed is logged and
    reported, and the database operation that produced it stays committed.
    """

    def __init__(self, store: AttachmentStore | None, refs: Iterable[str] = ()):
        self.store = store
        self.refs: list[str] = []
        self.add_all(refs)

    def add(self, ref: str | None) -> None:
        if ref and ref not in self.refs:
            self.refs.append(ref)

    def add_all(self, refs: Iterable[str | None]) -> None:
        for ref in refs:
            self.add(ref)

    def __len__(self) -> int:
        return len(self.refs)

    def run(self) -> CleanupReport:
        report = CleanupReport()
        if self.store is None:
            return report

        for ref in self.refs:
            try:
                self.store.delete(ref)
            except Exception as exc:
                logger.error("Error deleting file %s: %s", ref, exc)
                report.failed[ref] = str(exc)
            else:
                report.deleted.append(ref)

        if report.failed:
            logger.warning("Attachment cleanup finished with %s failure(s)", len(report.failed))
        return report
