from pathlib import Path

from hireform.core.cleanup import CleanupQueue
from hireform.storage import AttachmentStore


class FlakyStore(AttachmentStore):
    def __init__(self, root: Path, broken: set[str]):
        super().__init__(root)
        self.broken = broken

    def delete(self, ref: str) -> None:
        if ref in self.broken:
            raise PermissionError(f"cannot remove {ref}")
        super().delete(ref)


def test_cleanup_reports_failures_without_raising(upload_dir: Path, pdf_bytes: bytes) -> None:
    store = FlakyStore(upload_dir, broken=set())
    kept = store.save("resume", "a.pdf", pdf_bytes, "application/pdf")
    removed = store.save("cover_letter", "b.pdf", pdf_bytes, "application/pdf")
    store.broken.add(kept)

    report = CleanupQueue(store, [kept, removed]).run()

    assert report.deleted == [removed]
    assert list(report.failed) == [kept]
    assert not report.ok
    assert store.list_refs() == [kept]


def test_queue_ignores_empty_and_duplicate_refs(store: AttachmentStore) -> None:
    queue = CleanupQueue(store, ["resume-1.pdf", None, "", "resume-1.pdf"])
    queue.add("cover_letter-2.pdf")

    assert len(queue) == 2
    assert queue.run().ok


def test_queue_without_store_does_nothing() -> None:
    report = CleanupQueue(None, ["resume-1.pdf"]).run()
    assert report.deleted == []
    assert report.ok
