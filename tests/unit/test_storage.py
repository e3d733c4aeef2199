import io
import re
from pathlib import Path

import pytest

from hireform.errors import NotFoundError, UploadRejectedError
from hireform.storage import AttachmentStore, normalize_content_type

REF_PATTERN = re.compile(r"^resume-\d+-\d+\.pdf$")


def test_save_pdf_returns_generated_ref(store: AttachmentStore, upload_dir: Path, pdf_bytes: bytes) -> None:
    ref = store.save("resume", "My CV.pdf", pdf_bytes, "application/pdf")

    assert REF_PATTERN.match(ref)
    assert (upload_dir / ref).read_bytes() == pdf_bytes
    assert store.read(ref) == pdf_bytes


def test_refs_are_unique(store: AttachmentStore, pdf_bytes: bytes) -> None:
    refs = {store.save("resume", "cv.pdf", pdf_bytes, "application/pdf") for _ in range(20)}
    assert len(refs) == 20


def test_non_pdf_is_rejected_and_nothing_is_written(store: AttachmentStore, upload_dir: Path) -> None:
    with pytest.raises(UploadRejectedError) as info:
        store.save("resume", "cv.docx", b"PK\x03\x04", "application/msword")

    assert info.value.message == "Only PDF files are allowed"
    assert list(upload_dir.iterdir()) == []


def test_content_type_parameters_are_ignored() -> None:
    assert normalize_content_type("Application/PDF; charset=binary") == "application/pdf"
    assert normalize_content_type(None) == ""


def test_oversize_stream_is_rejected_and_partial_file_removed(upload_dir: Path, pdf_bytes: bytes) -> None:
    store = AttachmentStore(upload_dir, max_bytes=64)
    stream = io.BytesIO(pdf_bytes * 10)

    with pytest.raises(UploadRejectedError) as info:
        store.save_stream("cover_letter", "letter.pdf", stream, "application/pdf")

    assert "too large" in info.value.message
    assert store.list_refs() == []


def test_stream_within_limit_is_stored(store: AttachmentStore, pdf_bytes: bytes) -> None:
    ref = store.save_stream("cover_letter", "letter.pdf", io.BytesIO(pdf_bytes), "application/pdf")

    assert ref.startswith("cover_letter-")
    assert store.list_refs() == [ref]


def test_delete_missing_ref_is_noop(store: AttachmentStore, pdf_bytes: bytes) -> None:
    ref = store.save("resume", "cv.pdf", pdf_bytes, "application/pdf")

    store.delete(ref)
    store.delete(ref)
    store.delete("resume-never-existed.pdf")
    assert store.list_refs() == []


def test_read_missing_ref_is_not_found(store: AttachmentStore) -> None:
    with pytest.raises(NotFoundError):
        store.read("resume-1-1.pdf")


@pytest.mark.parametrize("ref", ["../secret.pdf", "nested/resume.pdf", "..", ""])
def test_refs_outside_root_are_not_found(store: AttachmentStore, ref: str) -> None:
    with pytest.raises(NotFoundError):
        store.path_for(ref)


def test_list_refs_on_missing_root_is_empty(tmp_path: Path) -> None:
    assert AttachmentStore(tmp_path / "absent").list_refs() == []
