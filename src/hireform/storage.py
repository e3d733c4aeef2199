from __future__ import annotations

import logging
import re
import secrets
import time
from pathlib import Path
from typing import BinaryIO

from starlette.datastructures import UploadFile

from hireform.errors import NotFoundError, StorageError, UploadRejectedError

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024
CHUNK_SIZE = 64 * 1024

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def normalize_content_type(content_type: str | None) -> str:
    return (content_type or "").split(";", 1)[0].strip().lower()


class AttachmentStore:
    """Flat directory of uploaded PDFs keyed by generated file names."""

    def __init__(self, root: Path, *, max_bytes: int = DEFAULT_MAX_BYTES):
        self.root = Path(root)
        self.max_bytes = max_bytes

    def ensure_root(self) -> None:
        if not self.root.exists():
            self.root.mkdir(parents=True, exist_ok=True)
            logger.info("Created uploads directory: %s", self.root)

    def generate_ref(self, field_name: str, original_name: str) -> str:
        field = _UNSAFE_CHARS.sub("_", field_name) or "file"
        extension = _UNSAFE_CHARS.sub("", Path(original_name or "").suffix)
        unique_suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
        return f"{field}-{unique_suffix}{extension}"

    def _check_content_type(self, original_name: str, content_type: str | None) -> None:
        if normalize_content_type(content_type) != PDF_CONTENT_TYPE:
            logger.warning("File %s rejected: only PDF files are allowed", original_name)
            raise UploadRejectedError("Only PDF files are allowed")

    def _reject_oversize(self, original_name: str) -> None:
        logger.warning("File %s rejected: larger than %s bytes", original_name, self.max_bytes)
        raise UploadRejectedError(f"File too large (max {self.max_bytes // (1024 * 1024)}MB)")

    def save(self, field_name: str, original_name: str, data: bytes, content_type: str | None) -> str:
        self._check_content_type(original_name, content_type)
        if len(data) > self.max_bytes:
            self._reject_oversize(original_name)
        ref = self.generate_ref(field_name, original_name)
        try:
            self.ensure_root()
            with (self.root / ref).open("xb") as handle:
                handle.write(data)
        except OSError as exc:
            raise StorageError(f"could not store {original_name}: {exc}") from exc
        logger.info("Stored %s as %s", original_name, ref)
        return ref

    def save_stream(
        self,
        field_name: str,
        original_name: str,
        stream: BinaryIO,
        content_type: str | None,
    ) -> str:
        """Copy ``stream`` in chunks, giving up as soon as the size limit is exceeded."""
        self._check_content_type(original_name, content_type)
        ref = self.generate_ref(field_name, original_name)
        target = self.root / ref
        written = 0
        try:
            self.ensure_root()
            with target.open("xb") as handle:
                while chunk := stream.read(CHUNK_SIZE):
                    written += len(chunk)
                    if written > self.max_bytes:
                        break
                    handle.write(chunk)
        except OSError as exc:
            target.unlink(missing_ok=True)
            raise StorageError(f"could not store {original_name}: {exc}") from exc

        if written > self.max_bytes:
            target.unlink(missing_ok=True)
            self._reject_oversize(original_name)
        logger.info("Stored %s as %s (%s bytes)", original_name, ref, written)
        return ref

    def save_upload(self, field_name: str, upload: UploadFile) -> str:
        return self.save_stream(field_name, upload.filename or "", upload.file, upload.content_type)

    def path_for(self, ref: str) -> Path:
        if not ref or ref in {".", ".."} or Path(ref).name != ref:
            raise NotFoundError("File not found")
        path = self.root / ref
        if not path.is_file():
            raise NotFoundError("File not found")
        return path

    def read(self, ref: str) -> bytes:
        path = self.path_for(ref)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise NotFoundError("File not found") from None
        except OSError as exc:
            raise StorageError(f"could not read {ref}: {exc}") from exc

    def delete(self, ref: str) -> None:
        try:
            path = self.path_for(ref)
        except NotFoundError:
            return
        path.unlink(missing_ok=True)
        logger.info("Deleted attachment %s", ref)

    def list_refs(self) -> list[str]:
        if not self.root.is_dir():
            return []
        return sorted(entry.name for entry in self.root.iterdir() if entry.is_file())
