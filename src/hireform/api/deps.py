from __future__ import annotations

from collections.abc import Generator

from sqlalchemy.orm import Session

from hireform.config import get_settings
from hireform.db.session import get_db_session
from hireform.storage import AttachmentStore


def get_db() -> Generator[Session, None, None]:
    yield from get_db_session()


def get_attachment_store() -> AttachmentStore:
    settings = get_settings()
    return AttachmentStore(settings.upload_dir, max_bytes=settings.max_upload_bytes)
