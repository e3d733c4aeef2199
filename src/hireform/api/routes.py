from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from hireform.api.deps import get_attachment_store, get_db
from hireform.api.schemas import (
    ApplicationDetailResponse,
    ApplicationListResponse,
    HealthResponse,
    IdResponse,
    MessageResponse,
    StatusUpdateRequest,
)
from hireform.core.cleanup import CleanupQueue
from hireform.core.validation import validate_submission
from hireform.db.repositories import ApplicationRepository
from hireform.errors import UploadRejectedError
from hireform.storage import AttachmentStore
from hireform.types import ATTACHMENT_KINDS, AttachmentRefs

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])

# Headroom for the text fields and multipart framing on top of the attachments.
FORM_FIELDS_ALLOWANCE = 256 * 1024


def enforce_body_limit(request: Request, store: AttachmentStore) -> None:
    """Refuse an oversized submission from its Content-Length before the form is spooled."""
    limit = store.max_bytes * len(ATTACHMENT_KINDS) + FORM_FIELDS_ALLOWANCE
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        logger.warning("Submission body of %s bytes rejected (limit %s)", declared, limit)
        raise UploadRejectedError(f"Request body too large (max {limit} bytes)")


def store_submission(
    fields: dict[str, Any],
    uploads: dict[str, UploadFile],
    db: Session,
    store: AttachmentStore,
) -> int:
    """Persist uploads, validate, insert; uploaded files are removed again on any failure."""
    saved: dict[str, str] = {}
    try:
        for kind, upload in uploads.items():
            saved[kind] = store.save_upload(kind, upload)
        record = validate_submission(fields, AttachmentRefs(**saved))
        return ApplicationRepository(db, store).insert(record)
    except Exception:
        if saved:
            CleanupQueue(store, saved.values()).run()
        raise


@router.post("/submit", response_model=IdResponse)
async def submit_application(
    request: Request,
    db: Session = Depends(get_db),
    store: AttachmentStore = Depends(get_attachment_store),
) -> IdResponse:
    enforce_body_limit(request, store)
    form = await request.form()
    try:
        fields = {key: value for key, value in form.items() if isinstance(value, str)}
        uploads = {
            kind: upload
            for kind in ATTACHMENT_KINDS
            if isinstance(upload := form.get(kind), UploadFile) and upload.filename
        }
        logger.info(
            "Received form submission: %s field(s), files=%s", len(fields), sorted(uploads)
        )
        application_id = await run_in_threadpool(store_submission, fields, uploads, db, store)
    finally:
        await form.close()

    return IdResponse(id=application_id, message="Application submitted successfully")


@router.get("/applications", response_model=ApplicationListResponse)
def list_applications(db: Session = Depends(get_db)) -> ApplicationListResponse:
    repo = ApplicationRepository(db)
    applications = repo.list_summaries()
    logger.info("Fetched %s applications", len(applications))
    return ApplicationListResponse(applications=applications)


@router.get("/applications/{application_id}", response_model=ApplicationDetailResponse)
def get_application(application_id: int, db: Session = Depends(get_db)) -> ApplicationDetailResponse:
    repo = ApplicationRepository(db)
    return ApplicationDetailResponse(application=repo.get_by_id(application_id))


@router.put("/applications/{application_id}/status", response_model=IdResponse)
def update_application_status(
    application_id: int,
    payload: StatusUpdateRequest,
    db: Session = Depends(get_db),
) -> IdResponse:
    repo = ApplicationRepository(db)
    return IdResponse(id=repo.update_status(application_id, payload.status))


@router.delete("/applications/{application_id}", response_model=IdResponse)
def delete_application(
    application_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    store: AttachmentStore = Depends(get_attachment_store),
) -> IdResponse:
    repo = ApplicationRepository(db, store)
    deleted_id, cleanup = repo.delete(application_id)
    background_tasks.add_task(cleanup.run)
    return IdResponse(id=deleted_id, message="Application deleted successfully")


@router.delete("/clear", response_model=MessageResponse)
def clear_applications(
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    store: AttachmentStore = Depends(get_attachment_store),
) -> MessageResponse:
    repo = ApplicationRepository(db, store)
    cleanup = repo.clear_all()
    background_tasks.add_task(cleanup.run)
    return MessageResponse(message="All applications cleared successfully")


@router.get("/download/{kind}/{application_id}")
def download_attachment(
    kind: str,
    application_id: int,
    db: Session = Depends(get_db),
    store: AttachmentStore = Depends(get_attachment_store),
) -> FileResponse:
    if kind not in ATTACHMENT_KINDS:
        logger.warning("Invalid file type: %s", kind)
        raise HTTPException(status_code=400, detail="Invalid file type")

    repo = ApplicationRepository(db, store)
    ref = repo.attachment_ref(application_id, kind)
    path = store.path_for(ref)
    logger.info("Sending file %s for application ID %s", ref, application_id)
    return FileResponse(path, media_type="application/pdf", filename=ref)


@router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", timestamp=datetime.now(UTC))
