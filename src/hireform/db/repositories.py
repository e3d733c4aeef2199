from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy import delete, inspect, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hireform.core.cleanup import CleanupQueue
from hireform.db.models import Application
from hireform.errors import ConstraintViolationError, DuplicateKeyError, InvalidStatusError, NotFoundError
from hireform.storage import AttachmentStore
from hireform.types import APPLICATION_STATUSES, ATTACHMENT_KINDS, ApplicationSummary, NormalizedApplication

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = (
    Application.id,
    Application.full_name,
    Application.email,
    Application.job_role,
    Application.submission_date,
    Application.resume_path,
    Application.cover_letter_path,
    Application.status,
)


def decode_education_blob(value: Any) -> list[dict[str, Any]]:
    if value is None:
        return []
    if isinstance(value, (str, bytes)):
        try:
            value = json.loads(value)
        except ValueError as exc:
            logger.error("Error parsing additional_education: %s", exc)
            return []
    if not isinstance(value, list):
        return []
    return value


def is_duplicate_email(exc: IntegrityError) -> bool:
    orig = exc.orig
    message = str(orig).lower()
    unique_violation = getattr(orig, "pgcode", None) == "23505" or "unique" in message or "duplicate" in message
    return unique_violation and "email" in message


class ApplicationRepository:
    def __init__(self, session: Session, store: AttachmentStore | None = None):
        self.session = session
        self.store = store

    def insert(self, record: NormalizedApplication) -> int:
        application = Application(**record.model_dump(mode="python"))
        self.session.add(application)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            if is_duplicate_email(exc):
                logger.warning("Duplicate application email: %s", record.email)
                raise DuplicateKeyError("An application with this email already exists") from exc
            logger.error("Integrity error inserting application: %s", exc.orig)
            raise ConstraintViolationError("Application violates a database constraint") from exc

        logger.info("Database insertion successful, application ID: %s", application.id)
        return application.id

    def get(self, application_id: int) -> Application | None:
        return self.session.get(Application, application_id)

    def _require(self, application_id: int) -> Application:
        application = self.get(application_id)
        if application is None:
            logger.warning("Application with ID %s not found", application_id)
            raise NotFoundError("Application not found")
        return application

    def get_by_id(self, application_id: int) -> dict[str, Any]:
        application = self._require(application_id)
        data = {attr.key: getattr(application, attr.key) for attr in inspect(Application).column_attrs}
        data["additional_education"] = decode_education_blob(application.additional_education)
        return data

    def list_summaries(self) -> list[ApplicationSummary]:
        statement = select(*SUMMARY_COLUMNS).order_by(
            Application.submission_date.desc(), Application.id.desc()
        )
        return [ApplicationSummary.model_validate(dict(row)) for row in self.session.execute(statement).mappings()]

    def update_status(self, application_id: int, status: str) -> int:
        if status not in APPLICATION_STATUSES:
            logger.warning("Invalid status: %s", status)
            raise InvalidStatusError("Invalid status")

        application = self._require(application_id)
        application.status = status
        self.session.commit()
        logger.info("Status updated to %s for application ID %s", status, application_id)
        return application.id

    def delete(self, application_id: int) -> tuple[int, CleanupQueue]:
        application = self._require(application_id)
        cleanup = CleanupQueue(self.store, [application.resume_path, application.cover_letter_path])

        self.session.delete(application)
        self.session.commit()
        logger.info("Application ID %s deleted", application_id)
        return application_id, cleanup

    def clear_all(self) -> CleanupQueue:
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            self.session.execute(text("TRUNCATE TABLE applications RESTART IDENTITY"))
        else:
            self.session.execute(delete(Application))
            if dialect == "sqlite":
                has_sequence = self.session.execute(
                    text("SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'sqlite_sequence'")
                ).first()
                if has_sequence:
                    self.session.execute(
                        text("DELETE FROM sqlite_sequence WHERE name = :name"), {"name": "applications"}
                    )
        self.session.commit()
        logger.info("All applications cleared from database")

        refs = self.store.list_refs() if self.store is not None else []
        return CleanupQueue(self.store, refs)

    def attachment_ref(self, application_id: int, kind: str) -> str:
        if kind not in ATTACHMENT_KINDS:
            raise ValueError(f"unsupported attachment kind '{kind}'")
        application = self.get(application_id)
        ref = getattr(application, f"{kind}_path", None) if application is not None else None
        if not ref:
            logger.warning("File not found for %s, application ID: %s", kind, application_id)
            raise NotFoundError("File not found")
        return ref
