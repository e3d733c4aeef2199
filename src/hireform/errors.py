"""Error taxonomy shared by the validator, repository, store and HTTP layer."""

from __future__ import annotations


class HireformError(Exception):
    """Base class for every error the service raises on purpose."""

    reason = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SubmissionValidationError(HireformError, ValueError):
    """A submission is malformed; ``reason`` is the machine-readable cause."""

    def __init__(
        self,
        reason: str,
        message: str,
        *,
        missing: list[str] | None = None,
        groups: list[str] | None = None,
    ):
        super().__init__(message)
        self.reason = reason
        self.missing = list(missing or [])
        self.groups = list(groups or [])


class DuplicateKeyError(HireformError):
    reason = "duplicate_email"


class ConstraintViolationError(HireformError):
    reason = "constraint_violation"


class NotFoundError(HireformError, LookupError):
    reason = "not_found"


class InvalidStatusError(HireformError, ValueError):
    reason = "invalid_status"


class StorageError(HireformError):
    reason = "storage_error"


class UploadRejectedError(HireformError, ValueError):
    reason = "upload_rejected"
