from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from hireform.types import ApplicationSummary


class StatusUpdateRequest(BaseModel):
    status: str


class IdResponse(BaseModel):
    success: bool = True
    id: int
    message: str | None = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ApplicationListResponse(BaseModel):
    success: bool = True
    applications: list[ApplicationSummary] = Field(default_factory=list)


class ApplicationDetailResponse(BaseModel):
    success: bool = True
    application: dict


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    reason: str | None = None
    missing: list[str] | None = None
    groups: list[str] | None = None


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
