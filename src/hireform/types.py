from __future__ import annotations

from datetime import date, datetime
from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

ApplicationStatus = Literal["Pending", "Approved", "Rejected", "Under Review"]
APPLICATION_STATUSES: tuple[str, ...] = get_args(ApplicationStatus)
DEFAULT_STATUS: ApplicationStatus = "Pending"

AttachmentKind = Literal["resume", "cover_letter"]
ATTACHMENT_KINDS: tuple[str, ...] = get_args(AttachmentKind)


class EducationEntry(BaseModel):
    institution: str
    qualification: str
    year: str
    percentage: str


class AttachmentRefs(BaseModel):
    resume: str | None = None
    cover_letter: str | None = None


class NormalizedApplication(BaseModel):
    full_name: str
    email: str
    mobile: str
    date_of_birth: date
    parent_name: str
    gender: str
    nationality: str
    marital_status: str | None = None
    current_address: str
    permanent_address: str
    state: str
    city: str
    zipcode: str
    emergency_contact: str

    ssc_board: str
    ssc_year: int
    ssc_percentage: str
    intermediate_board: str | None = None
    intermediate_year: int | None = None
    intermediate_percentage: str | None = None
    college_name: str | None = None
    qualification: str | None = None
    branch: str | None = None
    graduation_year: int | None = None
    graduation_percentage: str | None = None
    additional_education: list[EducationEntry] = Field(default_factory=list)

    job_role: str
    preferred_location: str
    notice_period: str
    expected_salary: float | None = None
    skills: str

    experience_status: str
    years_experience: int | None = None
    company_name: str | None = None
    designation: str | None = None
    work_location: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    last_salary: float | None = None

    alt_mobile: str | None = None
    linkedin: str | None = None
    github: str | None = None
    certifications: str | None = None
    reference_name: str | None = None
    reference_email: str | None = None

    resume_path: str
    cover_letter_path: str | None = None
    submission_date: datetime
    status: ApplicationStatus = DEFAULT_STATUS


class ApplicationSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    email: str
    job_role: str
    submission_date: datetime
    resume_path: str
    cover_letter_path: str | None = None
    status: str | None = None
