from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import JSON, Date, DateTime, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from hireform.db.base import Base
from hireform.types import DEFAULT_STATUS

EducationJSON = JSON().with_variant(JSONB(), "postgresql")
Money = Numeric(asdecimal=False)


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    mobile: Mapped[str] = mapped_column(String(20), nullable=False)
    date_of_birth: Mapped[date] = mapped_column("dob", Date, nullable=False)
    parent_name: Mapped[str] = mapped_column(String(255), nullable=False)
    gender: Mapped[str] = mapped_column(String(50), nullable=False)
    nationality: Mapped[str] = mapped_column(String(100), nullable=False)
    marital_status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    current_address: Mapped[str] = mapped_column(Text, nullable=False)
    permanent_address: Mapped[str] = mapped_column(Text, nullable=False)
    state: Mapped[str] = mapped_column(String(100), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    zipcode: Mapped[str] = mapped_column(String(20), nullable=False)
    emergency_contact: Mapped[str] = mapped_column(String(255), nullable=False)

    ssc_board: Mapped[str] = mapped_column(String(255), nullable=False)
    ssc_year: Mapped[int] = mapped_column(Integer, nullable=False)
    ssc_percentage: Mapped[str] = mapped_column(String(10), nullable=False)
    intermediate_board: Mapped[str | None] = mapped_column(String(255), nullable=True)
    intermediate_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    intermediate_percentage: Mapped[str | None] = mapped_column(String(10), nullable=True)
    college_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    qualification: Mapped[str | None] = mapped_column(String(255), nullable=True)
    branch: Mapped[str | None] = mapped_column(String(255), nullable=True)
    graduation_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    graduation_percentage: Mapped[str | None] = mapped_column(String(10), nullable=True)
    additional_education: Mapped[list[dict[str, Any]] | None] = mapped_column(EducationJSON, nullable=True)

    job_role: Mapped[str] = mapped_column(String(255), nullable=False)
    preferred_location: Mapped[str] = mapped_column(String(255), nullable=False)
    notice_period: Mapped[str] = mapped_column(String(100), nullable=False)
    expected_salary: Mapped[float | None] = mapped_column(Money, nullable=True)
    skills: Mapped[str] = mapped_column(Text, nullable=False)

    experience_status: Mapped[str] = mapped_column(String(50), nullable=False)
    years_experience: Mapped[int | None] = mapped_column(Integer, nullable=True)
    company_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    designation: Mapped[str | None] = mapped_column(String(255), nullable=True)
    work_location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    start_date: Mapped[str | None] = mapped_column(String(20), nullable=True)
    end_date: Mapped[str | None] = mapped_column(String(20), nullable=True)
    last_salary: Mapped[float | None] = mapped_column(Money, nullable=True)

    alt_mobile: Mapped[str | None] = mapped_column(String(20), nullable=True)
    linkedin: Mapped[str | None] = mapped_column(String(255), nullable=True)
    github: Mapped[str | None] = mapped_column(String(255), nullable=True)
    certifications: Mapped[str | None] = mapped_column(Text, nullable=True)
    reference_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    reference_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    resume_path: Mapped[str] = mapped_column(String(255), nullable=False)
    cover_letter_path: Mapped[str | None] = mapped_column(String(255), nullable=True)
    submission_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    status: Mapped[str | None] = mapped_column(
        String(50), default=DEFAULT_STATUS, server_default=DEFAULT_STATUS, nullable=True
    )


class SchemaMigration(Base):
    __tablename__ = "schema_migrations"

    version: Mapped[str] = mapped_column(String(120), primary_key=True)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    applied_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
