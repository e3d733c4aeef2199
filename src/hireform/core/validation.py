"""Validation and normalisation of raw application submissions.

``validate_submission`` turns the loosely typed form payload (multipart strings,
or JSON values when called from the CLI/tests) into a ``NormalizedApplication``.
Every rejection is a ``SubmissionValidationError`` whose ``reason`` is stable and
machine readable; the HTTP layer forwards it unchanged.
"""

from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any

from hireform.errors import SubmissionValidationError
from hireform.types import DEFAULT_STATUS, AttachmentRefs, EducationEntry, NormalizedApplication

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: tuple[str, ...] = (
    "full_name",
    "email",
    "mobile",
    "date_of_birth",
    "parent_name",
    "gender",
    "nationality",
    "current_address",
    "permanent_address",
    "state",
    "city",
    "zipcode",
    "emergency_contact",
    "ssc_board",
    "ssc_year",
    "ssc_percentage",
    "job_role",
    "preferred_location",
    "notice_period",
    "skills",
    "experience_status",
)

OPTIONAL_TEXT_FIELDS: tuple[str, ...] = (
    "marital_status",
    "intermediate_board",
    "intermediate_percentage",
    "college_name",
    "qualification",
    "branch",
    "graduation_percentage",
    "company_name",
    "designation",
    "work_location",
    "start_date",
    "end_date",
    "alt_mobile",
    "linkedin",
    "github",
    "certifications",
    "reference_name",
    "reference_email",
)

# Web form clients post the date of birth as "dob".
FIELD_ALIASES: dict[str, str] = {"dob": "date_of_birth"}

EDUCATION_KEYS: tuple[str, ...] = ("institution", "qualification", "year", "percentage")
EXPERIENCED = "Experienced"

_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")


def has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


@dataclass(frozen=True, slots=True)
class FieldGroup:
    """A named set of optional fields that must be filled all together or not at all."""

    name: str
    fields: tuple[str, ...]

    def present(self, values: Mapping[str, Any]) -> list[str]:
        return [field for field in self.fields if has_value(values.get(field))]

    def is_complete(self, values: Mapping[str, Any]) -> bool:
        return len(self.present(values)) == len(self.fields)

    def is_satisfied(self, values: Mapping[str, Any]) -> bool:
        return len(self.present(values)) in {0, len(self.fields)}


INTERMEDIATE_GROUP = FieldGroup(
    "intermediate",
    ("intermediate_board", "intermediate_year", "intermediate_percentage"),
)
GRADUATION_GROUP = FieldGroup(
    "graduation",
    ("college_name", "qualification", "branch", "graduation_year", "graduation_percentage"),
)
EXPERIENCE_GROUP = FieldGroup(
    "experience",
    ("years_experience", "company_name", "designation", "work_location", "start_date", "end_date"),
)
EDUCATION_GROUPS: tuple[FieldGroup, ...] = (INTERMEDIATE_GROUP, GRADUATION_GROUP)


def sanitize_integer(value: Any, field_name: str, *, nullable: bool) -> int | None:
    if not has_value(value):
        if nullable:
            return None
        raise SubmissionValidationError(
            "invalid_integer",
            f"Invalid {field_name}: empty value not allowed for non-nullable field",
        )
    if isinstance(value, bool):
        raise SubmissionValidationError("invalid_integer", f'Invalid {field_name}: "{value}" is not a valid integer')
    if isinstance(value, int):
        return value

    text = str(value).strip()
    if not _INTEGER_PATTERN.match(text):
        raise SubmissionValidationError("invalid_integer", f'Invalid {field_name}: "{value}" is not a valid integer')
    return int(text, 10)


def sanitize_number(value: Any, field_name: str) -> float | None:
    if not has_value(value):
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        raise SubmissionValidationError(
            "invalid_number", f'Invalid {field_name}: "{value}" is not a valid number'
        ) from None
    if not math.isfinite(number):
        raise SubmissionValidationError("invalid_number", f'Invalid {field_name}: "{value}" is not a valid number')
    return number


def parse_date(value: Any, field_name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise SubmissionValidationError(
            "invalid_date", f'Invalid {field_name}: "{value}" is not a valid date (YYYY-MM-DD)'
        ) from None


def decode_additional_education(raw: Any) -> list[EducationEntry]:
    """Accept a list of entries or its JSON text; every entry must be complete."""
    if raw is None or (isinstance(raw, (str, bytes)) and not raw.strip()):
        return []

    decoded = raw
    if isinstance(raw, (str, bytes)):
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Invalid additional_education payload: %s", exc)
            raise SubmissionValidationError(
                "invalid_additional_education", "Invalid additional_education format"
            ) from None

    if not isinstance(decoded, list):
        logger.warning("additional_education is not a list: %r", type(decoded).__name__)
        raise SubmissionValidationError("invalid_additional_education", "Invalid additional_education format")

    entries: list[EducationEntry] = []
    for index, item in enumerate(decoded):
        if not isinstance(item, Mapping) or not all(has_value(item.get(key)) for key in EDUCATION_KEYS):
            logger.warning("Incomplete additional education entry #%s: %r", index, item)
            raise SubmissionValidationError(
                "incomplete_additional_education", "Incomplete additional education data"
            )
        entries.append(EducationEntry(**{key: str(item[key]).strip() for key in EDUCATION_KEYS}))
    return entries


def canonical_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    values = dict(fields)
    for alias, name in FIELD_ALIASES.items():
        if alias in values:
            alias_value = values.pop(alias)
            values.setdefault(name, alias_value)
    return values


def _text(value: Any) -> str:
    return str(value).strip()


def _optional_text(value: Any) -> str | None:
    return _text(value) if has_value(value) else None


def validate_submission(
    fields: Mapping[str, Any],
    attachments: AttachmentRefs | Mapping[str, str | None],
    *,
    now: datetime | None = None,
) -> NormalizedApplication:
    values = canonical_fields(fields)

    missing = [name for name in REQUIRED_FIELDS if values.get(name) is None]
    if missing:
        logger.warning("Missing required fields: %s", missing)
        raise SubmissionValidationError("missing_fields", "Missing required fields", missing=missing)

    empty = [name for name in REQUIRED_FIELDS if not has_value(values[name])]
    if empty:
        logger.warning("Empty required fields: %s", empty)
        raise SubmissionValidationError("empty_fields", "Required fields must not be empty", missing=empty)

    ssc_year = sanitize_integer(values["ssc_year"], "ssc_year", nullable=False)
    intermediate_year = sanitize_integer(values.get("intermediate_year"), "intermediate_year", nullable=True)
    graduation_year = sanitize_integer(values.get("graduation_year"), "graduation_year", nullable=True)
    years_experience = sanitize_integer(values.get("years_experience"), "years_experience", nullable=True)
    date_of_birth = parse_date(values["date_of_birth"], "date_of_birth")

    incomplete = [group.name for group in EDUCATION_GROUPS if not group.is_satisfied(values)]
    if _text(values["experience_status"]) == EXPERIENCED and not EXPERIENCE_GROUP.is_complete(values):
        incomplete.append(EXPERIENCE_GROUP.name)
    if incomplete:
        logger.warning("Incomplete optional section data: %s", incomplete)
        raise SubmissionValidationError(
            "incomplete_section", "Incomplete optional section data", groups=incomplete
        )

    additional_education = decode_additional_education(values.get("additional_education"))
    expected_salary = sanitize_number(values.get("expected_salary"), "expected_salary")
    last_salary = sanitize_number(values.get("last_salary"), "last_salary")

    refs = attachments if isinstance(attachments, AttachmentRefs) else AttachmentRefs(**attachments)
    if not refs.resume:
        logger.warning("Resume is required but not provided")
        raise SubmissionValidationError("resume_required", "Resume is required")

    record: dict[str, Any] = {
        name: _text(values[name])
        for name in REQUIRED_FIELDS
        if name not in {"ssc_year", "date_of_birth"}
    }
    record.update({name: _optional_text(values.get(name)) for name in OPTIONAL_TEXT_FIELDS})
    record.update(
        date_of_birth=date_of_birth,
        ssc_year=ssc_year,
        intermediate_year=intermediate_year,
        graduation_year=graduation_year,
        years_experience=years_experience,
        additional_education=additional_education,
        expected_salary=expected_salary,
        last_salary=last_salary,
        resume_path=refs.resume,
        cover_letter_path=refs.cover_letter or None,
        submission_date=now or datetime.now(UTC),
        status=DEFAULT_STATUS,
    )
    return NormalizedApplication(**record)
