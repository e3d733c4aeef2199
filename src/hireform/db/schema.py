"""Versioned, additive schema sync for the ``applications`` table.

Every column the model declares is listed in exactly one ``Migration``. On a
fresh database ``create_all`` builds the full table and every migration is a
no-op that only gets recorded. On an older database each missing column is
added nullable, backfilled, and tightened to NOT NULL when declared so. Nothing
is ever dropped, renamed or narrowed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any

import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.types import TypeEngine

from hireform.db.base import Base
from hireform.db.models import EducationJSON, Money, SchemaMigration
from hireform.types import DEFAULT_STATUS

logger = logging.getLogger(__name__)

APPLICATIONS_TABLE = "applications"


@dataclass(frozen=True, slots=True)
class ColumnSpec:
    name: str
    type_: TypeEngine[Any]
    nullable: bool = True
    backfill: Any = None


@dataclass(frozen=True, slots=True)
class Migration:
    version: str
    description: str
    columns: tuple[ColumnSpec, ...] = ()


@dataclass(slots=True)
class SchemaReport:
    created_tables: list[str] = field(default_factory=list)
    applied: list[str] = field(default_factory=list)
    added_columns: list[str] = field(default_factory=list)
    failed_columns: dict[str, str] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "created_tables": self.created_tables,
            "applied_migrations": self.applied,
            "added_columns": self.added_columns,
            "failed_columns": self.failed_columns,
        }


def _required_text(name: str, length: int | None = 255) -> ColumnSpec:
    type_ = sa.String(length) if length else sa.Text()
    return ColumnSpec(name, type_, nullable=False, backfill="")


def _optional(name: str, type_: TypeEngine[Any]) -> ColumnSpec:
    return ColumnSpec(name, type_)


MIGRATIONS: tuple[Migration, ...] = (
    Migration(
        "0001_applicant_core",
        "personal details, schooling and job preferences",
        (
            _required_text("full_name"),
            _required_text("email"),
            _required_text("mobile", 20),
            ColumnSpec("dob", sa.Date(), nullable=False, backfill=date(1970, 1, 1)),
            _required_text("parent_name"),
            _required_text("gender", 50),
            _required_text("nationality", 100),
            _optional("marital_status", sa.String(50)),
            _required_text("current_address", None),
            _required_text("permanent_address", None),
            _required_text("state", 100),
            _required_text("city", 100),
            _required_text("zipcode", 20),
            _required_text("emergency_contact"),
            _required_text("ssc_board"),
            ColumnSpec("ssc_year", sa.Integer(), nullable=False, backfill=0),
            _required_text("ssc_percentage", 10),
            _optional("intermediate_board", sa.String(255)),
            _optional("intermediate_year", sa.Integer()),
            _optional("intermediate_percentage", sa.String(10)),
            _optional("college_name", sa.String(255)),
            _optional("qualification", sa.String(255)),
            _optional("branch", sa.String(255)),
            _optional("graduation_year", sa.Integer()),
            _optional("graduation_percentage", sa.String(10)),
            _required_text("job_role"),
            _required_text("preferred_location"),
            _required_text("notice_period", 100),
            _optional("expected_salary", Money),
            _required_text("skills", None),
            _required_text("resume_path"),
            ColumnSpec(
                "submission_date",
                sa.DateTime(timezone=True),
                nullable=False,
                backfill=sa.func.current_timestamp(),
            ),
        ),
    ),
    Migration(
        "0002_experience_details",
        "prior employment block",
        (
            _required_text("experience_status", 50),
            _optional("years_experience", sa.Integer()),
            _optional("company_name", sa.String(255)),
            _optional("designation", sa.String(255)),
            _optional("work_location", sa.String(255)),
            _optional("start_date", sa.String(20)),
            _optional("end_date", sa.String(20)),
            _optional("last_salary", Money),
        ),
    ),
    Migration(
        "0003_links_and_extras",
        "additional education, profile links, references and cover letter",
        (
            _optional("additional_education", EducationJSON),
            _optional("alt_mobile", sa.String(20)),
            _optional("linkedin", sa.String(255)),
            _optional("github", sa.String(255)),
            _optional("certifications", sa.Text()),
            _optional("reference_name", sa.String(255)),
            _optional("reference_email", sa.String(255)),
            _optional("cover_letter_path", sa.String(255)),
        ),
    ),
    Migration(
        "0004_review_status",
        "review status with Pending default",
        (ColumnSpec("status", sa.String(50), backfill=DEFAULT_STATUS),),
    ),
)


def column_names(bind: Engine | Connection, table_name: str) -> set[str]:
    insp = sa.inspect(bind)
    if table_name not in insp.get_table_names():
        return set()
    return {column["name"] for column in insp.get_columns(table_name)}


def add_column(conn: Connection, table_name: str, spec: ColumnSpec) -> None:
    """Add one column on ``conn``: nullable first, then backfill, then NOT NULL."""
    ops = Operations(MigrationContext.configure(conn))
    with ops.batch_alter_table(table_name) as batch_op:
        batch_op.add_column(sa.Column(spec.name, spec.type_, nullable=True))

    if spec.backfill is not None:
        target = sa.table(table_name, sa.column(spec.name, spec.type_))
        conn.execute(
            sa.update(target).where(target.c[spec.name].is_(None)).values({spec.name: spec.backfill})
        )

    if not spec.nullable:
        with ops.batch_alter_table(table_name) as batch_op:
            batch_op.alter_column(spec.name, existing_type=spec.type_, nullable=False)


def applied_versions(engine: Engine) -> set[str]:
    if SchemaMigration.__tablename__ not in sa.inspect(engine).get_table_names():
        return set()
    with engine.connect() as conn:
        return set(conn.execute(sa.select(SchemaMigration.__table__.c.version)).scalars())


def ensure_schema(
    engine: Engine,
    migrations: tuple[Migration, ...] = MIGRATIONS,
    *,
    table_name: str = APPLICATIONS_TABLE,
) -> SchemaReport:
    report = SchemaReport()
    existing_tables = set(sa.inspect(engine).get_table_names())
    for table in Base.metadata.sorted_tables:
        if table.name not in existing_tables:
            report.created_tables.append(table.name)
    Base.metadata.create_all(bind=engine)
    for name in report.created_tables:
        logger.info("Created table %s", name)

    done = applied_versions(engine)
    for migration in migrations:
        if migration.version in done:
            continue

        present = column_names(engine, table_name)
        failed = False
        for spec in migration.columns:
            if spec.name in present:
                continue
            try:
                with engine.begin() as conn:
                    add_column(conn, table_name, spec)
            except Exception as exc:
                logger.error("Failed to add column %s to %s table: %s", spec.name, table_name, exc)
                report.failed_columns[spec.name] = str(exc)
                failed = True
                continue
            logger.info("Added column %s to %s table", spec.name, table_name)
            report.added_columns.append(spec.name)

        if failed:
            logger.warning("Migration %s incomplete; it will be retried on next startup", migration.version)
            continue

        with engine.begin() as conn:
            conn.execute(
                sa.insert(SchemaMigration.__table__).values(
                    version=migration.version,
                    description=migration.description,
                    applied_at=datetime.now(UTC),
                )
            )
        report.applied.append(migration.version)

    return report
