from __future__ import annotations

from datetime import date
from pathlib import Path

import sqlalchemy as sa
from sqlalchemy.orm import Session

from hireform.core.validation import validate_submission
from hireform.db.models import Application
from hireform.db.repositories import ApplicationRepository
from hireform.db.schema import MIGRATIONS, ColumnSpec, Migration, column_names, ensure_schema

ALL_VERSIONS = [migration.version for migration in MIGRATIONS]


def _engine(tmp_path: Path) -> sa.Engine:
    return sa.create_engine(f"sqlite:///{tmp_path / 'sync.db'}")


def _create_legacy_table(engine: sa.Engine) -> None:
    with engine.begin() as conn:
        conn.execute(
            sa.text(
                "CREATE TABLE applications ("
                "id INTEGER PRIMARY KEY, full_name VARCHAR(255) NOT NULL, "
                "email VARCHAR(255) NOT NULL UNIQUE, resume_path VARCHAR(255) NOT NULL, "
                "submission_date DATETIME NOT NULL)"
            )
        )
        conn.execute(
            sa.text(
                "INSERT INTO applications (full_name, email, resume_path, submission_date) "
                "VALUES ('Old Applicant', 'old@example.com', 'resume-1.pdf', '2023-05-01 10:00:00')"
            )
        )


def test_fresh_database_gets_full_table_and_records_every_migration(tmp_path: Path) -> None:
    engine = _engine(tmp_path)

    report = ensure_schema(engine)

    assert set(report.created_tables) == {"applications", "schema_migrations"}
    assert report.applied == ALL_VERSIONS
    assert report.added_columns == []
    assert report.failed_columns == {}
    assert column_names(engine, "applications") == {column.name for column in Application.__table__.columns}


def test_second_run_is_a_noop(tmp_path: Path) -> None:
    engine = _engine(tmp_path)
    ensure_schema(engine)

    report = ensure_schema(engine)

    assert report.as_dict() == {
        "created_tables": [],
        "applied_migrations": [],
        "added_columns": [],
        "failed_columns": {},
    }


def test_legacy_table_gains_missing_columns_with_backfill(tmp_path: Path) -> None:
    engine = _engine(tmp_path)
    _create_legacy_table(engine)

    report = ensure_schema(engine)

    assert report.created_tables == ["schema_migrations"]
    assert report.failed_columns == {}
    assert report.applied == ALL_VERSIONS
    assert "experience_status" in report.added_columns
    assert "status" in report.added_columns
    assert "full_name" not in report.added_columns
    assert "dob" in report.added_columns

    with engine.connect() as conn:
        row = conn.execute(
            sa.text("SELECT full_name, experience_status, status, ssc_year, linkedin FROM applications")
        ).one()
    assert row == ("Old Applicant", "", "Pending", 0, None)

    columns = {column["name"]: column for column in sa.inspect(engine).get_columns("applications")}
    assert columns["experience_status"]["nullable"] is False
    assert columns["linkedin"]["nullable"] is True


def test_legacy_dob_column_backs_date_of_birth(tmp_path: Path, make_fields) -> None:
    engine = _engine(tmp_path)
    with engine.begin() as conn:
        conn.execute(
            sa.text(
                "CREATE TABLE applications ("
                "id INTEGER PRIMARY KEY, full_name VARCHAR(255) NOT NULL, "
                "email VARCHAR(255) NOT NULL UNIQUE, dob DATE NOT NULL, "
                "resume_path VARCHAR(255) NOT NULL, submission_date DATETIME NOT NULL)"
            )
        )

    report = ensure_schema(engine)

    assert report.failed_columns == {}
    assert "dob" not in report.added_columns
    assert "date_of_birth" not in column_names(engine, "applications")

    with Session(engine) as db:
        repo = ApplicationRepository(db)
        app_id = repo.insert(validate_submission(make_fields(), {"resume": "resume-1.pdf"}))
        assert repo.get_by_id(app_id)["date_of_birth"] == date(1996, 4, 12)

    with engine.connect() as conn:
        assert conn.execute(sa.text("SELECT dob FROM applications")).scalar_one() == "1996-04-12"


def test_failed_column_does_not_block_the_others(tmp_path: Path) -> None:
    engine = _engine(tmp_path)
    ensure_schema(engine)
    broken = Migration(
        "9001_nicknames",
        "nickname plus a column that clashes with full_name",
        (
            ColumnSpec("nickname", sa.String(50)),
            ColumnSpec("FULL_NAME", sa.String(255)),
        ),
    )

    report = ensure_schema(engine, (*MIGRATIONS, broken))

    assert report.added_columns == ["nickname"]
    assert list(report.failed_columns) == ["FULL_NAME"]
    assert report.applied == []
    assert "nickname" in column_names(engine, "applications")

    with engine.connect() as conn:
        versions = set(conn.execute(sa.text("SELECT version FROM schema_migrations")).scalars())
    assert "9001_nicknames" not in versions
