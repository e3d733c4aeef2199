from __future__ import annotations

import os
import shutil
import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="hireform-tests-"))
os.environ["APP_ENV"] = "test"
os.environ["DATA_DIR"] = str(_TEST_ROOT)
os.environ["UPLOAD_DIR"] = str(_TEST_ROOT / "uploads")
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_ROOT / 'hireform_test.db'}"

from hireform.config import get_settings  # noqa: E402
from hireform.db.base import Base  # noqa: E402
from hireform.db.schema import ensure_schema  # noqa: E402
from hireform.db.session import engine  # noqa: E402
from hireform.storage import AttachmentStore  # noqa: E402

PDF_BYTES = b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\ntrailer << /Root 1 0 R >>\n%%EOF\n"


@pytest.fixture(autouse=True)
def reset_db() -> None:
    Base.metadata.drop_all(bind=engine)
    ensure_schema(engine)
    upload_dir = get_settings().upload_dir
    shutil.rmtree(upload_dir, ignore_errors=True)
    upload_dir.mkdir(parents=True, exist_ok=True)
    yield


@pytest.fixture
def upload_dir() -> Path:
    return get_settings().upload_dir


@pytest.fixture
def store(upload_dir: Path) -> AttachmentStore:
    return AttachmentStore(upload_dir)


@pytest.fixture
def pdf_bytes() -> bytes:
    return PDF_BYTES


@pytest.fixture
def make_fields() -> Callable[..., dict[str, str]]:
    def _make(**overrides: str) -> dict[str, str]:
        fields = {
            "full_name": "Asha Verma",
            "email": "asha.verma@example.com",
            "mobile": "9876543210",
            "dob": "1996-04-12",
            "parent_name": "Ravi Verma",
            "gender": "Female",
            "nationality": "Indian",
            "marital_status": "Single",
            "current_address": "12 Lake Road, Pune",
            "permanent_address": "12 Lake Road, Pune",
            "state": "Maharashtra",
            "city": "Pune",
            "zipcode": "411001",
            "emergency_contact": "Ravi Verma 9876500000",
            "ssc_board": "CBSE",
            "ssc_year": "2012",
            "ssc_percentage": "88",
            "job_role": "Backend Developer",
            "preferred_location": "Pune",
            "notice_period": "30 days",
            "expected_salary": "900000",
            "skills": "Python, SQL",
            "experience_status": "Fresher",
        }
        fields.update(overrides)
        return fields

    return _make
