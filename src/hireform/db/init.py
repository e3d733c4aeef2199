from __future__ import annotations

from pathlib import Path

from hireform.config import get_settings
from hireform.db.schema import ensure_schema
from hireform.db.session import engine


def ensure_data_directories() -> None:
    settings = get_settings()
    paths: list[Path] = [settings.data_dir, settings.upload_dir]
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)


def init_database() -> dict:
    ensure_data_directories()
    report = ensure_schema(engine)
    return report.as_dict()
