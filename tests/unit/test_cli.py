import json

from typer.testing import CliRunner

from hireform.cli.app import app
from hireform.core.validation import validate_submission
from hireform.db.repositories import ApplicationRepository
from hireform.db.session import SessionLocal

runner = CliRunner()


def _seed(store, make_fields, pdf_bytes) -> int:
    resume = store.save("resume", "cv.pdf", pdf_bytes, "application/pdf")
    with SessionLocal() as db:
        return ApplicationRepository(db).insert(validate_submission(make_fields(), {"resume": resume}))


def test_init_reports_schema_state() -> None:
    result = runner.invoke(app, ["init"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["ok"] is True
    assert payload["failed_columns"] == {}


def test_list_show_and_set_status(store, make_fields, pdf_bytes) -> None:
    app_id = _seed(store, make_fields, pdf_bytes)

    listed = runner.invoke(app, ["applications", "list"])
    assert listed.exit_code == 0
    assert [item["id"] for item in json.loads(listed.stdout)] == [app_id]

    shown = runner.invoke(app, ["applications", "show", "--id", str(app_id)])
    assert shown.exit_code == 0
    assert json.loads(shown.stdout)["email"] == "asha.verma@example.com"

    updated = runner.invoke(app, ["applications", "set-status", "--id", str(app_id), "--status", "Under Review"])
    assert updated.exit_code == 0
    assert json.loads(updated.stdout)["status"] == "Under Review"

    rejected = runner.invoke(app, ["applications", "set-status", "--id", str(app_id), "--status", "Archived"])
    assert rejected.exit_code == 1


def test_show_unknown_id_fails() -> None:
    result = runner.invoke(app, ["applications", "show", "--id", "404"])
    assert result.exit_code == 1


def test_delete_removes_row_and_files(store, make_fields, pdf_bytes) -> None:
    app_id = _seed(store, make_fields, pdf_bytes)

    result = runner.invoke(app, ["applications", "delete", "--id", str(app_id)])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["id"] == app_id
    assert len(payload["deleted_files"]) == 1
    assert store.list_refs() == []


def test_clear_requires_confirmation(store, make_fields, pdf_bytes) -> None:
    _seed(store, make_fields, pdf_bytes)

    refused = runner.invoke(app, ["applications", "clear"])
    assert refused.exit_code != 0

    cleared = runner.invoke(app, ["applications", "clear", "--yes"])
    assert cleared.exit_code == 0
    assert json.loads(cleared.stdout)["deleted_files"] == 1
    assert store.list_refs() == []


def test_delete_unknown_id_fails() -> None:
    result = runner.invoke(app, ["applications", "delete", "--id", "404"])

    assert result.exit_code == 1
    assert "not_found" in result.output
