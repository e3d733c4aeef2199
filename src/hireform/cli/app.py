from __future__ import annotations

import json
from typing import NoReturn

import typer
import uvicorn
from fastapi.encoders import jsonable_encoder

from hireform.api.deps import get_attachment_store
from hireform.config import get_settings
from hireform.db.init import init_database
from hireform.db.repositories import ApplicationRepository
from hireform.db.session import SessionLocal
from hireform.errors import HireformError
from hireform.logging_config import configure_logging

app = typer.Typer(help="Hireform CLI")
applications_app = typer.Typer(help="Inspect and manage submitted applications")

app.add_typer(applications_app, name="applications")

_INITIALIZED = False


def ensure_initialized() -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    init_database()
    _INITIALIZED = True


def _echo(payload: object) -> None:
    typer.echo(json.dumps(jsonable_encoder(payload), indent=2))


def _fail(exc: HireformError) -> NoReturn:
    typer.echo(json.dumps({"ok": False, "error": exc.message, "reason": exc.reason}, indent=2), err=True)
    raise typer.Exit(code=1)


@app.command("init")
def init_cmd() -> None:
    """Create data directories and bring the applications table up to date."""
    configure_logging()
    result = init_database()
    _echo({"ok": True, **result})


@app.command("serve")
def serve_cmd(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
    reload: bool = typer.Option(False, "--reload"),
) -> None:
    configure_logging()
    settings = get_settings()
    uvicorn.run(
        "hireform.api.app:create_app",
        factory=True,
        host=host or settings.app_host,
        port=port or settings.app_port,
        reload=reload,
    )


@applications_app.command("list")
def applications_list() -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        rows = ApplicationRepository(db).list_summaries()
        _echo([row.model_dump() for row in rows])


@applications_app.command("show")
def applications_show(application_id: int = typer.Option(..., "--id")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            _echo(ApplicationRepository(db).get_by_id(application_id))
        except HireformError as exc:
            _fail(exc)


@applications_app.command("set-status")
def applications_set_status(
    application_id: int = typer.Option(..., "--id"),
    status: str = typer.Option(..., "--status"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            updated = ApplicationRepository(db).update_status(application_id, status)
        except HireformError as exc:
            _fail(exc)
        _echo({"ok": True, "id": updated, "status": status})


@applications_app.command("delete")
def applications_delete(application_id: int = typer.Option(..., "--id")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        repo = ApplicationRepository(db, get_attachment_store())
        try:
            deleted, cleanup = repo.delete(application_id)
        except HireformError as exc:
            _fail(exc)
        report = cleanup.run()
        _echo({"ok": True, "id": deleted, "deleted_files": report.deleted, "failed_files": report.failed})


@applications_app.command("clear")
def applications_clear(
    yes: bool = typer.Option(False, "--yes", help="Confirm deleting every application and upload"),
) -> None:
    configure_logging()
    if not yes:
        raise typer.BadParameter("refusing to clear without --yes")
    ensure_initialized()
    with SessionLocal() as db:
        report = ApplicationRepository(db, get_attachment_store()).clear_all().run()
        _echo({"ok": True, "deleted_files": len(report.deleted), "failed_files": report.failed})
