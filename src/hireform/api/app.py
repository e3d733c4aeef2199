from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException

from hireform.api.routes import router as api_router
from hireform.api.schemas import ErrorResponse
from hireform.config import get_settings
from hireform.db.init import init_database
from hireform.errors import (
    ConstraintViolationError,
    DuplicateKeyError,
    HireformError,
    InvalidStatusError,
    NotFoundError,
    StorageError,
    SubmissionValidationError,
    UploadRejectedError,
)
from hireform.logging_config import configure_logging

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Something went wrong!"


def _error(status_code: int, error: str, **extra: object) -> JSONResponse:
    body = ErrorResponse(error=error, **extra).model_dump(exclude_none=True)
    return JSONResponse(body, status_code=status_code)


def error_response(exc: HireformError) -> JSONResponse:
    if isinstance(exc, SubmissionValidationError):
        return _error(
            400,
            exc.message,
            reason=exc.reason,
            missing=exc.missing or None,
            groups=exc.groups or None,
        )
    if isinstance(exc, UploadRejectedError):
        return _error(400, f"File upload error: {exc.message}", reason=exc.reason)
    if isinstance(exc, (DuplicateKeyError, InvalidStatusError)):
        return _error(400, exc.message, reason=exc.reason)
    if isinstance(exc, NotFoundError):
        return _error(404, exc.message)
    if isinstance(exc, (StorageError, ConstraintViolationError)):
        logger.error("%s: %s", type(exc).__name__, exc.message)
        return _error(500, GENERIC_ERROR)
    logger.error("Unhandled service error: %s", exc.message)
    return _error(500, GENERIC_ERROR)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(HireformError)
    async def _service_error(request: Request, exc: HireformError) -> JSONResponse:
        return error_response(exc)

    @app.exception_handler(HTTPException)
    async def _http_error(request: Request, exc: HTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def _request_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning("Invalid request to %s: %s", request.url.path, exc.errors())
        return _error(400, "Invalid request", reason="invalid_request")

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Error processing %s %s", request.method, request.url.path)
        return _error(500, GENERIC_ERROR)


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type"],
    )
    install_error_handlers(app)

    @app.on_event("startup")
    def _startup() -> None:
        report = init_database()
        logger.info("Database ready: %s", report)

    app.include_router(api_router)
    app.mount(
        "/uploads",
        StaticFiles(directory=str(settings.upload_dir), check_dir=False),
        name="uploads",
    )
    return app
