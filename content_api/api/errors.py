"""Exception handlers mapping domain errors onto JSON responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from content_api.mongodb.gridfs_service import ImageUploadError
from content_api.ordering.errors import ContentError, InvariantViolationError, StoreFailure

logger = logging.getLogger(__name__)


def _field_of(location: tuple[int | str, ...]) -> str:
    parts = [str(part) for part in location if part not in ("body", "query", "path")]
    return ".".join(parts) or "body"


async def content_error_handler(request: Request, exc: ContentError) -> JSONResponse:
    if isinstance(exc, InvariantViolationError):
        logger.error("Invariant violation on %s %s: %s", request.method, request.url.path, exc.message)
    elif isinstance(exc, StoreFailure):
        logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc.message)
    payload = exc.to_payload()
    if exc.retryable:
        payload["retryable"] = True
    return JSONResponse(status_code=exc.status_code, content=payload)


async def image_upload_error_handler(request: Request, exc: ImageUploadError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report payload validation failures as 400 with per-field messages."""
    details = [
        {"field": _field_of(tuple(error.get("loc", ()))), "message": error.get("msg", "invalid")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Validation failed", "details": details},
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=exc.headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ContentError, content_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ImageUploadError, image_upload_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_error_handler)  # type: ignore[arg-type]
