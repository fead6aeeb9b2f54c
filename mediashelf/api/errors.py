"""Exception handlers mapping domain errors to HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from mediashelf.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _describe(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())[1:])
    return f"{location}: {error['msg']}" if location else error["msg"]


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    logger.warning("%s %s -> 404: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


async def validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.warning("%s %s -> 400: %s", request.method, request.url.path, exc.errors)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": exc.message, "errors": exc.errors},
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [_describe(error) for error in exc.errors()]
    logger.warning("%s %s -> 400: %s", request.method, request.url.path, errors)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid input", "errors": errors},
    )


async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
    logger.warning("%s %s -> 409: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


def register_exception_handlers(application: FastAPI) -> None:
    application.add_exception_handler(NotFoundError, not_found_handler)
    application.add_exception_handler(ValidationError, validation_handler)
    application.add_exception_handler(RequestValidationError, request_validation_handler)
    application.add_exception_handler(ConflictError, conflict_handler)
