from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class DreamcatcherError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class ValidationError(DreamcatcherError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid request"


class InvalidCredentials(DreamcatcherError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Invalid credentials"


class NotFoundError(DreamcatcherError):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Not found"


class AllocationExhausted(DreamcatcherError):
    """No free unique code could be found within the retry budget."""

    detail = "Could not allocate a unique code"


class StorageError(DreamcatcherError):
    detail = "Internal server error"


async def dreamcatcher_error_handler(request: Request, exc: DreamcatcherError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(part) for part in error.get("loc", ()) if part != "body") for error in exc.errors()]
    logger.info("Rejected request body", extra={"path": request.url.path, "fields": fields})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request body", "fields": fields},
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Unhandled database error", extra={"path": request.url.path})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": StorageError.detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DreamcatcherError, dreamcatcher_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
