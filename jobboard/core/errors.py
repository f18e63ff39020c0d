"""Domain error taxonomy and the FastAPI handlers that render it."""

import logging
from enum import Enum
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class JobBoardError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal_error"

    def __init__(self, message: str = "An error occurred"):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}


class Unauthenticated(JobBoardError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthenticated"


class Forbidden(JobBoardError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"


class NotFound(JobBoardError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class Conflict(JobBoardError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class ValidationFailed(JobBoardError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_failed"


class UploadRejectReason(str, Enum):
    """Why an upload was refused before anything was written."""

    MISSING_FILE = "missing_file"
    UNKNOWN_FIELD = "unknown_field"
    TOO_LARGE = "too_large"
    INVALID_TYPE = "invalid_type"
    INVALID_FILENAME = "invalid_filename"


class UploadRejected(JobBoardError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "upload_rejected"

    def __init__(self, reason: UploadRejectReason, message: Optional[str] = None):
        super().__init__(message or reason.value.replace("_", " "))
        self.reason = reason

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["reason"] = self.reason.value
        return data


class PersistenceFailed(JobBoardError):
    code = "persistence_failed"


class StorageFailed(JobBoardError):
    code = "storage_failed"


async def jobboard_error_handler(request: Request, exc: JobBoardError) -> JSONResponse:
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures as a single 400 message."""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": message, "code": ValidationFailed.code},
    )


def register_exception_handlers(app: FastAPI, debug: bool = False) -> None:
    """Attach the domain handlers and the catch-all 500 handler to an app."""
    app.add_exception_handler(JobBoardError, jobboard_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """Global exception handler."""
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "message": str(exc) if debug else "An error occurred",
            },
        )
