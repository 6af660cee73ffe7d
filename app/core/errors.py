"""
Error taxonomy and the FastAPI exception handlers that render it.

Every error leaves the API with the same flat body:

    {"message": "...", "error": "MACHINE_CODE", ...extra}

where extra carries context such as ``limit``/``used`` for quota denials or
field-level ``errors`` for validation failures. Stack traces and database
messages are never returned to clients.
"""
import logging
from enum import Enum
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class DenialReason(str, Enum):
    """Machine-readable reasons for subscription/quota policy denials."""
    SUBSCRIPTION_REQUIRED = "SUBSCRIPTION_REQUIRED"
    DAILY_LIMIT_REACHED = "DAILY_LIMIT_REACHED"
    PLAN_INACTIVE = "PLAN_INACTIVE"
    ARTICLE_NOT_PUBLISHED = "ARTICLE_NOT_PUBLISHED"
    VIDEO_NOT_PUBLISHED = "VIDEO_NOT_PUBLISHED"


class AppError(Exception):
    """
    Base application error.

    Args:
        code: Machine-readable error code (e.g. "PLAN_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status used when rendered by the API
        extra: Additional top-level fields merged into the response body
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        code: str,
        message: str,
        status_code: Optional[int] = None,
        extra: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra or {}

    def to_dict(self) -> dict:
        body = {"message": self.message, "error": self.code}
        body.update(self.extra)
        return body


class ValidationError(AppError):
    """Malformed or missing input (422). ``errors`` maps field -> messages."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, errors: dict[str, list[str]], message: str = "Validation failed"):
        super().__init__("VALIDATION_FAILED", message, extra={"errors": errors})
        self.errors = errors

    @classmethod
    def from_pydantic(cls, errors: list[dict], skip_location: int = 0) -> "ValidationError":
        """
        Build from pydantic's ``errors()`` list.

        ``skip_location`` drops leading location segments ("body", "query", ...).
        """
        field_errors: dict[str, list[str]] = {}
        for error in errors:
            loc = [str(part) for part in error.get("loc", ())[skip_location:]] or ["__root__"]
            field_errors.setdefault(".".join(loc), []).append(error.get("msg", "Invalid value"))
        return cls(field_errors)


class NotFoundError(AppError):
    """Referenced entity is absent (404)."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, code: str, message: str, extra: Optional[dict[str, Any]] = None):
        super().__init__(code, message, extra=extra)


class AuthenticationError(AppError):
    """Missing, expired or invalid credentials (401)."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Authentication required", code: str = "UNAUTHENTICATED"):
        super().__init__(code, message)


class AuthorizationError(AppError):
    """Authenticated but lacking privilege or ownership (403)."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Unauthorized", code: str = "UNAUTHORIZED"):
        super().__init__(code, message)


class ConflictError(AppError):
    """Resource already exists (409)."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, code: str, message: str):
        super().__init__(code, message)


class PolicyDenialError(AppError):
    """
    Subscription or quota rule refused the request.

    Rendered as 403, except PLAN_INACTIVE which is a bad request (400).
    """

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, reason: DenialReason, message: str, extra: Optional[dict[str, Any]] = None):
        status_code = (
            status.HTTP_400_BAD_REQUEST
            if reason == DenialReason.PLAN_INACTIVE
            else status.HTTP_403_FORBIDDEN
        )
        super().__init__(reason.value, message, status_code=status_code, extra=extra)
        self.reason = reason


class StorageError(AppError):
    """Underlying persistence failure; surfaced as a generic server fault."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Internal server error"):
        super().__init__("SERVER_ERROR", message)


# --- Exception handlers ---

async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"[ERROR] {request.method} {request.url.path} -> {exc.code}: {exc.message}")
    else:
        logger.info(f"[DENIED] {request.method} {request.url.path} -> {exc.status_code} {exc.code}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI/pydantic validation failures with field-level detail."""
    # Drop the leading "body"/"query"/"path" segment from the location
    body = ValidationError.from_pydantic(exc.errors(), skip_location=1).to_dict()
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder(body),
    )


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception(f"[DB ERROR] {request.method} {request.url.path}: {type(exc).__name__}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=StorageError().to_dict(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
