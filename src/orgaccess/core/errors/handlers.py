"""RFC 7807 Problem Details exception handlers.

Converts access-control failures (unknown ids, duplicate permissions,
missing principal, denied checks) into Problem Details responses.

See: https://tools.ietf.org/html/rfc7807
"""

from typing import TYPE_CHECKING, Any, cast

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from orgaccess.config import settings
from orgaccess.core.errors.exceptions import AppException


if TYPE_CHECKING:
    from starlette.types import ExceptionHandler


logger = structlog.get_logger()


class FieldError(BaseModel):
    """Represents a single field validation error."""

    field: str
    message: str
    type: str | None = None


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details response schema.

    Attributes:
        type: URI reference identifying the problem type
        title: Short human-readable summary
        status: HTTP status code
        detail: Human-readable explanation specific to this occurrence
        instance: Request path that produced the problem
        errors: Field-level errors (validation failures only)
        trace_id: Request ID for correlating with logs
    """

    type: str
    title: str
    status: int
    detail: str
    instance: str | None = None
    errors: list[FieldError] | None = None
    trace_id: str | None = None

    model_config = {"extra": "allow"}


def _problem(
    request: Request,
    error_code: str,
    title: str,
    status_code: int,
    detail: str,
    errors: list[FieldError] | None = None,
) -> dict[str, Any]:
    return ProblemDetail(
        type=f"{settings.api_docs_base_url}/errors/{error_code}",
        title=title,
        status=status_code,
        detail=detail,
        instance=str(request.url.path),
        errors=errors,
        trace_id=getattr(request.state, "trace_id", None),
    ).model_dump(exclude_none=True)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle application-specific exceptions."""
    user_id = getattr(request.state, "user_id", None)
    logger.warning(
        "app_exception",
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        path=str(request.url.path),
        user_id=str(user_id) if user_id else None,
        details=exc.details,
    )

    content = _problem(
        request,
        exc.error_code,
        exc.error_code.replace("_", " ").title(),
        exc.status_code,
        exc.message,
    )
    for key, value in exc.details.items():
        content.setdefault(key, value)

    return JSONResponse(status_code=exc.status_code, content=content)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors with field-level detail."""
    errors: list[FieldError] = []

    for error in exc.errors():
        # Skip "body" prefix in field path
        field_parts = [str(part) for part in error.get("loc", ()) if part != "body"]
        errors.append(
            FieldError(
                field=".".join(field_parts) if field_parts else "unknown",
                message=error.get("msg", "Invalid value"),
                type=error.get("type"),
            )
        )

    logger.warning(
        "validation_error",
        path=str(request.url.path),
        error_count=len(errors),
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_problem(
            request,
            "validation_error",
            "Validation Error",
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Request validation failed",
            errors=errors,
        ),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions without leaking internals to clients."""
    logger.exception(
        "unhandled_exception",
        path=str(request.url.path),
        error_type=type(exc).__name__,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_problem(
            request,
            "internal_error",
            "Internal Server Error",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred",
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(
        AppException, cast("ExceptionHandler", app_exception_handler)
    )
    app.add_exception_handler(
        RequestValidationError, cast("ExceptionHandler", validation_exception_handler)
    )
    app.add_exception_handler(Exception, generic_exception_handler)
