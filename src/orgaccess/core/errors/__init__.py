"""Error handling module with RFC 7807 Problem Details."""

from orgaccess.core.errors.exceptions import (
    AlreadyExistsError,
    AppException,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
)
from orgaccess.core.errors.handlers import (
    FieldError,
    ProblemDetail,
    register_exception_handlers,
)


__all__ = [
    "AlreadyExistsError",
    # Exceptions
    "AppException",
    "ConflictError",
    # Handlers
    "FieldError",
    "ForbiddenError",
    "NotFoundError",
    "ProblemDetail",
    "UnauthorizedError",
    "register_exception_handlers",
]
