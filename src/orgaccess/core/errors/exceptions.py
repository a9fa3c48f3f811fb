"""Access-control exceptions.

Each exception carries an HTTP status and a machine-readable error code and
is rendered as an RFC 7807 Problem Details response by the handlers. Only
lookup, uniqueness and authorization failures reach callers; store outages
during access evaluation degrade to safe defaults instead of raising.
"""

from typing import Any


class AppException(Exception):
    """Root of the application's error hierarchy.

    Subclasses override the class-level defaults; any of them can be
    replaced per raise.
    """

    status_code: int = 500
    error_code: str = "internal_error"
    message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message if message is not None else type(self).message
        self.error_code = error_code if error_code is not None else type(self).error_code
        self.details: dict[str, Any] = dict(details or {})
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.error_code!r}, {self.message!r})"


class NotFoundError(AppException):
    """A referenced role, permission or user does not exist.

    ``resource`` and ``resource_id`` are copied into the details, and the
    message defaults to "<Resource> not found".

    Example:
        raise NotFoundError(resource="role", resource_id=str(role_id))
    """

    status_code = 404
    error_code = "not_found"
    message = "Resource not found"

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = dict(kwargs.pop("details", None) or {})
        if resource is not None:
            details["resource"] = resource
            message = message or f"{resource.capitalize()} not found"
        if resource_id is not None:
            details["resource_id"] = resource_id
        super().__init__(message, details=details, **kwargs)


class ConflictError(AppException):
    """The operation clashes with stored state, e.g. deleting an in-use permission."""

    status_code = 409
    error_code = "conflict"
    message = "Resource conflict"


class AlreadyExistsError(ConflictError):
    """A permission's (module, action) pair or a role name is already taken."""

    error_code = "already_exists"
    message = "Resource already exists"


class UnauthorizedError(AppException):
    """No usable authenticated principal accompanies the request."""

    status_code = 401
    error_code = "unauthorized"
    message = "Authentication required"


class ForbiddenError(AppException):
    """The principal was evaluated and denied.

    Example:
        raise ForbiddenError(
            "Missing required permissions: crm_contacts:delete",
            error_code="permission_denied",
            details={"required_permissions": ["crm_contacts:delete"]},
        )
    """

    status_code = 403
    error_code = "forbidden"
    message = "Access forbidden"
