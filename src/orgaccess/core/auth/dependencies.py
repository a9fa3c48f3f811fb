"""FastAPI dependencies for the authenticated principal.

Session and token handling live upstream; by the time a request reaches a
route, the auth layer has placed the principal's id on
``request.state.user_id``. Routes only ever see that opaque id.
"""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends, Request

from orgaccess.core.errors import UnauthorizedError


async def get_current_user_id(request: Request) -> UUID:
    """Get the authenticated principal's id.

    Raises:
        UnauthorizedError: If no principal accompanies the request
    """
    user_id = getattr(request.state, "user_id", None)
    if user_id is None:
        raise UnauthorizedError(
            "Missing authenticated principal",
            error_code="missing_principal",
        )

    if not isinstance(user_id, UUID):
        try:
            user_id = UUID(str(user_id))
        except ValueError as e:
            raise UnauthorizedError(
                "Invalid principal identifier",
                error_code="invalid_principal",
            ) from e

    structlog.contextvars.bind_contextvars(user_id=str(user_id))
    return user_id


# Type alias for dependency injection
CurrentUserId = Annotated[UUID, Depends(get_current_user_id)]
