"""Users module: org chart, permission profiles and role assignment."""

from fastapi import APIRouter


router = APIRouter(prefix="/users", tags=["users"])


def register_routes() -> None:
    """Register routes - called after all imports are complete."""
    from orgaccess.modules.users import routes  # noqa: F401
