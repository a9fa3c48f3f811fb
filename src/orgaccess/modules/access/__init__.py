"""Access module: permission catalog and role grants."""

from fastapi import APIRouter


router = APIRouter(tags=["access"])


def register_routes() -> None:
    """Register routes - called after all imports are complete."""
    from orgaccess.modules.access import routes  # noqa: F401
