"""Database layer - session management, base models, and mixins."""

from orgaccess.core.database.base import Base, CreatedAtMixin, TimestampMixin, UUIDMixin
from orgaccess.core.database.session import (
    async_engine,
    async_session_factory,
    get_db,
    init_db,
)


__all__ = [
    "Base",
    "CreatedAtMixin",
    "TimestampMixin",
    "UUIDMixin",
    "async_engine",
    "async_session_factory",
    "get_db",
    "init_db",
]
