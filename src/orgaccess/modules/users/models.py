"""User database models."""

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from orgaccess.core.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH
from orgaccess.core.database.base import Base, TimestampMixin, UUIDMixin


class User(Base, UUIDMixin, TimestampMixin):
    """User model: the principal that holds roles and owns records.

    Attributes:
        email: Unique email address
        full_name: User's full name
        is_active: Whether the user can sign in
        manager_id: The user this one reports to; None for a root of the
            org chart. Lookup-only, the user does not own its manager.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=False,
        unique=True,
    )
    full_name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    manager_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
