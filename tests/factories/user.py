"""User factory for tests."""

from uuid import uuid4

from polyfactory.factories.sqlalchemy_factory import SQLAlchemyFactory

from orgaccess.modules.users.models import User


class UserFactory(SQLAlchemyFactory[User]):
    """Factory for creating test User instances."""

    __model__ = User

    @classmethod
    def email(cls) -> str:
        """Generate a unique email."""
        return f"user-{uuid4().hex[:8]}@example.com"

    @classmethod
    def full_name(cls) -> str:
        """Generate a full name."""
        return f"Test User {uuid4().hex[:4]}"

    @classmethod
    def is_active(cls) -> bool:
        """Default to active."""
        return True

    @classmethod
    def manager_id(cls) -> None:
        """Default to a root of the org chart."""
        return None
