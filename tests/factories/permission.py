"""Permission and role factories for tests."""

from uuid import uuid4

from polyfactory.factories.sqlalchemy_factory import SQLAlchemyFactory

from orgaccess.core.permissions.models import Permission, Role


class PermissionFactory(SQLAlchemyFactory[Permission]):
    """Factory for creating test Permission instances."""

    __model__ = Permission

    @classmethod
    def module(cls) -> str:
        """Generate a unique module name."""
        return f"module_{uuid4().hex[:6]}"

    @classmethod
    def action(cls) -> str:
        """Default to read."""
        return "read"

    @classmethod
    def description(cls) -> None:
        """No description."""
        return None


class RoleFactory(SQLAlchemyFactory[Role]):
    """Factory for creating test Role instances."""

    __model__ = Role

    @classmethod
    def name(cls) -> str:
        """Generate a unique role name."""
        return f"Role {uuid4().hex[:6]}"

    @classmethod
    def description(cls) -> None:
        """No description."""
        return None

    @classmethod
    def is_system_role(cls) -> bool:
        """Default to a custom role."""
        return False
