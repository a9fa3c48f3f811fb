"""Unit tests for the assignment store's dialect handling."""

from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql, sqlite

from orgaccess.core.permissions.assignments import RoleAssignmentStore
from orgaccess.core.permissions.models import UserRole


pytestmark = pytest.mark.unit

DIALECTS = {"postgresql": postgresql.dialect(), "sqlite": sqlite.dialect()}


def _store_on(dialect: str) -> RoleAssignmentStore:
    session = MagicMock()
    session.get_bind.return_value.dialect.name = dialect
    return RoleAssignmentStore(session)


class TestInsertIgnoringDuplicates:
    """Tests for the ON CONFLICT DO NOTHING builder."""

    @pytest.mark.parametrize("dialect", ["postgresql", "sqlite"])
    def test_supported_dialects(self, dialect: str):
        """Postgres and SQLite get an insert that skips existing pairs."""
        stmt = _store_on(dialect)._insert_ignoring_duplicates(
            UserRole,
            {"id": uuid4(), "user_id": uuid4(), "role_id": uuid4()},
            ["user_id", "role_id"],
        )

        compiled = str(stmt.compile(dialect=DIALECTS[dialect]))
        assert "ON CONFLICT (user_id, role_id) DO NOTHING" in compiled

    @pytest.mark.parametrize("dialect", ["mysql", "mssql", "oracle"])
    def test_unsupported_dialect_raises(self, dialect: str):
        """Other backends are refused instead of getting SQLite syntax."""
        store = _store_on(dialect)

        with pytest.raises(NotImplementedError, match=dialect):
            store._insert_ignoring_duplicates(
                UserRole,
                {"id": uuid4(), "user_id": uuid4(), "role_id": uuid4()},
                ["user_id", "role_id"],
            )
