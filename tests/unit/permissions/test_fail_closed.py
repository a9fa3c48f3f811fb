"""Unit tests for store-failure handling.

Access checks must deny when the store cannot be read, and the
decorators must refuse to run a route without a principal or session.
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError
from structlog.testing import capture_logs

from orgaccess.core.errors import ForbiddenError, UnauthorizedError
from orgaccess.core.permissions.decorators import require_any_permission, require_permission
from orgaccess.core.permissions.evaluator import PermissionEvaluator
from orgaccess.core.permissions.models import Permission


pytestmark = pytest.mark.unit


def _store_error() -> OperationalError:
    return OperationalError("SELECT", {}, Exception("connection refused"))


class TestEvaluatorFailsClosed:
    """Every evaluator query denies on a store error."""

    @pytest.fixture
    def broken_evaluator(self) -> PermissionEvaluator:
        """Evaluator whose store raises on every read."""
        evaluator = PermissionEvaluator(MagicMock())
        evaluator.assignments.get_user_permissions = AsyncMock(side_effect=_store_error())
        return evaluator

    async def test_check_user_permission(self, broken_evaluator: PermissionEvaluator):
        """Single checks deny."""
        assert await broken_evaluator.check_user_permission(uuid4(), "tasks", "read") is False

    async def test_has_any_permission(self, broken_evaluator: PermissionEvaluator):
        """Any-of checks deny."""
        result = await broken_evaluator.has_any_permission(uuid4(), [("tasks", "read")])
        assert result is False

    async def test_has_all_permissions(self, broken_evaluator: PermissionEvaluator):
        """All-of checks deny."""
        result = await broken_evaluator.has_all_permissions(uuid4(), [("tasks", "read")])
        assert result is False

    async def test_module_access(self, broken_evaluator: PermissionEvaluator):
        """Module access is denied."""
        assert await broken_evaluator.has_user_module_access(uuid4(), "tasks") is False

    async def test_module_permissions_empty(self, broken_evaluator: PermissionEvaluator):
        """Module permission listings are empty."""
        assert await broken_evaluator.get_user_module_permissions(uuid4(), ["tasks"]) == {}

    async def test_failure_is_logged(self, broken_evaluator: PermissionEvaluator):
        """The error is reported with the requested check."""
        user_id = uuid4()

        with capture_logs() as logs:
            await broken_evaluator.check_user_permission(user_id, "tasks", "read")

        failure = next(log for log in logs if log["event"] == "permission_check_failed")
        assert failure["user_id"] == str(user_id)
        assert failure["module"] == "tasks"
        assert failure["log_level"] == "error"

    async def test_context_raises(self, broken_evaluator: PermissionEvaluator):
        """The raw context lookup propagates the error to its caller."""
        with pytest.raises(OperationalError):
            await broken_evaluator.get_permission_context(uuid4())


class TestEvaluatorWithPermissions:
    """Evaluator behaviour over a stubbed store."""

    @pytest.fixture
    def evaluator(self) -> PermissionEvaluator:
        """Evaluator whose user holds crm_contacts:read and tasks:update."""
        evaluator = PermissionEvaluator(MagicMock())
        evaluator.assignments.get_user_permissions = AsyncMock(
            return_value=[
                Permission(module="crm_contacts", action="read"),
                Permission(module="tasks", action="update"),
            ]
        )
        return evaluator

    async def test_alias_check(self, evaluator: PermissionEvaluator):
        """view is satisfied by a stored read."""
        assert await evaluator.check_user_permission(uuid4(), "crm_contacts", "view") is True

    async def test_any_and_all(self, evaluator: PermissionEvaluator):
        """Any-of passes on one match; all-of needs every pair."""
        pairs = [("crm_contacts", "read"), ("crm_contacts", "delete")]

        assert await evaluator.has_any_permission(uuid4(), pairs) is True
        assert await evaluator.has_all_permissions(uuid4(), pairs) is False

    async def test_module_permissions(self, evaluator: PermissionEvaluator):
        """Each requested module lists its stored actions."""
        result = await evaluator.get_user_module_permissions(uuid4(), ["tasks", "reports"])

        assert result == {"tasks": ["update"], "reports": []}


@require_permission("tasks", "read")
async def _guarded_route(current_user_id=None, db=None):
    return "ok"


@require_any_permission([("tasks", "read"), ("reports", "read")])
async def _guarded_any_route(current_user_id=None, db=None):
    return "ok"


class TestDecoratorGuards:
    """Decorator preconditions, checked without a running app."""

    async def test_missing_principal(self):
        """No principal is a 401, before any store access."""
        with pytest.raises(UnauthorizedError) as exc_info:
            await _guarded_route(db=MagicMock())

        assert exc_info.value.error_code == "auth_required"

    async def test_missing_session(self):
        """No session means the check cannot run and the route is refused."""
        with pytest.raises(ForbiddenError) as exc_info:
            await _guarded_route(current_user_id=uuid4())

        assert exc_info.value.error_code == "permission_check_failed"

    async def test_store_failure_denies(self, monkeypatch):
        """A store error during the check surfaces as a 403."""
        monkeypatch.setattr(
            "orgaccess.core.permissions.assignments.RoleAssignmentStore.get_user_permissions",
            AsyncMock(side_effect=_store_error()),
        )

        with pytest.raises(ForbiddenError) as exc_info:
            await _guarded_route(current_user_id=uuid4(), db=MagicMock())

        assert exc_info.value.error_code == "permission_denied"
        assert exc_info.value.details == {"required_permissions": ["tasks:read"]}

    async def test_any_denial_message(self, monkeypatch):
        """Any-of denials list every acceptable permission."""
        monkeypatch.setattr(
            "orgaccess.core.permissions.assignments.RoleAssignmentStore.get_user_permissions",
            AsyncMock(return_value=[]),
        )

        with pytest.raises(ForbiddenError) as exc_info:
            await _guarded_any_route(current_user_id=uuid4(), db=MagicMock())

        assert exc_info.value.message == (
            "Missing required permission. Need one of: tasks:read, reports:read"
        )

    async def test_allowed_route_runs(self, monkeypatch):
        """A held permission lets the route run."""
        monkeypatch.setattr(
            "orgaccess.core.permissions.assignments.RoleAssignmentStore.get_user_permissions",
            AsyncMock(return_value=[Permission(module="tasks", action="view")]),
        )

        assert await _guarded_route(current_user_id=uuid4(), db=MagicMock()) == "ok"
