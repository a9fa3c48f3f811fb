"""Integration tests for permission decorators.

These tests verify the permission decorator behavior on routes including:
- require_permission
- require_any_permission
- require_all_permissions
"""

import pytest
from fastapi import APIRouter
from httpx import ASGITransport, AsyncClient

from orgaccess.api.dependencies import DBSession
from orgaccess.core.auth import CurrentUserId
from orgaccess.core.permissions.decorators import (
    require_all_permissions,
    require_any_permission,
    require_permission,
)
from orgaccess.modules.users.models import User


pytestmark = pytest.mark.integration


# Create a test router with protected endpoints
protected_router = APIRouter()


@protected_router.get("/protected-single")
@require_permission("resource", "read")
async def protected_single(current_user_id: CurrentUserId, db: DBSession):
    """Endpoint requiring single permission."""
    return {"status": "ok", "user_id": str(current_user_id)}


@protected_router.get("/protected-any")
@require_any_permission([("resource", "read"), ("resource", "update")])
async def protected_any(current_user_id: CurrentUserId, db: DBSession):
    """Endpoint requiring any of the permissions."""
    return {"status": "ok"}


@protected_router.get("/protected-all")
@require_all_permissions([("resource", "read"), ("resource", "update")])
async def protected_all(current_user_id: CurrentUserId, db: DBSession):
    """Endpoint requiring all permissions."""
    return {"status": "ok"}


class TestPermissionDecorators:
    """Tests for permission decorators on routes."""

    @pytest.fixture
    async def test_client(self, app):
        """Client for the app with the protected test routes mounted."""
        app.include_router(protected_router, prefix="/test")
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as client:
            yield client

    async def test_no_principal(self, test_client: AsyncClient):
        """Requests without a principal are rejected with 401."""
        response = await test_client.get("/test/protected-single")

        assert response.status_code == 401

    async def test_single_denied(self, test_client: AsyncClient, user: User, auth_headers):
        """A user without the permission gets 403 naming it."""
        response = await test_client.get("/test/protected-single", headers=auth_headers(user))

        assert response.status_code == 403
        body = response.json()
        assert body["type"].endswith("/errors/permission_denied")
        assert body["required_permissions"] == ["resource:read"]

    async def test_single_allowed_by_alias(
        self, test_client: AsyncClient, user: User, grant, auth_headers
    ):
        """A stored view satisfies a required read."""
        await grant(user.id, "resource:view")

        response = await test_client.get("/test/protected-single", headers=auth_headers(user))

        assert response.status_code == 200
        assert response.json()["user_id"] == str(user.id)

    async def test_any_with_one(self, test_client: AsyncClient, user: User, grant, auth_headers):
        """One of the listed permissions is enough."""
        await grant(user.id, "resource:update")

        response = await test_client.get("/test/protected-any", headers=auth_headers(user))

        assert response.status_code == 200

    async def test_all_with_one(self, test_client: AsyncClient, user: User, grant, auth_headers):
        """All-of routes need every permission."""
        await grant(user.id, "resource:read")

        response = await test_client.get("/test/protected-all", headers=auth_headers(user))

        assert response.status_code == 403
        assert "Missing required permissions" in response.json()["detail"]

    async def test_all_with_both(self, test_client: AsyncClient, user: User, grant, auth_headers):
        """Holding every permission passes."""
        await grant(user.id, "resource:read", "resource:edit")

        response = await test_client.get("/test/protected-all", headers=auth_headers(user))

        assert response.status_code == 200

    async def test_super_admin_bypass(
        self, test_client: AsyncClient, user: User, grant, auth_headers
    ):
        """A super-admin passes every decorator."""
        await grant(user.id, "system:admin")

        for path in ("/test/protected-single", "/test/protected-any", "/test/protected-all"):
            response = await test_client.get(path, headers=auth_headers(user))
            assert response.status_code == 200
