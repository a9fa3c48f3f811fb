"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator, Awaitable, Callable
from uuid import UUID

import pytest
import structlog
from fastapi import Request
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from orgaccess.core.database import Base, get_db
from orgaccess.core.permissions import PermissionCatalog, RoleAssignmentStore
from orgaccess.core.permissions.models import Role
from orgaccess.main import create_app
from orgaccess.modules.users.models import User
from tests.factories.user import UserFactory


# Loggers stay uncached so structlog.testing.capture_logs sees every event
structlog.configure(cache_logger_on_first_use=False)


# Single shared in-memory database per engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Header the test app reads the principal from, standing in for the auth layer
PRINCIPAL_HEADER = "X-Test-User-ID"


@pytest.fixture(scope="function")
async def engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db(engine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a transactional database session for tests.

    Each test runs in its own transaction that is rolled back
    after the test completes, ensuring test isolation.
    """
    session_factory = async_sessionmaker(
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with engine.connect() as conn:
        await conn.begin()

        async with session_factory(bind=conn) as session:
            yield session

        await conn.rollback()


@pytest.fixture
async def app(db: AsyncSession):
    """Create test application instance."""
    application = create_app()

    @application.middleware("http")
    async def attach_principal(request: Request, call_next):
        user_id = request.headers.get(PRINCIPAL_HEADER)
        if user_id is not None:
            request.state.user_id = user_id
        return await call_next(request)

    # Override database dependency
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    application.dependency_overrides[get_db] = override_get_db

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Build headers that make a user the request's principal."""

    def _headers(user: User) -> dict[str, str]:
        return {PRINCIPAL_HEADER: str(user.id)}

    return _headers


# ============================================================
# User and Grant Fixtures
# ============================================================


@pytest.fixture
def make_user(db: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory fixture creating persisted users.

    Usage:
        boss = await make_user(full_name="Boss")
        report = await make_user(full_name="Report", manager=boss)
    """

    async def _make_user(manager: User | None = None, **kwargs) -> User:
        user = UserFactory.build(manager_id=manager.id if manager else None, **kwargs)
        db.add(user)
        await db.flush()
        return user

    return _make_user


@pytest.fixture
async def user(make_user) -> User:
    """Create a test user without roles."""
    return await make_user(full_name="Test User")


@pytest.fixture
def grant(db: AsyncSession) -> Callable[..., Awaitable[Role]]:
    """Factory fixture giving a user a fresh role holding ``permissions``.

    Permissions are ``"module:action"`` strings; missing ones are created.
    """
    counter = {"n": 0}

    async def _grant(user_id: UUID, *permissions: str) -> Role:
        catalog = PermissionCatalog(db)
        assignments = RoleAssignmentStore(db)

        counter["n"] += 1
        role = await catalog.create_role(f"Test Role {counter['n']}")
        for name in permissions:
            module, action = name.split(":", 1)
            permission = await catalog.get_permission(module, action)
            if permission is None:
                permission = await catalog.create_permission(module, action)
            await assignments.assign_permission_to_role(role.id, permission.id)

        await assignments.assign_role_to_user(user_id, role.id, assigned_by=None)
        return role

    return _grant


# ============================================================
# Concurrent Session Fixtures
# ============================================================


@pytest.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Sessions on a file-backed database, each with its own connection.

    Unlike ``db``, writes are committed for real, so separate sessions can
    race on the same unique constraints.
    """
    file_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'orgaccess.db'}")
    async with file_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(file_engine, class_=AsyncSession, expire_on_commit=False)

    await file_engine.dispose()
