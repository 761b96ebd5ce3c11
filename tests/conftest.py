"""
Pytest fixtures for testing.

Provides:
- Async database session with rollback
- Factory fixtures for users and roles
- Mock link implementations for failure paths
"""

from typing import Any, AsyncGenerator
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from rolegate.core.config import get_settings
from rolegate.core.database import build_engine, build_session_factory, init_db
from rolegate.core.exceptions import StorageError
from rolegate.core.interfaces import SyncResult
from rolegate.models import Base, Permission, Role, User
from rolegate.services import RoleService


# Test database URL (SQLite in-memory for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings so env overrides in a test never leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create test database engine."""
    engine = build_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    await init_db(engine)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Create database session with automatic rollback.

    Each test gets a fresh transaction that's rolled back after.
    """
    session_factory = build_session_factory(db_engine)

    async with session_factory() as session:
        yield session
        await session.rollback()


# ============ Factory Fixtures ============


class UserFactory:
    """Factory for creating test users."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        email: str | None = None,
        name: str = "Test User",
    ) -> User:
        """Create a user in the database."""
        user = User(
            email=email or f"test-{uuid4().hex[:8]}@example.com",
            name=name,
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user


@pytest_asyncio.fixture
async def user_factory(db: AsyncSession) -> UserFactory:
    """Fixture that provides UserFactory."""
    return UserFactory(db)


@pytest_asyncio.fixture
async def test_user(user_factory: UserFactory) -> User:
    """Create a standard test user."""
    return await user_factory.create()


@pytest_asyncio.fixture
async def role_service(db: AsyncSession) -> RoleService:
    return RoleService(db)


@pytest_asyncio.fixture
async def editor(role_service: RoleService, db: AsyncSession) -> Role:
    role = await role_service.create_role("Editor", permissions=["posts.edit", "posts.*"])
    await db.commit()
    return role


@pytest_asyncio.fixture
async def viewer(role_service: RoleService, db: AsyncSession) -> Role:
    role = await role_service.create_role("Viewer", permissions=["posts.view"])
    await db.commit()
    return role


@pytest_asyncio.fixture
async def admin(role_service: RoleService, db: AsyncSession) -> Role:
    role = await role_service.create_role("Admin", permissions=["*"])
    await db.commit()
    return role


# ============ In-memory model helpers ============


def make_role(slug: str, *permissions: str) -> Role:
    """Transient role with transient permissions (no database)."""
    return Role(
        id=uuid4(),
        slug=slug,
        name=slug.title(),
        permissions=[Permission(id=uuid4(), slug=p, name=p) for p in permissions],
    )


# ============ Mock Implementations ============


class BrokenSubjectRoleLink:
    """SubjectRoleLink whose store is unreachable."""

    def __init__(self):
        self.calls: list[str] = []

    def _fail(self, operation: str):
        self.calls.append(operation)
        raise StorageError(f"{operation} failed: connection refused")

    async def attach(self, subject_id: Any, role_id: Any) -> None:
        self._fail("attach")

    async def detach(self, subject_id: Any, role_id: Any | None = None) -> int:
        self._fail("detach")

    async def sync(self, subject_id: Any, role_ids: list[Any]) -> SyncResult:
        self._fail("sync")

    async def list_for_subject(self, subject_id: Any) -> list[Role]:
        return []


class StaticRoleRepository:
    """RoleRepository over a fixed list of roles."""

    def __init__(self, roles: list[Role]):
        self.roles = {role.id: role for role in roles}

    async def find(self, id: Any) -> Role | None:
        return self.roles.get(id)

    async def find_by_slug(self, slug: str) -> Role | None:
        slug = slug.lower()
        return next((r for r in self.roles.values() if r.slug == slug), None)


@pytest.fixture
def broken_links() -> BrokenSubjectRoleLink:
    return BrokenSubjectRoleLink()


@pytest.fixture
def role_maker():
    """Build transient roles: role_maker("editor", "posts.edit", "posts.*")."""
    return make_role


@pytest.fixture
def static_roles():
    """Build a RoleRepository over fixed roles: static_roles([editor])."""
    return StaticRoleRepository
