"""
Shared test fixtures for the BizDesk test suite (aiosqlite + AsyncSession).
"""

import os
import sys
from collections.abc import AsyncGenerator
from datetime import timedelta

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from bizdesk.api.v1.deps import get_db
from bizdesk.core.permissions import (
    default_admin_permissions,
    default_employee_permissions,
    default_modules,
)
from bizdesk.core.security import TokenService
from bizdesk.db.base import Base
from bizdesk.main import app
from bizdesk.models.admin import Admin
from bizdesk.models.client import Client
from bizdesk.models.employee import Employee
from bizdesk.models.user import User

PASSWORD = "Secret1!"


# ── Database ────────────────────────────────────────────────────────
@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app and the test database."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ── Tokens ──────────────────────────────────────────────────────────
@pytest.fixture
def token_service() -> TokenService:
    return app.state.token_service


@pytest.fixture
def auth_headers(token_service):
    """Build an ``Authorization`` header for a stored principal."""

    def _headers(principal, role: str, expires_delta: timedelta | None = None) -> dict[str, str]:
        token = token_service.issue(principal.id, principal.email, role, expires_delta=expires_delta)
        return {"Authorization": f"Bearer {token}"}

    return _headers


# ── Principal factories ─────────────────────────────────────────────
async def _persist(session_factory, account, password: str):
    await account.set_password(password)
    async with session_factory() as session:
        session.add(account)
        await session.commit()
        await session.refresh(account)
    return account


@pytest.fixture
def create_user(session_factory):
    async def _create(email: str = "jane@example.com", password: str = PASSWORD, **fields) -> User:
        values = {"first_name": "Jane", "last_name": "Doe", "role": "user"}
        values.update(fields)
        return await _persist(session_factory, User(email=email, **values), password)

    return _create


@pytest.fixture
def create_client(session_factory):
    async def _create(email: str = "owner@acme.com", password: str = PASSWORD, **fields) -> Client:
        values = {
            "company_name": "Acme Corp",
            "contact_first_name": "Wile",
            "contact_last_name": "Coyote",
        }
        values.update(fields)
        return await _persist(session_factory, Client(email=email, **values), password)

    return _create


@pytest.fixture
def create_employee(session_factory):
    async def _create(
        email: str = "ann@example.com",
        password: str = PASSWORD,
        role: str = "employee",
        **fields,
    ) -> Employee:
        values = {
            "employee_id": "EMP0001",
            "first_name": "Ann",
            "last_name": "Lee",
            "department": "Sales",
            "position": "Rep",
            "role": role,
            "permissions": default_employee_permissions(role),
        }
        values.update(fields)
        return await _persist(session_factory, Employee(email=email, **values), password)

    return _create


@pytest.fixture
def create_admin(session_factory):
    async def _create(
        email: str = "root@example.com",
        password: str = PASSWORD,
        admin_level: str = "super_admin",
        access_level: str = "full_access",
        **fields,
    ) -> Admin:
        values = {
            "admin_id": "ADM0001",
            "first_name": "Root",
            "last_name": "Admin",
            "department": "IT",
            "position": "Head",
            "admin_level": admin_level,
            "access_level": access_level,
            "permissions": default_admin_permissions(admin_level),
            "allowed_modules": default_modules(access_level),
        }
        values.update(fields)
        return await _persist(session_factory, Admin(email=email, **values), password)

    return _create
