import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from libs.auth.dependencies import get_current_user, get_optional_user
from libs.auth.models import AuthUser, UserRole
from libs.common.emails.store import get_order_notifier
from libs.db.base import Base
from libs.db.config import build_engine
from libs.db.session import get_async_db
from services.gateway_service.app.main import app as gateway_app
from services.payments_service.paystack_client import get_paystack_client

# Import all models so metadata includes every table
from services.payments_service import models as _payments_models  # noqa: F401
from services.store_service import models as _store_models  # noqa: F401
from tests.stubs import FakePaystack, StubNotifier


@pytest.fixture
def database_url(tmp_path) -> str:
    """
    A throwaway SQLite file per test, or TEST_DATABASE_URL (e.g. Postgres).

    A file (not :memory:) so several connections can race on the same rows.
    """
    return os.environ.get("TEST_DATABASE_URL") or (
        f"sqlite+aiosqlite:///{tmp_path / 'bebrand_test.db'}"
    )


@pytest_asyncio.fixture
async def test_engine(database_url):
    engine = build_engine(database_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    """Independent sessions (one per simulated request) on the test database."""
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """A session for arranging and asserting; tests commit through it freely."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier() -> StubNotifier:
    return StubNotifier()


@pytest.fixture
def paystack() -> FakePaystack:
    return FakePaystack()


@pytest.fixture
def customer() -> AuthUser:
    return AuthUser(
        user_id="auth-customer-1",
        email="ada@example.com",
        role=UserRole.CUSTOMER.value,
        first_name="Ada",
        last_name="Obi",
    )


@pytest.fixture
def admin() -> AuthUser:
    return AuthUser(
        user_id="auth-admin-1",
        email="admin@bebrand.com",
        role=UserRole.ADMIN.value,
        first_name="Store",
        last_name="Admin",
    )


@pytest.fixture
def app(session_factory, notifier, paystack):
    """The combined API with the database, email and Paystack swapped out."""

    async def _get_test_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    gateway_app.dependency_overrides[get_async_db] = _get_test_db
    gateway_app.dependency_overrides[get_order_notifier] = lambda: notifier
    gateway_app.dependency_overrides[get_paystack_client] = paystack.client

    yield gateway_app

    gateway_app.dependency_overrides.clear()


@pytest.fixture
def login_as(app):
    """
    Authenticate subsequent requests as ``user`` (None logs out).

    Usage:
        login_as(admin)
    """

    def _login(user):
        if user is None:
            app.dependency_overrides.pop(get_current_user, None)
            app.dependency_overrides.pop(get_optional_user, None)
            return

        async def _mock_user():
            return user

        app.dependency_overrides[get_current_user] = _mock_user
        app.dependency_overrides[get_optional_user] = _mock_user

    return _login


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
