"""
Test fixtures for the Bizdesk API test suite.

This module provides shared fixtures used across all test files:

  - db_engine / db_session: Fresh in-memory SQLite database for each test
  - client: Async HTTP test client (unauthenticated)
  - authenticated_client: A freshly signed-up user (role "lead")
  - second_authenticated_client: Another lead, for cross-user tests
  - manager_client / sales_client / admin_client: Staff users
  - price: An active monthly product price created by the manager
  - activate_subscription: Moves a subscription to "active" in the DB
  - deactivate_product: Takes a product off sale in the DB

Key design decisions:
  - In-memory SQLite (sqlite+aiosqlite://) is used for speed and isolation.
    Each test gets a completely fresh database — no state leaks between tests.
  - We override FastAPI's get_db dependency to inject our test sessions,
    so the application code works exactly as it does in production.
  - Every user gets their own AsyncClient, so one user's Authorization
    header can never leak into another user's requests.
  - Staff roles are granted by inserting UserRole rows directly. This
    simulates roles being provisioned by an operator, not self-service.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

import uuid

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import update
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

import bizdesk.models  # noqa: F401
from bizdesk.database import Base, get_db
from bizdesk.main import app
from bizdesk.models.product import Product
from bizdesk.models.subscription import Subscription
from bizdesk.models.user import Role, UserRole


# In-memory SQLite for fast, isolated tests
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Provide an async session bound to the test engine."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client_factory(session_factory):
    """
    Build test clients that share the app and the test database.

    Returns an async function ``make(email=None, roles=(), raise_app_exceptions=True)``.
    Without an email the client is anonymous; with one, the user is signed
    up via the real endpoint, granted ``roles`` and logged in. The returned
    client carries the user's id as ``client.user_id``.

    With ``raise_app_exceptions=False`` an unhandled server error comes
    back as the 500 response the app sent instead of being re-raised in
    the test.
    """

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    clients: list[AsyncClient] = []

    async def make(
        email: str | None = None,
        roles: tuple[Role, ...] = (),
        raise_app_exceptions: bool = True,
    ) -> AsyncClient:
        transport = ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions)
        ac = AsyncClient(transport=transport, base_url="http://test")
        clients.append(ac)
        if email is None:
            return ac

        password = "SecurePass123!"
        response = await ac.post(
            "/auth/signup",
            json={"email": email, "password": password, "name": email.split("@")[0].title()},
        )
        assert response.status_code == 201, f"Signup failed: {response.text}"
        user_id = uuid.UUID(response.json()["user_id"])

        if roles:
            async with session_factory() as session:
                for role in roles:
                    session.add(UserRole(user_id=user_id, role=role.value))
                await session.commit()

        ac.headers["Authorization"] = f"Bearer {response.json()['token']}"
        ac.user_id = str(user_id)
        return ac

    yield make

    for ac in clients:
        await ac.aclose()
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(client_factory):
    """Unauthenticated client."""
    return await client_factory()


@pytest_asyncio.fixture
async def authenticated_client(client_factory):
    """A signed-up user with only the default "lead" role."""
    return await client_factory("testuser@example.com")


@pytest_asyncio.fixture
async def second_authenticated_client(client_factory):
    """A second lead for cross-user authorization tests."""
    return await client_factory("seconduser@example.com")


@pytest_asyncio.fixture
async def manager_client(client_factory):
    return await client_factory("manager@example.com", roles=(Role.MANAGER,))


@pytest_asyncio.fixture
async def sales_client(client_factory):
    return await client_factory("sales@example.com", roles=(Role.SALES,))


@pytest_asyncio.fixture
async def admin_client(client_factory):
    return await client_factory("admin@example.com", roles=(Role.ADMIN,))


@pytest_asyncio.fixture
async def price(manager_client):
    """An active monthly price (term 12 months) on a fresh product."""
    product = await manager_client.post(
        "/products",
        json={"name": "Fiber 100", "code": "FIB-100", "description": "Home internet"},
    )
    assert product.status_code == 201, product.text

    response = await manager_client.post(
        f"/products/{product.json()['id']}/prices",
        json={"billing_cycle": "monthly", "price": "350000.00", "term_months": 12},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest_asyncio.fixture
async def activate_subscription(session_factory):
    """
    Return an async function that marks a subscription "active".

    Activation belongs to billing, which has no endpoint here.
    """

    async def activate(subscription_id: str) -> None:
        async with session_factory() as session:
            await session.execute(
                update(Subscription)
                .where(Subscription.id == uuid.UUID(subscription_id))
                .values(status="active")
            )
            await session.commit()

    return activate


@pytest_asyncio.fixture
async def deactivate_product(session_factory):
    """Return an async function that takes a product off sale."""

    async def deactivate(product_id: str) -> None:
        async with session_factory() as session:
            await session.execute(
                update(Product)
                .where(Product.id == uuid.UUID(product_id))
                .values(is_active=False)
            )
            await session.commit()

    return deactivate
