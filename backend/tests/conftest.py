"""Shared test configuration and fixtures.

Each test gets its own application built by ``create_app`` on a fresh SQLite
file, so commits made by the reservation guard never leak between tests.
Online payments go through ``FakePaymentGateway`` instead of Stripe.
"""

import asyncio
import dataclasses
import uuid
from collections.abc import AsyncGenerator
from decimal import Decimal

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sportnest.auth.jwt import create_token_pair
from sportnest.auth.passwords import hash_password
from sportnest.billing.gateway import PaymentGatewayError, PaymentInitiation, PaymentVerification
from sportnest.config import Settings
from sportnest.database import Base
from sportnest.main import create_app
from sportnest.models.user import User

# ---------------------------------------------------------------------------
# Payment gateway double
# ---------------------------------------------------------------------------


class FakePaymentGateway:
    """In-memory stand-in for Stripe PaymentIntents."""

    def __init__(self) -> None:
        self.intents: dict[str, PaymentVerification] = {}
        self.unavailable = False
        self.verified: list[str] = []
        # Set `hold` to keep verify() pending until the test releases it
        self.hold: asyncio.Event | None = None
        self.verifying = asyncio.Event()

    async def initiate(self, amount: Decimal, currency: str, metadata: dict[str, str]) -> PaymentInitiation:
        if self.unavailable:
            raise PaymentGatewayError("connection refused")
        token = f"pi_test_{uuid.uuid4().hex[:12]}"
        self.intents[token] = PaymentVerification(
            status="requires_payment_method",
            metadata=dict(metadata),
            amount=amount,
            currency=currency,
        )
        return PaymentInitiation(
            confirmation_token=token,
            client_secret=f"{token}_secret",
            amount=amount,
            currency=currency,
        )

    async def verify(self, confirmation_token: str) -> PaymentVerification:
        if self.unavailable:
            raise PaymentGatewayError("connection refused")
        self.verified.append(confirmation_token)
        self.verifying.set()
        if self.hold is not None:
            await self.hold.wait()
        return self.intents.get(confirmation_token, PaymentVerification(status="invalid"))

    def settle(self, confirmation_token: str, status: str = "succeeded") -> None:
        """Simulate the client confirming the payment."""
        self.intents[confirmation_token] = dataclasses.replace(self.intents[confirmation_token], status=status)

    def paid_intent(self, metadata: dict[str, str], amount: Decimal = Decimal("1200.00")) -> str:
        """Register an already-succeeded intent and return its token."""
        token = f"pi_test_{uuid.uuid4().hex[:12]}"
        self.intents[token] = PaymentVerification(
            status="succeeded", metadata=dict(metadata), amount=amount, currency="inr"
        )
        return token


# ---------------------------------------------------------------------------
# Application and database
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'sportnest_test.db'}",
        jwt_secret_key="test-secret-key-not-for-production",
        environment="test",
        stripe_secret_key="sk_test_dummy",
        stripe_webhook_secret="whsec_test_dummy",
    )


@pytest.fixture
def gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest_asyncio.fixture
async def app(settings: Settings, gateway: FakePaymentGateway) -> AsyncGenerator[FastAPI, None]:
    """Application with all tables created; the engine is disposed afterwards."""
    application = create_app(settings, payment_gateway=gateway)
    async with application.state.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield application
    await application.state.engine.dispose()


@pytest.fixture
def session_factory(app: FastAPI) -> async_sessionmaker[AsyncSession]:
    """Sessions on the app's database for arranging and inspecting rows.

    SQLite transactions take the write lock up front, so keep each session
    short-lived: `async with session_factory() as db: ...`.
    """
    return app.state.session_factory


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the test application."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Convenience fixtures: accounts
# ---------------------------------------------------------------------------


async def make_user(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    role: str = "user",
    name: str = "Test Player",
    phone: str | None = "+91 90000 00000",
    is_active: bool = True,
) -> User:
    """Create and commit a user directly in the DB."""
    unique = uuid.uuid4().hex[:8]
    user = User(
        email=f"{role}-{unique}@test.com",
        hashed_password=hash_password("testpass123"),
        name=name,
        phone=phone,
        role=role,
        is_active=is_active,
    )
    async with session_factory() as db:
        db.add(user)
        await db.commit()
    return user


def headers_for(user: User, settings: Settings) -> dict[str, str]:
    tokens = create_token_pair(str(user.id), user.role, settings)
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest.fixture
def create_account(session_factory: async_sessionmaker[AsyncSession], settings: Settings):
    """Factory fixture: `user, headers = await create_account(role="admin")`."""

    async def _create(**kwargs) -> tuple[User, dict[str, str]]:
        user = await make_user(session_factory, **kwargs)
        return user, headers_for(user, settings)

    return _create


@pytest_asyncio.fixture
async def test_user(session_factory: async_sessionmaker[AsyncSession]) -> User:
    return await make_user(session_factory)


@pytest_asyncio.fixture
async def auth_headers(test_user: User, settings: Settings) -> dict[str, str]:
    """Return Authorization headers for the test player."""
    return headers_for(test_user, settings)


@pytest_asyncio.fixture
async def test_owner(session_factory: async_sessionmaker[AsyncSession]) -> User:
    return await make_user(
        session_factory,
        role="admin",
        name="Turf Owner",
        phone="+91 98200 11223",
    )


@pytest_asyncio.fixture
async def owner_headers(test_owner: User, settings: Settings) -> dict[str, str]:
    """Return Authorization headers for the turf owner."""
    return headers_for(test_owner, settings)


# ---------------------------------------------------------------------------
# Convenience fixtures: turf
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_turf(client: AsyncClient, owner_headers: dict) -> dict:
    """Create and return a test turf via the API."""
    response = await client.post(
        "/api/v1/turfs",
        json={
            "name": "Powai Box Cricket Arena",
            "location": "Mumbai",
            "address": "Hiranandani Gardens, Powai",
            "sport": "Cricket",
            "price": "1200.00",
            "description": "Floodlit box cricket turf.",
        },
        headers=owner_headers,
    )
    assert response.status_code == 201, f"Failed to create test turf: {response.text}"
    return response.json()
