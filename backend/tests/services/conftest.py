"""Service test fixtures — async DB, FastAPI test client, users and mocked providers.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched for code paths that open sessions directly (health, scripts)
    - Stripe, Gemini, Anthropic and Sheets dependencies always overridden:
      no test can reach a real provider

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (PostgreSQL-specific features not exercised here)
    - Identity travels in the X-User-Id header; auth_headers(user) builds it
    - Fixture objects live in test_db; tests refresh() them after calling routes
      because routes write through their own session
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from app.api.dependencies import (
    get_anthropic_client, get_gemini_client, get_sheets_client, get_stripe_gateway,
)
from app.db.base import Base
from app.infrastructure.database import get_db, DatabaseSessionManager
from app.models.marketplace import MarketplaceListing, MarketplaceOrder, SellerProfile
from app.models.prompt import Prompt
from app.models.user import User
import app.infrastructure.database as db_module
from app.main import app
from tests.services.mock_clients import MockSheetsClient, MockStripeGateway


def auth_headers(user: User) -> dict:
    return {"X-User-Id": str(user.id)}


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def stripe_gateway():
    return MockStripeGateway()


@pytest.fixture
def provider_overrides():
    """Per-test provider instances; tests assign gemini/anthropic/sheets before requests."""
    return {"gemini": None, "anthropic": None, "sheets": MockSheetsClient()}


@pytest.fixture
async def client(test_engine, test_session_factory, stripe_gateway, provider_overrides):
    """FastAPI test client with DB and provider dependencies overridden."""
    # Override get_db for route-level dependency injection
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_stripe_gateway] = lambda: stripe_gateway
    app.dependency_overrides[get_gemini_client] = lambda: provider_overrides["gemini"]
    app.dependency_overrides[get_anthropic_client] = lambda: provider_overrides["anthropic"]
    app.dependency_overrides[get_sheets_client] = lambda: provider_overrides["sheets"]

    # Patch db_manager for code that opens sessions without get_db
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


# ─── Users ───────────────────────────────────────────────────────

async def _user(test_db, username: str, role: str = "user") -> User:
    user = User(email=f"{username}@example.com", username=username, role=role)
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user


@pytest.fixture
async def user(test_db):
    return await _user(test_db, "alice")


@pytest.fixture
async def other_user(test_db):
    return await _user(test_db, "bob")


@pytest.fixture
async def community_admin(test_db):
    return await _user(test_db, "carol", role="community_admin")


@pytest.fixture
async def super_admin(test_db):
    return await _user(test_db, "root", role="super_admin")


@pytest.fixture
def auth():
    """auth(user) -> request headers identifying that user."""
    return auth_headers


# ─── Marketplace ─────────────────────────────────────────────────

@pytest.fixture
async def seller(test_db):
    """Seller with a completed Stripe onboarding."""
    seller = await _user(test_db, "seller")
    test_db.add(SellerProfile(
        user_id=seller.id,
        stripe_account_id="acct_seller",
        onboarding_status="completed",
        payout_method="stripe",
        total_sales=0,
        total_revenue_cents=0,
    ))
    await test_db.commit()
    return seller


@pytest.fixture
async def listing(test_db, seller):
    """Active listing accepting $10.00 or 500 credits."""
    prompt = Prompt(
        id="PRMPT00001",
        name="Neon city",
        prompt_content="A rain-soaked neon city at night, cinematic lighting, 35mm lens.",
        user_id=seller.id,
        is_public=True,
    )
    test_db.add(prompt)
    await test_db.flush()
    listing = MarketplaceListing(
        prompt_id=prompt.id,
        seller_id=seller.id,
        title="Neon city prompt",
        price_cents=1000,
        credit_price=500,
        accepts_money=True,
        accepts_credits=True,
        preview_percentage=20,
        status="active",
        sales_count=0,
    )
    test_db.add(listing)
    await test_db.commit()
    await test_db.refresh(listing)
    return listing


@pytest.fixture
async def pending_order(test_db, listing, user):
    """Stripe order awaiting payment_intent.succeeded."""
    order = MarketplaceOrder(
        order_number="ORD-1700000000000-TEST",
        buyer_id=user.id,
        seller_id=listing.seller_id,
        listing_id=listing.id,
        payment_method="stripe",
        stripe_payment_intent_id="pi_existing",
        amount_cents=1000,
        credit_amount=0,
        status="pending",
    )
    test_db.add(order)
    await test_db.commit()
    await test_db.refresh(order)
    return order
