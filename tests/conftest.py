"""
Pytest configuration and fixtures.
"""

import os

# Must be set before dealdesk.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import httpx
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from dealdesk.client import DealDeskClient
from dealdesk.db import get_db
from dealdesk.main import app
from dealdesk.models import (
    Agent,
    Base,
    Brand,
    CommissionSplit,
    Deal,
    DealClient,
    DealNote,
    NoteCategory,
    Payment,
    Product,
    Remittance,
    Schedule,
    TalentAgent,
    TalentClient,
)

# Test database URL (use SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db_engine():
    """Create test database engine."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Create test database session."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


# ── API fixtures ──────────────────────────────────────────
# The API runs one session per request, so it needs a database that
# several connections can see: a throwaway SQLite file.


@pytest_asyncio.fixture
async def api_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'dealdesk.db'}",
        echo=False,
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def api_sessionmaker(api_engine):
    return async_sessionmaker(api_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def http_client(api_sessionmaker):
    """httpx client bound to the app in-process, with get_db pointed at the test DB."""

    async def override_get_db():
        async with api_sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def api_client(http_client):
    """DealDeskClient talking to the in-process app."""
    async with DealDeskClient(
        base_url="http://test",
        transport=httpx.ASGITransport(app=app),
    ) as client:
        yield client


@pytest_asyncio.fixture
async def seeded(api_sessionmaker):
    """
    One deal with a talent client represented by two agents, and one
    product with an unsplit pending schedule and a paid schedule.
    """
    async with api_sessionmaker() as db:
        owner = Agent(name="Olivia Owner", cost_center="CC-100-ATH", title="Head of Partnerships")
        alice = Agent(name="Alice Agent", cost_center="CC-100-ATH", division="Athletes")
        bob = Agent(name="Bob Booker", cost_center="CC-200-MUS", division="Music")
        db.add_all([owner, alice, bob])
        await db.flush()

        talent = TalentClient(name="Tara Talent", category="Athlete", sport="Tennis", cost_center="CC-100-ATH")
        talent.agents = [
            TalentAgent(agent_id=alice.id, is_primary=True),
            TalentAgent(agent_id=bob.id),
        ]
        brand = Brand(name="Acme Sportswear", industry="Apparel")
        db.add_all([talent, brand])
        await db.flush()

        deal = Deal(
            name="Acme x Tara 2026",
            stage="Negotiation",
            status="Open",
            brand_id=brand.id,
            owner_id=owner.id,
            owner_cost_center="CC-100-ATH",
            split_percent=Decimal("20"),
            amount=Decimal("1500"),
        )
        db.add(deal)
        await db.flush()

        db.add(DealClient(deal_id=deal.id, talent_client_id=talent.id, split_percent=Decimal("100")))
        product = Product(deal_id=deal.id, name="Instagram campaign", product_code="PRD-001")
        db.add(product)
        await db.flush()

        pending = Schedule(
            product_id=product.id,
            deal_id=deal.id,
            schedule_date=date(2026, 3, 1),
            revenue=Decimal("1000.00"),
            split_percent=Decimal("20.00"),
            talent_amount=Decimal("800.00"),
            commission_amount=Decimal("200.00"),
        )
        paid = Schedule(
            product_id=product.id,
            deal_id=deal.id,
            schedule_date=date(2026, 1, 1),
            revenue=Decimal("500.00"),
            split_percent=Decimal("20.00"),
            talent_amount=Decimal("400.00"),
            commission_amount=Decimal("100.00"),
            invoice_id="INV-001",
            payment_status_raw="Paid",
        )
        paid.splits = [
            CommissionSplit(
                position=0,
                agent_id=owner.id,
                agent_name=owner.name,
                split_percent=Decimal("100.00"),
                split_amount=Decimal("100.00"),
            )
        ]
        db.add_all([pending, paid])
        await db.flush()

        payment = Payment(deal_id=deal.id, payment_number="PAY-1", payment_amount=Decimal("500.00"))
        payment.remittances = [Remittance(schedule_id=paid.id, invoice_id="INV-001", amount=Decimal("500.00"))]
        db.add(payment)
        db.add(
            DealNote(
                deal_id=deal.id,
                title="Kickoff",
                content="Call with brand team",
                category=NoteCategory.MEETING,
            )
        )
        await db.commit()

        return SimpleNamespace(
            deal_id=deal.id,
            product_id=product.id,
            pending_id=pending.id,
            paid_id=paid.id,
            owner_id=owner.id,
            alice_id=alice.id,
            bob_id=bob.id,
            talent_id=talent.id,
            brand_id=brand.id,
            payment_id=payment.id,
        )
