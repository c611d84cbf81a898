"""
Seed demo data for local DealDesk testing.

Usage:
    python scripts/seed_demo_data.py

Or with custom DATABASE_URL:
    DATABASE_URL="postgresql://..." python scripts/seed_demo_data.py

This script creates:
- Agents and talent clients linked to them
- A brand and a deal with two products
- Payment schedules (pending, invoiced, paid) with default commission splits
"""

import asyncio
import logging
import os
import sys
from datetime import date
from decimal import Decimal

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from dealdesk.db import get_db_context
from dealdesk.models import (
    Agent,
    Brand,
    CommissionSplit,
    Deal,
    DealClient,
    Product,
    Schedule,
    TalentAgent,
    TalentClient,
)
from dealdesk.services.splits import candidate_agents, derive_amounts, initialize_splits

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("seed")


# ===== DEMO DATA =====

DEMO_AGENTS = [
    {"name": "Jordan Blake", "title": "Senior Agent", "division": "Athletes", "cost_center": "CC-100-ATH"},
    {"name": "Priya Nair", "title": "Agent", "division": "Athletes", "cost_center": "CC-100-ATH"},
    {"name": "Sam Ortega", "title": "Agent", "division": "Music", "cost_center": "CC-200-MUS"},
]

DEMO_SCHEDULES = [
    # (date, revenue, split %, invoice id, raw payment status)
    (date(2026, 1, 15), Decimal("50000"), Decimal("20"), None, None),
    (date(2026, 4, 15), Decimal("50000"), Decimal("20"), "INV-1002", None),
    (date(2025, 10, 15), Decimal("25000"), Decimal("15"), "INV-0998", "Paid"),
]


async def seed() -> None:
    async with get_db_context() as db:
        existing = await db.scalar(select(Deal).where(Deal.name == "Apex Sportswear x Demo Talent"))
        if existing:
            logger.info("Demo data already present (deal %s)", existing.id)
            return

        agents = [Agent(**data) for data in DEMO_AGENTS]
        db.add_all(agents)

        talent = TalentClient(name="Demo Talent", category="Athlete", sport="Basketball", cost_center="CC-100-ATH")
        talent.agents = [
            TalentAgent(agent=agents[0], is_primary=True, role="Lead"),
            TalentAgent(agent=agents[1], role="Marketing"),
        ]
        db.add(talent)

        brand = Brand(name="Apex Sportswear", industry="Apparel", owner=agents[0])
        deal = Deal(
            name="Apex Sportswear x Demo Talent",
            stage="Contracted",
            status="Open",
            brand=brand,
            owner=agents[0],
            owner_cost_center=agents[0].cost_center,
            split_percent=Decimal("20"),
            amount=Decimal("125000"),
        )
        deal.clients = [DealClient(talent_client=talent, split_percent=Decimal("100"))]
        db.add(deal)
        await db.flush()

        recipients = candidate_agents([talent])

        for index, name in enumerate(["Social campaign", "Appearances"]):
            product = Product(deal_id=deal.id, name=name, product_code=f"PRD-{index + 1:03d}")
            db.add(product)
            await db.flush()

            for when, revenue, percent, invoice_id, raw_status in DEMO_SCHEDULES[index::2]:
                amounts = derive_amounts(revenue, percent)
                schedule = Schedule(
                    product_id=product.id,
                    deal_id=deal.id,
                    schedule_date=when,
                    revenue=amounts.revenue,
                    split_percent=amounts.split_percent,
                    talent_amount=amounts.talent_amount,
                    commission_amount=amounts.commission_amount,
                    invoice_id=invoice_id,
                    payment_status_raw=raw_status,
                )
                schedule.splits = [
                    CommissionSplit(
                        position=position,
                        agent_id=split.agent_id,
                        agent_name=split.agent_name,
                        split_percent=split.split_percent,
                        split_amount=split.split_amount,
                    )
                    for position, split in enumerate(
                        initialize_splits(amounts.commission_amount, recipients, owner_name=agents[0].name)
                    )
                ]
                db.add(schedule)

        logger.info("Seeded demo deal '%s'", deal.name)


if __name__ == "__main__":
    asyncio.run(seed())
