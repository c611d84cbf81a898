"""
Deal graph loading.

Async sessions cannot lazy-load, so every relationship a response or
cascade touches is eager-loaded here with selectinload.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from dealdesk.models import (
    Deal,
    DealClient,
    Payment,
    Product,
    Schedule,
    TalentAgent,
    TalentClient,
)
from dealdesk.services.splits import Split, candidate_agents, initialize_splits


def deal_detail_options():
    """Loader options for DealDetailResponse."""
    return (
        selectinload(Deal.brand),
        selectinload(Deal.owner),
        selectinload(Deal.clients)
        .selectinload(DealClient.talent_client)
        .selectinload(TalentClient.agents)
        .selectinload(TalentAgent.agent),
        selectinload(Deal.products)
        .selectinload(Product.schedules)
        .selectinload(Schedule.splits),
    )


async def get_deal_detail(db: AsyncSession, deal_id: int) -> Optional[Deal]:
    result = await db.execute(
        select(Deal)
        .options(*deal_detail_options())
        .where(Deal.id == deal_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_deal_for_export(db: AsyncSession, deal_id: int) -> Optional[Deal]:
    """Deal detail plus notes, attachments, payments and the activity feed."""
    result = await db.execute(
        select(Deal)
        .options(
            *deal_detail_options(),
            selectinload(Deal.notes),
            selectinload(Deal.attachments),
            selectinload(Deal.payments),
            selectinload(Deal.activities),
        )
        .where(Deal.id == deal_id)
    )
    return result.scalar_one_or_none()


async def get_deal_for_delete(db: AsyncSession, deal_id: int) -> Optional[Deal]:
    """Load every collection the ORM cascade will delete."""
    result = await db.execute(
        select(Deal)
        .options(
            selectinload(Deal.clients),
            selectinload(Deal.products)
            .selectinload(Product.schedules)
            .selectinload(Schedule.splits),
            selectinload(Deal.notes),
            selectinload(Deal.attachments),
            selectinload(Deal.payments).selectinload(Payment.remittances),
            selectinload(Deal.activities),
        )
        .where(Deal.id == deal_id)
    )
    return result.scalar_one_or_none()


async def get_schedule(db: AsyncSession, schedule_id: int) -> Optional[Schedule]:
    result = await db.execute(
        select(Schedule)
        .options(selectinload(Schedule.splits))
        .where(Schedule.id == schedule_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_deal_with_agents(db: AsyncSession, deal_id: int) -> Optional[Deal]:
    """Owner and talent agents: everything default splits are built from."""
    result = await db.execute(
        select(Deal)
        .options(
            selectinload(Deal.owner),
            selectinload(Deal.clients)
            .selectinload(DealClient.talent_client)
            .selectinload(TalentClient.agents)
            .selectinload(TalentAgent.agent),
        )
        .where(Deal.id == deal_id)
    )
    return result.scalar_one_or_none()


def default_splits(deal: Deal, commission_amount) -> List[Split]:
    """
    Splits for a new schedule: the talent's agents share 100% equally,
    or the owner (then the licence holder) takes it all.
    """
    talent_clients = [c.talent_client for c in deal.clients if c.talent_client is not None]
    owner = deal.owner
    return initialize_splits(
        commission_amount,
        candidate_agents(talent_clients),
        owner_name=owner.name if owner else deal.licence_holder_name,
        owner_id=owner.id if owner else None,
    )
