"""Global search across talent, brands, agents and deals."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from dealdesk.db import get_db
from dealdesk.models import Agent, Brand, Deal, TalentClient
from dealdesk.schemas import SearchResult, envelope

router = APIRouter(prefix="/search", tags=["Search"])

MAX_PER_TYPE = 10


def _cost_center_filter(column, cost_center: Optional[str], cost_center_group: Optional[str]):
    if cost_center:
        return column == cost_center
    if cost_center_group:
        return column.startswith(cost_center_group)
    return None


@router.get("")
async def search(
    db: AsyncSession = Depends(get_db),
    q: str = Query(""),
    cost_center: Optional[str] = Query(None, alias="costCenter"),
    cost_center_group: Optional[str] = Query(None, alias="costCenterGroup"),
):
    """
    Case-insensitive substring search.

    Returns up to 10 hits per entity type, talent first, as one flat list
    tagged by ``type``. A blank query returns nothing.
    """
    term = q.strip()
    if not term:
        return envelope([])
    pattern = f"%{term}%"
    results: List[SearchResult] = []

    # Talent
    query = select(TalentClient).where(TalentClient.name.ilike(pattern))
    scope = _cost_center_filter(TalentClient.cost_center, cost_center, cost_center_group)
    if scope is not None:
        query = query.where(scope)
    for talent in (await db.execute(query.order_by(TalentClient.name).limit(MAX_PER_TYPE))).scalars():
        results.append(
            SearchResult(
                id=talent.id,
                type="talent",
                title=talent.name,
                subtitle=talent.sport or talent.location,
                category=talent.category,
            )
        )

    # Brands
    query = select(Brand).where(Brand.name.ilike(pattern)).order_by(Brand.name).limit(MAX_PER_TYPE)
    for brand in (await db.execute(query)).scalars():
        results.append(
            SearchResult(
                id=brand.id,
                type="brand",
                title=brand.name,
                subtitle=brand.industry,
                category=brand.type.value,
            )
        )

    # Agents
    query = select(Agent).where(Agent.name.ilike(pattern))
    scope = _cost_center_filter(Agent.cost_center, cost_center, cost_center_group)
    if scope is not None:
        query = query.where(scope)
    for agent in (await db.execute(query.order_by(Agent.name).limit(MAX_PER_TYPE))).scalars():
        results.append(
            SearchResult(
                id=agent.id,
                type="agent",
                title=agent.name,
                subtitle=agent.title or agent.company,
                category=agent.division,
            )
        )

    # Deals
    query = select(Deal).options(selectinload(Deal.brand)).where(Deal.name.ilike(pattern))
    scope = _cost_center_filter(Deal.owner_cost_center, cost_center, cost_center_group)
    if scope is not None:
        query = query.where(scope)
    for deal in (await db.execute(query.order_by(Deal.name).limit(MAX_PER_TYPE))).scalars():
        results.append(
            SearchResult(
                id=deal.id,
                type="deal",
                title=deal.name,
                subtitle=deal.brand.name if deal.brand else None,
                category=deal.stage,
            )
        )

    return envelope(results)
