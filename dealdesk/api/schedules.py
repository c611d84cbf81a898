"""Schedule and commission split API endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import and_, func, not_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from dealdesk.config import settings
from dealdesk.db import get_db
from dealdesk.models import ActivityType, CommissionSplit, Deal, PaymentStatus, Product, Schedule
from dealdesk.schemas import (
    ScheduleCreateRequest,
    ScheduleResponse,
    ScheduleUpdateRequest,
    SplitBatchRequest,
    SplitResponse,
    envelope,
)
from dealdesk.services.deals import default_splits, get_deal_with_agents, get_schedule
from dealdesk.services.splits import (
    AllocationState,
    Split,
    allocation_state,
    amounts_from_commission,
    amounts_from_talent,
    derive_amounts,
    recompute_amounts,
    total_percent,
)
from dealdesk.utils.activity import log_activity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schedules", tags=["Schedules"])


async def _require_schedule(db: AsyncSession, schedule_id: int) -> Schedule:
    schedule = await get_schedule(db, schedule_id)
    if not schedule:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Schedule not found",
        )
    return schedule


def _payment_status_clause(payment_status: PaymentStatus):
    """SQL twin of derive_payment_status()."""
    paid = func.lower(func.trim(func.coalesce(Schedule.payment_status_raw, ""))) == PaymentStatus.PAID.value
    invoiced = func.trim(func.coalesce(Schedule.invoice_id, "")) != ""
    if payment_status is PaymentStatus.PAID:
        return paid
    if payment_status is PaymentStatus.INVOICED:
        return and_(not_(paid), invoiced)
    return and_(not_(paid), not_(invoiced))


@router.get("")
async def list_schedules(
    db: AsyncSession = Depends(get_db),
    deal_id: Optional[int] = Query(None, alias="dealId"),
    product_id: Optional[int] = Query(None, alias="productId"),
    schedule_status: Optional[str] = Query(None, alias="scheduleStatus"),
    payment_status: Optional[PaymentStatus] = Query(None, alias="paymentStatus"),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    """List schedules with filters; paymentStatus is the derived status."""
    query = select(Schedule).options(selectinload(Schedule.splits))

    if deal_id is not None:
        query = query.where(Schedule.deal_id == deal_id)
    if product_id is not None:
        query = query.where(Schedule.product_id == product_id)
    if schedule_status:
        query = query.where(Schedule.schedule_status == schedule_status)
    if payment_status is not None:
        query = query.where(_payment_status_clause(payment_status))
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(
            or_(Schedule.description.ilike(pattern), Schedule.invoice_id.ilike(pattern))
        )

    total = await db.scalar(select(func.count()).select_from(query.subquery())) or 0

    query = query.order_by(Schedule.schedule_date, Schedule.id)
    schedules = (await db.execute(query.offset((page - 1) * limit).limit(limit))).scalars().all()

    return envelope(
        [ScheduleResponse.model_validate(s) for s in schedules],
        total=total,
        page=page,
        limit=limit,
        pages=(total + limit - 1) // limit if total else 0,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_schedule(
    data: ScheduleCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Create a schedule under a product.

    Amounts come from revenue and the split percent (the deal's percent
    when omitted). The commission is pre-split across the talent's agents,
    or given to the deal owner when the talent has none.
    """
    product = await db.get(Product, data.product_id)
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found",
        )
    deal = await get_deal_with_agents(db, product.deal_id)

    percent = data.split_percent
    if percent is None:
        percent = deal.split_percent or 0
    amounts = derive_amounts(data.revenue, percent)

    schedule = Schedule(
        product_id=product.id,
        deal_id=deal.id,
        schedule_date=data.schedule_date,
        description=data.description,
        type=data.type,
        billable=data.billable,
        revenue=amounts.revenue,
        split_percent=amounts.split_percent,
        talent_amount=amounts.talent_amount,
        commission_amount=amounts.commission_amount,
    )
    schedule.splits = [
        CommissionSplit(
            position=position,
            agent_id=row.agent_id,
            agent_name=row.agent_name,
            split_percent=row.split_percent,
            split_amount=row.split_amount,
        )
        for position, row in enumerate(default_splits(deal, amounts.commission_amount))
    ]
    db.add(schedule)
    await db.flush()

    await log_activity(
        db=db,
        deal_id=deal.id,
        activity_type=ActivityType.SCHEDULE_CREATED,
        entity_type="Schedule",
        entity_id=schedule.id,
        title=f"Schedule added to {product.name or product.id}",
        activity_metadata={
            "productId": product.id,
            "revenue": str(schedule.revenue),
            "splitPercent": str(schedule.split_percent),
        },
    )
    await db.commit()
    logger.info("Schedule %s created under product %s", schedule.id, product.id)

    schedule = await _require_schedule(db, schedule.id)
    return envelope(ScheduleResponse.model_validate(schedule))


@router.get("/by-product/{product_id}")
async def list_schedules_by_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
):
    if not await db.get(Product, product_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found",
        )

    result = await db.execute(
        select(Schedule)
        .options(selectinload(Schedule.splits))
        .where(Schedule.product_id == product_id)
        .order_by(Schedule.schedule_date, Schedule.id)
    )
    return envelope([ScheduleResponse.model_validate(s) for s in result.scalars().all()])


@router.get("/by-deal/{deal_id}")
async def list_schedules_by_deal(
    deal_id: int,
    db: AsyncSession = Depends(get_db),
):
    """All schedules of a deal, across its products."""
    if not await db.get(Deal, deal_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Deal not found",
        )

    result = await db.execute(
        select(Schedule)
        .options(selectinload(Schedule.splits))
        .where(Schedule.deal_id == deal_id)
        .order_by(Schedule.schedule_date, Schedule.id)
    )
    return envelope([ScheduleResponse.model_validate(s) for s in result.scalars().all()])


@router.get("/{schedule_id}")
async def get_schedule_detail(
    schedule_id: int,
    db: AsyncSession = Depends(get_db),
):
    schedule = await _require_schedule(db, schedule_id)
    return envelope(ScheduleResponse.model_validate(schedule))


@router.put("/{schedule_id}")
async def update_schedule(
    schedule_id: int,
    data: ScheduleUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Edit revenue, talent amount or commission amount.

    The other two amounts and the split percent are recomputed; existing
    splits keep their percents and get new amounts.
    """
    schedule = await _require_schedule(db, schedule_id)
    if schedule.is_paid:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Schedule is paid and can no longer be edited",
        )

    amounts = None
    if data.revenue is not None:
        percent = data.split_percent if data.split_percent is not None else schedule.split_percent
        amounts = derive_amounts(data.revenue, percent)
    elif data.talent_amount is not None:
        amounts = amounts_from_talent(schedule.revenue, data.talent_amount)
    elif data.commission_amount is not None:
        amounts = amounts_from_commission(schedule.revenue, data.commission_amount)
    elif data.split_percent is not None:
        amounts = derive_amounts(schedule.revenue, data.split_percent)

    changed = []
    if amounts is not None:
        for field in ("revenue", "split_percent", "talent_amount", "commission_amount"):
            value = getattr(amounts, field)
            if getattr(schedule, field) != value:
                setattr(schedule, field, value)
                changed.append(field)

        if "commission_amount" in changed:
            rows = recompute_amounts(
                [Split(agent_name=s.agent_name, split_percent=s.split_percent) for s in schedule.splits],
                schedule.commission_amount,
            )
            for split, row in zip(schedule.splits, rows):
                split.split_amount = row.split_amount

    for field in ("description", "schedule_date"):
        value = getattr(data, field)
        if value is not None and getattr(schedule, field) != value:
            setattr(schedule, field, value)
            changed.append(field)

    if changed:
        await log_activity(
            db=db,
            deal_id=schedule.deal_id,
            activity_type=ActivityType.SCHEDULE_UPDATED,
            entity_type="Schedule",
            entity_id=schedule.id,
            title="Schedule amounts updated",
            activity_metadata={
                "changedFields": changed,
                "revenue": str(schedule.revenue),
                "splitPercent": str(schedule.split_percent),
                "commissionAmount": str(schedule.commission_amount),
            },
        )
        await db.commit()
        logger.info("Schedule %s updated: %s", schedule_id, changed)

    schedule = await _require_schedule(db, schedule_id)
    return envelope(ScheduleResponse.model_validate(schedule))


@router.delete("/{schedule_id}")
async def delete_schedule(
    schedule_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Delete a schedule and its splits. Paid schedules are kept."""
    schedule = await _require_schedule(db, schedule_id)
    if schedule.is_paid:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Schedule is paid and cannot be deleted",
        )

    await log_activity(
        db=db,
        deal_id=schedule.deal_id,
        activity_type=ActivityType.SCHEDULE_DELETED,
        entity_type="Schedule",
        entity_id=schedule.id,
        title="Schedule deleted",
        activity_metadata={"productId": schedule.product_id, "revenue": str(schedule.revenue)},
    )
    await db.delete(schedule)
    await db.commit()
    logger.info("Schedule %s deleted", schedule_id)
    return envelope({"id": schedule_id})


@router.get("/{schedule_id}/splits")
async def list_splits(
    schedule_id: int,
    db: AsyncSession = Depends(get_db),
):
    schedule = await _require_schedule(db, schedule_id)
    return envelope([SplitResponse.model_validate(s) for s in schedule.splits])


@router.put("/{schedule_id}/splits/batch")
async def replace_splits(
    schedule_id: int,
    data: SplitBatchRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Replace all commission splits of a schedule.

    Amounts are recomputed from percents against the schedule's
    commission; submitted amounts are ignored. Concurrent writers are
    last-write-wins.
    """
    schedule = await _require_schedule(db, schedule_id)

    if settings.enforce_paid_split_lock and schedule.is_paid:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Schedule is paid; its splits are read-only",
        )

    rows = [
        Split(agent_name=s.agent_name, split_percent=s.split_percent, agent_id=s.agent_id)
        for s in data.splits
    ]
    total = total_percent(rows)
    if (
        settings.split_over_allocation_policy == "reject"
        and allocation_state(rows) is AllocationState.OVER
    ):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Splits total {total}%, which exceeds 100%",
        )

    rows = recompute_amounts(rows, schedule.commission_amount)
    schedule.splits = [
        CommissionSplit(
            position=position,
            agent_id=row.agent_id,
            agent_name=row.agent_name,
            split_percent=row.split_percent,
            split_amount=row.split_amount,
        )
        for position, row in enumerate(rows)
    ]

    await log_activity(
        db=db,
        deal_id=schedule.deal_id,
        activity_type=ActivityType.SPLITS_UPDATED,
        entity_type="Schedule",
        entity_id=schedule.id,
        title="Commission splits updated",
        description=", ".join(f"{r.agent_name} {r.split_percent}%" for r in rows),
        activity_metadata={"count": len(rows), "totalPercent": str(total)},
    )
    await db.commit()
    logger.info("Replaced splits of schedule %s: %d rows, total %s%%", schedule_id, len(rows), total)

    schedule = await _require_schedule(db, schedule_id)
    return envelope([SplitResponse.model_validate(s) for s in schedule.splits])
