"""Deal API endpoints: detail, edits, payments, activity feed, notes and export."""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from dealdesk.config import settings
from dealdesk.db import get_db
from dealdesk.models import (
    ActivityLog,
    ActivityType,
    Agent,
    Attachment,
    Brand,
    Deal,
    DealClient,
    DealNote,
    Payment,
    TalentClient,
)
from dealdesk.schemas import (
    ActivityResponse,
    AttachmentResponse,
    DealCreateRequest,
    DealDetailResponse,
    DealSummaryResponse,
    DealUpdateRequest,
    ExportRequest,
    NoteCreateRequest,
    NoteResponse,
    PaymentResponse,
    envelope,
)
from dealdesk.services.deals import get_deal_detail, get_deal_for_delete, get_deal_for_export
from dealdesk.services.export import export_deal
from dealdesk.utils.activity import log_activity
from dealdesk.utils.formatting import export_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/deals", tags=["Deals"])

MEDIA_TYPES = {"csv": "text/csv", "pdf": "application/pdf"}


async def _require_deal(db: AsyncSession, deal_id: int) -> Deal:
    deal = await db.get(Deal, deal_id)
    if not deal:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Deal not found",
        )
    return deal


@router.get("")
async def list_deals(
    db: AsyncSession = Depends(get_db),
    deal_status: Optional[str] = Query(None, alias="status"),
    stage: Optional[str] = Query(None),
    division: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    cost_center: Optional[str] = Query(None, alias="costCenter"),
    cost_center_group: Optional[str] = Query(None, alias="costCenterGroup"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    """List deals with filters."""
    query = select(Deal).options(selectinload(Deal.brand), selectinload(Deal.owner))

    if deal_status:
        query = query.where(Deal.status == deal_status)
    if stage:
        query = query.where(Deal.stage == stage)
    if division:
        query = query.where(Deal.division == division)

    if search:
        pattern = f"%{search.strip()}%"
        query = query.outerjoin(Brand, Deal.brand_id == Brand.id).where(
            or_(Deal.name.ilike(pattern), Brand.name.ilike(pattern))
        )

    if cost_center:
        query = query.where(Deal.owner_cost_center == cost_center)
    elif cost_center_group:
        query = query.where(Deal.owner_cost_center.startswith(cost_center_group))

    total = await db.scalar(select(func.count()).select_from(query.subquery())) or 0

    query = query.order_by(Deal.created_at.desc(), Deal.id.desc())
    query = query.offset((page - 1) * limit).limit(limit)
    deals = (await db.execute(query)).scalars().all()

    return envelope(
        [DealSummaryResponse.model_validate(d) for d in deals],
        total=total,
        page=page,
        limit=limit,
        pages=(total + limit - 1) // limit if total else 0,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_deal(
    data: DealCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Create a deal and attach its talent clients.

    ownerCostCenter falls back to the owner's cost center so the deal
    shows up under the owner's group in cost center filtering.
    """
    if data.brand_id is not None and not await db.get(Brand, data.brand_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Brand not found")

    owner = None
    if data.owner_id is not None:
        owner = await db.get(Agent, data.owner_id)
        if not owner:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Owner not found")

    client_ids = list(dict.fromkeys(data.talent_client_ids))
    if client_ids:
        found = set(
            (await db.execute(select(TalentClient.id).where(TalentClient.id.in_(client_ids))))
            .scalars()
            .all()
        )
        missing = [cid for cid in client_ids if cid not in found]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Talent client(s) not found: {', '.join(map(str, missing))}",
            )

    fields = data.model_dump(exclude={"talent_client_ids"})
    if not fields["owner_cost_center"] and owner is not None:
        fields["owner_cost_center"] = owner.cost_center

    deal = Deal(**fields)
    deal.clients = [DealClient(talent_client_id=cid) for cid in client_ids]
    db.add(deal)
    await db.flush()

    await log_activity(
        db=db,
        deal_id=deal.id,
        activity_type=ActivityType.DEAL_CREATED,
        entity_type="Deal",
        entity_id=deal.id,
        title=f"Deal created: {deal.name}",
        activity_metadata={"talentClientIds": client_ids},
    )
    await db.commit()
    logger.info("Deal %s created", deal.id)

    deal = await get_deal_detail(db, deal.id)
    return envelope(DealDetailResponse.model_validate(deal))


@router.get("/{deal_id}")
async def get_deal(
    deal_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get the full deal graph."""
    deal = await get_deal_detail(db, deal_id)
    if not deal:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Deal not found",
        )
    return envelope(DealDetailResponse.model_validate(deal))


@router.put("/{deal_id}")
async def update_deal(
    deal_id: int,
    data: DealUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Partially update deal information."""
    deal = await _require_deal(db, deal_id)

    changed = []
    for field, value in data.model_dump(exclude_unset=True).items():
        if getattr(deal, field) != value:
            setattr(deal, field, value)
            changed.append(field)

    if "stage" in changed:
        deal.stage_last_updated = datetime.now(timezone.utc)

    if changed:
        await log_activity(
            db=db,
            deal_id=deal_id,
            activity_type=ActivityType.DEAL_UPDATED,
            entity_type="Deal",
            entity_id=deal_id,
            title="Deal information updated",
            description=f"Updated {', '.join(changed)}",
            activity_metadata={"changedFields": changed},
        )
        await db.commit()
        logger.info("Deal %s updated: %s", deal_id, changed)

    deal = await get_deal_detail(db, deal_id)
    return envelope(DealDetailResponse.model_validate(deal))


@router.delete("/{deal_id}")
async def delete_deal(
    deal_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Delete a deal and everything hanging off it."""
    deal = await get_deal_for_delete(db, deal_id)
    if not deal:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Deal not found",
        )

    await db.delete(deal)
    await db.commit()
    logger.info("Deal %s deleted", deal_id)
    return envelope({"id": deal_id})


# ── Payments ──────────────────────────────────────────────


@router.get("/{deal_id}/payments")
async def list_payments(
    deal_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Payments received for a deal, latest first, with remittances."""
    await _require_deal(db, deal_id)
    result = await db.execute(
        select(Payment)
        .options(selectinload(Payment.remittances))
        .where(Payment.deal_id == deal_id)
        .order_by(Payment.payment_date.desc().nulls_last(), Payment.id.desc())
    )
    return envelope([PaymentResponse.model_validate(p) for p in result.scalars().all()])


# ── Activity feed ─────────────────────────────────────────


@router.get("/{deal_id}/activities")
async def list_activities(
    deal_id: int,
    db: AsyncSession = Depends(get_db),
    limit: int = Query(settings.activity_page_limit, ge=1, le=200),
    offset: int = Query(0, ge=0),
    activity_type: Optional[str] = Query(None, alias="activityType"),
):
    """Activity feed, newest first."""
    await _require_deal(db, deal_id)

    query = select(ActivityLog).where(ActivityLog.deal_id == deal_id)
    if activity_type:
        query = query.where(ActivityLog.activity_type == activity_type)

    total = await db.scalar(select(func.count()).select_from(query.subquery())) or 0

    query = query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
    logs = (await db.execute(query.offset(offset).limit(limit))).scalars().all()

    return envelope(
        [ActivityResponse.from_log(log) for log in logs],
        total=total,
        limit=limit,
        offset=offset,
        hasMore=offset + len(logs) < total,
    )


# ── Notes ─────────────────────────────────────────────────


@router.get("/{deal_id}/notes")
async def list_notes(
    deal_id: int,
    db: AsyncSession = Depends(get_db),
):
    await _require_deal(db, deal_id)
    result = await db.execute(
        select(DealNote)
        .where(DealNote.deal_id == deal_id)
        .order_by(DealNote.created_at.desc(), DealNote.id.desc())
    )
    return envelope([NoteResponse.model_validate(n) for n in result.scalars().all()])


@router.post("/{deal_id}/notes", status_code=status.HTTP_201_CREATED)
async def create_note(
    deal_id: int,
    data: NoteCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    await _require_deal(db, deal_id)

    note = DealNote(
        deal_id=deal_id,
        title=data.title,
        content=data.content,
        category=data.category,
        status=data.status,
    )
    db.add(note)
    await db.flush()

    await log_activity(
        db=db,
        deal_id=deal_id,
        activity_type=ActivityType.NOTE_CREATED,
        entity_type="Note",
        entity_id=note.id,
        title=f"Note added: {note.title}",
        activity_metadata={"category": note.category.value},
    )
    await db.commit()
    await db.refresh(note)

    return envelope(NoteResponse.model_validate(note))


# ── Attachments ───────────────────────────────────────────


@router.get("/{deal_id}/attachments")
async def list_attachments(
    deal_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Attachment metadata for a deal (no file bytes)."""
    await _require_deal(db, deal_id)
    result = await db.execute(
        select(Attachment)
        .where(Attachment.deal_id == deal_id)
        .order_by(Attachment.created_at.desc(), Attachment.id.desc())
    )
    return envelope([AttachmentResponse.model_validate(a) for a in result.scalars().all()])


# ── Export ────────────────────────────────────────────────


@router.post("/{deal_id}/export")
async def export(
    deal_id: int,
    data: ExportRequest,
    db: AsyncSession = Depends(get_db),
):
    """Export selected sections of a deal as CSV or PDF."""
    if not data.sections.selected():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Select at least one section to export",
        )

    deal = await get_deal_for_export(db, deal_id)
    if not deal:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Deal not found",
        )

    content = await run_in_threadpool(export_deal, deal, data)
    filename = export_filename(deal.name, data.format)

    await log_activity(
        db=db,
        deal_id=deal_id,
        activity_type=ActivityType.DEAL_EXPORTED,
        entity_type="Deal",
        entity_id=deal_id,
        title=f"Deal exported as {data.format.upper()}",
        activity_metadata={"format": data.format, "sections": data.sections.selected()},
    )
    await db.commit()

    return Response(
        content=content,
        media_type=MEDIA_TYPES[data.format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
