"""Payment API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from dealdesk.db import get_db
from dealdesk.models import Payment
from dealdesk.schemas import PaymentResponse, envelope

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.get("/{payment_id}")
async def get_payment(
    payment_id: int,
    db: AsyncSession = Depends(get_db),
):
    """A single payment with the remittances applying it to schedules."""
    result = await db.execute(
        select(Payment)
        .options(selectinload(Payment.remittances))
        .where(Payment.id == payment_id)
    )
    payment = result.scalar_one_or_none()
    if not payment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment not found",
        )
    return envelope(PaymentResponse.model_validate(payment))
