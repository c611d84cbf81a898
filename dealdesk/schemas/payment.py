"""Payment and remittance schemas."""

from datetime import date, datetime
from typing import List, Optional

from dealdesk.schemas.common import Amount, ApiModel


class RemittanceResponse(ApiModel):
    id: int
    payment_id: int
    schedule_id: Optional[int] = None
    invoice_id: Optional[str] = None
    amount: Amount


class PaymentResponse(ApiModel):
    """A brand payment with the remittances that apply it to schedules."""

    id: int
    deal_id: int
    payment_number: Optional[str] = None
    payment_amount: Amount
    payment_date: Optional[date] = None
    payment_status: Optional[str] = None
    payment_method: Optional[str] = None
    applied_amount: Amount
    unapplied_amount: Amount
    created_at: Optional[datetime] = None
    remittances: List[RemittanceResponse] = []
