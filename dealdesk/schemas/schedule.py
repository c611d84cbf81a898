"""Schedule and commission split schemas."""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from dealdesk.models.schedule import PaymentStatus
from dealdesk.schemas.common import Amount, ApiModel


class SplitResponse(ApiModel):
    id: Optional[int] = None
    agent_id: Optional[int] = None
    agent_name: str
    split_percent: Amount
    split_amount: Amount


class ScheduleResponse(ApiModel):
    """A schedule with its derived payment status and current splits."""

    id: int
    product_id: int
    deal_id: int
    description: Optional[str] = None
    type: Optional[str] = None
    schedule_date: Optional[date] = None
    schedule_status: str = "DRAFT"
    billable: bool = True

    revenue: Amount = Decimal("0")
    split_percent: Amount = Decimal("0")
    talent_amount: Amount = Decimal("0")
    commission_amount: Amount = Decimal("0")

    invoice_id: Optional[str] = None
    payment_status_raw: Optional[str] = None
    payment_status: PaymentStatus = PaymentStatus.PENDING

    splits: List[SplitResponse] = []

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID


class ScheduleUpdateRequest(ApiModel):
    """
    Edit one of revenue / talentAmount / commissionAmount.

    Revenue may be combined with splitPercent; the other two back-derive
    the percent themselves.
    """

    revenue: Optional[Decimal] = Field(None, ge=0)
    talent_amount: Optional[Decimal] = None
    commission_amount: Optional[Decimal] = None
    split_percent: Optional[Decimal] = None
    description: Optional[str] = Field(None, max_length=2000)
    schedule_date: Optional[date] = None

    @model_validator(mode="after")
    def check_single_amount(self):
        edited = [
            name
            for name in ("revenue", "talent_amount", "commission_amount")
            if getattr(self, name) is not None
        ]
        if len(edited) > 1:
            raise ValueError("Edit only one of revenue, talentAmount or commissionAmount")
        if self.split_percent is not None and edited and edited[0] != "revenue":
            raise ValueError("splitPercent can only be combined with revenue")
        return self


class ScheduleCreateRequest(ApiModel):
    """
    New schedule under a product.

    splitPercent defaults to the deal's commission percent; the amounts
    and the default splits are derived server-side.
    """

    product_id: int
    schedule_date: Optional[date] = None
    description: Optional[str] = Field(None, max_length=2000)
    type: Optional[str] = Field(None, max_length=50)
    billable: bool = True
    revenue: Decimal = Field(Decimal("0"), ge=0)
    split_percent: Optional[Decimal] = None


class SplitInput(ApiModel):
    agent_name: str = Field(..., max_length=255)
    agent_id: Optional[int] = None
    split_percent: Decimal
    split_amount: Optional[Decimal] = None

    @field_validator("agent_name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("agentName must not be blank")
        return v.strip()


class SplitBatchRequest(ApiModel):
    """Replace-all payload for PUT /api/schedules/{id}/splits/batch."""

    splits: List[SplitInput]
