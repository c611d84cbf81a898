"""
Deal schemas.

DealDetailResponse doubles as the typed record the API client returns,
so the split editor works on the same shapes the backend emits.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from dealdesk.models.note import NoteCategory
from dealdesk.schemas.common import Amount, ApiModel
from dealdesk.schemas.schedule import ScheduleResponse


class AgentSummary(ApiModel):
    id: int
    name: str
    email: Optional[str] = None
    title: Optional[str] = None
    cost_center: Optional[str] = None


class BrandSummary(ApiModel):
    id: int
    name: str
    industry: Optional[str] = None


class TalentAgentResponse(ApiModel):
    agent_id: int
    is_primary: bool = False
    role: Optional[str] = None
    agent: Optional[AgentSummary] = None


class TalentClientResponse(ApiModel):
    id: int
    name: str
    category: Optional[str] = None
    agents: List[TalentAgentResponse] = []


class DealClientResponse(ApiModel):
    id: int
    talent_client_id: int
    split_percent: Optional[Amount] = None
    talent_client: Optional[TalentClientResponse] = None


class ProductResponse(ApiModel):
    id: int
    deal_id: int
    name: Optional[str] = None
    product_code: Optional[str] = None
    unit_price: Optional[Amount] = None
    total_price: Optional[Amount] = None
    description: Optional[str] = None
    deliverables: Optional[str] = None
    workday_project_id: Optional[str] = None
    total_commission: Amount = Decimal("0")
    schedules: List[ScheduleResponse] = []


class DealSummaryResponse(ApiModel):
    id: int
    name: str
    status: Optional[str] = None
    stage: Optional[str] = None
    amount: Optional[Amount] = None
    owner_cost_center: Optional[str] = None
    created_at: Optional[datetime] = None
    brand: Optional[BrandSummary] = None
    owner: Optional[AgentSummary] = None


class DealDetailResponse(DealSummaryResponse):
    """Full deal graph: clients with agents, products with schedules and splits."""

    split_percent: Optional[Amount] = None
    division: Optional[str] = None
    industry: Optional[str] = None
    account_name: Optional[str] = None
    company_reference: Optional[str] = None
    licence_holder_name: Optional[str] = None
    contract_start_date: Optional[date] = None
    contract_end_date: Optional[date] = None
    contract_amount: Optional[Amount] = None
    clm_contract_number: Optional[str] = None
    start_date: Optional[date] = None
    close_date: Optional[date] = None
    clients: List[DealClientResponse] = []
    products: List[ProductResponse] = []

    @property
    def schedules(self) -> List[ScheduleResponse]:
        return [s for p in self.products for s in p.schedules]

    @property
    def talent_clients(self) -> List[TalentClientResponse]:
        return [c.talent_client for c in self.clients if c.talent_client is not None]


class DealCreateRequest(ApiModel):
    """New deal; talentClientIds become the deal's clients."""

    name: str = Field(..., max_length=255)
    brand_id: Optional[int] = None
    owner_id: Optional[int] = None
    stage: Optional[str] = Field(None, max_length=100)
    status: Optional[str] = Field(None, max_length=50)
    division: Optional[str] = Field(None, max_length=100)
    industry: Optional[str] = Field(None, max_length=100)
    amount: Optional[Decimal] = Field(None, ge=0)
    split_percent: Optional[Decimal] = None
    owner_cost_center: Optional[str] = Field(None, max_length=50)
    licence_holder_name: Optional[str] = Field(None, max_length=255)
    start_date: Optional[date] = None
    close_date: Optional[date] = None
    talent_client_ids: List[int] = []

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()


class DealUpdateRequest(ApiModel):
    """Partial update of deal information."""

    stage: Optional[str] = Field(None, max_length=100)
    industry: Optional[str] = Field(None, max_length=100)
    contract_start_date: Optional[date] = None
    contract_end_date: Optional[date] = None
    owner_cost_center: Optional[str] = Field(None, max_length=50)
    company_reference: Optional[str] = Field(None, max_length=100)
    clm_contract_number: Optional[str] = Field(None, max_length=100)


class NoteCreateRequest(ApiModel):
    title: str = Field(..., max_length=255)
    content: str
    category: NoteCategory = NoteCategory.GENERAL
    status: str = Field("OPEN", max_length=20)

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class NoteResponse(ApiModel):
    id: int
    deal_id: int
    title: str
    content: str
    category: NoteCategory
    status: str
    created_at: Optional[datetime] = None
