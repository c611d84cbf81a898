"""Product create/update schemas."""

from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from dealdesk.schemas.common import ApiModel


class ProductCreateRequest(ApiModel):
    deal_id: int
    name: str = Field(..., max_length=255)
    product_code: Optional[str] = Field(None, max_length=50)
    unit_price: Optional[Decimal] = Field(None, ge=0)
    total_price: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None
    deliverables: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()


class ProductUpdateRequest(ApiModel):
    name: Optional[str] = Field(None, max_length=255)
    product_code: Optional[str] = Field(None, max_length=50)
    unit_price: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None
    deliverables: Optional[str] = None
