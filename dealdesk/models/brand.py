"""
Brand model.
"""

from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealdesk.models.base import BaseModel

if TYPE_CHECKING:
    from dealdesk.models.agent import Agent


class BrandStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    PROSPECT = "PROSPECT"


class BrandType(str, Enum):
    BRAND = "BRAND"
    AGENCY = "AGENCY"


class Brand(BaseModel):
    """A brand (or agency acting for brands) that signs deals with talent."""

    __tablename__ = "brands"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    legal_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    industry: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    status: Mapped[BrandStatus] = mapped_column(
        SQLAlchemyEnum(
            BrandStatus,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=BrandStatus.ACTIVE,
        nullable=False,
    )
    type: Mapped[BrandType] = mapped_column(
        SQLAlchemyEnum(
            BrandType,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=BrandType.BRAND,
        nullable=False,
    )
    currency: Mapped[str] = mapped_column(
        String(3),
        default="USD",
        nullable=False,
    )
    owner_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("agents.id"),
        nullable=True,
    )

    owner: Mapped[Optional["Agent"]] = relationship("Agent")

    def __repr__(self) -> str:
        return f"<Brand(id={self.id}, name='{self.name}')>"
