"""
Deal model and its talent-client association.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Date, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealdesk.models.base import BaseModel

if TYPE_CHECKING:
    from dealdesk.models.activity import ActivityLog
    from dealdesk.models.agent import Agent, TalentClient
    from dealdesk.models.attachment import Attachment
    from dealdesk.models.brand import Brand
    from dealdesk.models.note import DealNote
    from dealdesk.models.payment import Payment
    from dealdesk.models.product import Product
    from dealdesk.models.schedule import Schedule


class Deal(BaseModel):
    """
    A brand deal for one or more talent clients.

    Field names follow the CRM's Salesforce opportunity layout:
    stage/status are free text mirrored from the opportunity, and the
    owner is the agent who opened the deal.
    """

    __tablename__ = "deals"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    status: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )
    stage: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        index=True,
    )
    stage_last_updated: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    close_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Financial
    amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(14, 2),
        nullable=True,
    )
    split_percent: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(7, 2),
        nullable=True,
        comment="Deal-level commission percent",
    )
    talent_marketing_fee_percent: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(7, 2),
        nullable=True,
    )

    # Organization
    division: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    industry: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    account_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    owner_cost_center: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        index=True,
        comment="Owner's Workday cost center",
    )
    company_reference: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    licence_holder_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    # Contract
    contract_start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    contract_end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    contract_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(14, 2),
        nullable=True,
    )
    clm_contract_number: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )

    # External links
    salesforce_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    workday_project_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    brand_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("brands.id"),
        nullable=True,
        index=True,
    )
    owner_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("agents.id"),
        nullable=True,
        index=True,
    )

    # Relationships
    brand: Mapped[Optional["Brand"]] = relationship("Brand")
    owner: Mapped[Optional["Agent"]] = relationship("Agent")
    clients: Mapped[List["DealClient"]] = relationship(
        "DealClient",
        back_populates="deal",
        cascade="all, delete-orphan",
    )
    products: Mapped[List["Product"]] = relationship(
        "Product",
        back_populates="deal",
        cascade="all, delete-orphan",
    )
    schedules: Mapped[List["Schedule"]] = relationship(
        "Schedule",
        viewonly=True,
        order_by="Schedule.schedule_date",
    )
    notes: Mapped[List["DealNote"]] = relationship(
        "DealNote",
        back_populates="deal",
        cascade="all, delete-orphan",
    )
    attachments: Mapped[List["Attachment"]] = relationship(
        "Attachment",
        back_populates="deal",
        cascade="all, delete-orphan",
    )
    payments: Mapped[List["Payment"]] = relationship(
        "Payment",
        back_populates="deal",
        cascade="all, delete-orphan",
    )
    activities: Mapped[List["ActivityLog"]] = relationship(
        "ActivityLog",
        back_populates="deal",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Deal(id={self.id}, name='{self.name}', stage={self.stage})>"


class DealClient(BaseModel):
    """Talent client attached to a deal."""

    __tablename__ = "deal_clients"

    deal_id: Mapped[int] = mapped_column(
        ForeignKey("deals.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    talent_client_id: Mapped[int] = mapped_column(
        ForeignKey("talent_clients.id"),
        nullable=False,
        index=True,
    )
    split_percent: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(7, 2),
        nullable=True,
    )

    deal: Mapped["Deal"] = relationship("Deal", back_populates="clients")
    talent_client: Mapped["TalentClient"] = relationship(
        "TalentClient",
        back_populates="deals",
    )
