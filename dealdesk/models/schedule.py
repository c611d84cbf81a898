"""
Payment schedule and commission split models.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealdesk.models.base import BaseModel

if TYPE_CHECKING:
    from dealdesk.models.agent import Agent
    from dealdesk.models.deal import Deal
    from dealdesk.models.product import Product


class PaymentStatus(str, Enum):
    """Payment state of a schedule, derived from Workday invoice data."""
    PENDING = "pending"
    INVOICED = "invoiced"
    PAID = "paid"


class Schedule(BaseModel):
    """
    One dated payment installment under a product.

    revenue is split into talent_amount and commission_amount by
    split_percent. Once the schedule is paid its commission splits
    are read-only.
    """

    __tablename__ = "schedules"

    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    deal_id: Mapped[int] = mapped_column(
        ForeignKey("deals.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    schedule_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    schedule_status: Mapped[str] = mapped_column(
        String(50),
        default="DRAFT",
        nullable=False,
    )
    billable: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Amounts
    revenue: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        default=Decimal("0"),
        nullable=False,
    )
    split_percent: Mapped[Decimal] = mapped_column(
        Numeric(7, 2),
        default=Decimal("0"),
        nullable=False,
        comment="Share of revenue retained as commission",
    )
    talent_amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        default=Decimal("0"),
        nullable=False,
    )
    commission_amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        default=Decimal("0"),
        nullable=False,
    )

    # Workday invoice / payment
    invoice_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    invoice_reference_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    payment_status_raw: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Payment status as reported by Workday",
    )
    payment_term: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    po_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    product: Mapped["Product"] = relationship("Product", back_populates="schedules")
    deal: Mapped["Deal"] = relationship("Deal", viewonly=True)
    splits: Mapped[List["CommissionSplit"]] = relationship(
        "CommissionSplit",
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="CommissionSplit.position",
    )

    @property
    def payment_status(self) -> PaymentStatus:
        from dealdesk.services.splits import derive_payment_status

        return derive_payment_status(self.invoice_id, self.payment_status_raw)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID

    def __repr__(self) -> str:
        return f"<Schedule(id={self.id}, revenue={self.revenue}, status={self.payment_status.value})>"


class CommissionSplit(BaseModel):
    """A share of a schedule's commission allocated to one agent or agency."""

    __tablename__ = "commission_splits"

    schedule_id: Mapped[int] = mapped_column(
        ForeignKey("schedules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    agent_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("agents.id", ondelete="SET NULL"),
        nullable=True,
    )
    agent_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Free-text recipient; need not match a known agent",
    )
    split_percent: Mapped[Decimal] = mapped_column(
        Numeric(7, 2),
        nullable=False,
    )
    split_amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
    )

    schedule: Mapped["Schedule"] = relationship("Schedule", back_populates="splits")
    agent: Mapped[Optional["Agent"]] = relationship("Agent")

    def __repr__(self) -> str:
        return (
            f"<CommissionSplit(schedule_id={self.schedule_id}, "
            f"agent='{self.agent_name}', percent={self.split_percent})>"
        )
