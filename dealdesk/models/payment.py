"""
Payment and remittance models.
"""

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Date, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealdesk.models.base import BaseModel

if TYPE_CHECKING:
    from dealdesk.models.deal import Deal
    from dealdesk.models.schedule import Schedule


class Payment(BaseModel):
    """A payment received from the brand for a deal."""

    __tablename__ = "payments"

    deal_id: Mapped[int] = mapped_column(
        ForeignKey("deals.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    payment_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    payment_amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
    )
    payment_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    payment_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    payment_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    deal: Mapped["Deal"] = relationship("Deal", back_populates="payments")
    remittances: Mapped[List["Remittance"]] = relationship(
        "Remittance",
        back_populates="payment",
        cascade="all, delete-orphan",
        order_by="Remittance.id",
    )

    @property
    def applied_amount(self) -> Decimal:
        """Part of the payment already remitted against schedules."""
        return sum((r.amount for r in self.remittances), Decimal("0"))

    @property
    def unapplied_amount(self) -> Decimal:
        return self.payment_amount - self.applied_amount

    def __repr__(self) -> str:
        return f"<Payment(id={self.id}, number='{self.payment_number}', amount={self.payment_amount})>"


class Remittance(BaseModel):
    """Portion of a payment applied against one schedule's invoice."""

    __tablename__ = "remittances"

    payment_id: Mapped[int] = mapped_column(
        ForeignKey("payments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    schedule_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("schedules.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    invoice_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
    )

    payment: Mapped["Payment"] = relationship("Payment", back_populates="remittances")
    schedule: Mapped[Optional["Schedule"]] = relationship("Schedule")
