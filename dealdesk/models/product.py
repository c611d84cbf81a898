"""
Product model (opportunity line item).
"""

from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealdesk.models.base import BaseModel

if TYPE_CHECKING:
    from dealdesk.models.deal import Deal
    from dealdesk.models.schedule import Schedule


class Product(BaseModel):
    """A deliverable sold under a deal, paid out through its schedules."""

    __tablename__ = "products"

    deal_id: Mapped[int] = mapped_column(
        ForeignKey("deals.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    product_code: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Cost center code of the product",
    )
    unit_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(14, 2),
        nullable=True,
    )
    total_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(14, 2),
        nullable=True,
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    deliverables: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Workday project
    workday_project_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    workday_project_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    workday_project_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    deal: Mapped["Deal"] = relationship("Deal", back_populates="products")
    schedules: Mapped[List["Schedule"]] = relationship(
        "Schedule",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="Schedule.schedule_date",
    )

    @property
    def total_commission(self) -> Decimal:
        """Sum of commission across the product's schedules."""
        return sum(
            (s.commission_amount or Decimal("0") for s in self.schedules),
            Decimal("0"),
        )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}')>"
