"""
ActivityLog model backing the deal activity feed.
"""

from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import JSON, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealdesk.models.base import Base, CreatedAtMixin

if TYPE_CHECKING:
    from dealdesk.models.agent import Agent
    from dealdesk.models.deal import Deal


class ActivityType(str, Enum):
    """Types of deal activity."""
    DEAL_CREATED = "DEAL_CREATED"
    DEAL_UPDATED = "DEAL_UPDATED"
    PRODUCT_CREATED = "PRODUCT_CREATED"
    PRODUCT_UPDATED = "PRODUCT_UPDATED"
    PRODUCT_DELETED = "PRODUCT_DELETED"
    SCHEDULE_CREATED = "SCHEDULE_CREATED"
    SCHEDULE_UPDATED = "SCHEDULE_UPDATED"
    SCHEDULE_DELETED = "SCHEDULE_DELETED"
    SPLITS_UPDATED = "SPLITS_UPDATED"
    NOTE_CREATED = "NOTE_CREATED"
    ATTACHMENT_UPLOADED = "ATTACHMENT_UPLOADED"
    ATTACHMENT_DELETED = "ATTACHMENT_DELETED"
    DEAL_EXPORTED = "DEAL_EXPORTED"


class ActivityLog(Base, CreatedAtMixin):
    """
    One entry in a deal's activity feed.

    Entries are append-only; they are removed only with their deal.
    """

    __tablename__ = "activity_logs"
    __table_args__ = (Index("ix_activity_logs_created_at", "created_at"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    deal_id: Mapped[int] = mapped_column(
        ForeignKey("deals.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    activity_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
    )
    entity_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Type of entity affected (Deal, Product, Schedule, Note...)",
    )
    entity_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    activity_metadata: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
        comment="Additional context about the change",
    )
    actor_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("agents.id"),
        nullable=True,
    )

    deal: Mapped["Deal"] = relationship("Deal", back_populates="activities")
    actor: Mapped[Optional["Agent"]] = relationship("Agent")

    def __repr__(self) -> str:
        return f"<ActivityLog(id={self.id}, deal_id={self.deal_id}, type={self.activity_type})>"
