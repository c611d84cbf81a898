"""
Deal note model.
"""

from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealdesk.models.base import BaseModel

if TYPE_CHECKING:
    from dealdesk.models.agent import Agent
    from dealdesk.models.deal import Deal


class NoteCategory(str, Enum):
    GENERAL = "GENERAL"
    BUSINESS = "BUSINESS"
    PERSONAL = "PERSONAL"
    FOLLOW_UP = "FOLLOW_UP"
    MEETING = "MEETING"
    EMAIL = "EMAIL"


class DealNote(BaseModel):
    """Free-form note on a deal."""

    __tablename__ = "deal_notes"

    deal_id: Mapped[int] = mapped_column(
        ForeignKey("deals.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[NoteCategory] = mapped_column(
        SQLAlchemyEnum(
            NoteCategory,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=NoteCategory.GENERAL,
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default="OPEN",
        nullable=False,
    )
    author_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("agents.id"),
        nullable=True,
    )

    deal: Mapped["Deal"] = relationship("Deal", back_populates="notes")
    author: Mapped[Optional["Agent"]] = relationship("Agent")
