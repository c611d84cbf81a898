"""
Deal attachment model. File bytes are stored inline.
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Integer, LargeBinary, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealdesk.models.base import BaseModel

if TYPE_CHECKING:
    from dealdesk.models.deal import Deal


class Attachment(BaseModel):
    __tablename__ = "attachments"

    deal_id: Mapped[int] = mapped_column(
        ForeignKey("deals.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_type: Mapped[str] = mapped_column(
        String(100),
        default="application/octet-stream",
        nullable=False,
    )
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False, deferred=True)

    deal: Mapped["Deal"] = relationship("Deal", back_populates="attachments")

    def __repr__(self) -> str:
        return f"<Attachment(id={self.id}, file_name='{self.file_name}')>"
