"""
Agent and talent client models.

Agents represent talent under TalentAgent links; those links are what
commission splits are seeded from.
"""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealdesk.models.base import BaseModel

if TYPE_CHECKING:
    from dealdesk.models.deal import DealClient


class Agent(BaseModel):
    """An agent (or agency desk) that can receive commission."""

    __tablename__ = "agents"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    phone: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )
    title: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    company: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    division: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    cost_center: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        index=True,
        comment="Workday cost center code",
    )

    def __repr__(self) -> str:
        return f"<Agent(id={self.id}, name='{self.name}')>"


class TalentClient(BaseModel):
    """A represented talent (athlete, creator, musician...)."""

    __tablename__ = "talent_clients"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    category: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    sport: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    location: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    cost_center: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        index=True,
    )

    agents: Mapped[List["TalentAgent"]] = relationship(
        "TalentAgent",
        back_populates="talent_client",
        cascade="all, delete-orphan",
    )
    deals: Mapped[List["DealClient"]] = relationship(
        "DealClient",
        back_populates="talent_client",
    )

    def __repr__(self) -> str:
        return f"<TalentClient(id={self.id}, name='{self.name}')>"


class TalentAgent(BaseModel):
    """Link between a talent client and one of their agents."""

    __tablename__ = "talent_agents"

    talent_client_id: Mapped[int] = mapped_column(
        ForeignKey("talent_clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    agent_id: Mapped[int] = mapped_column(
        ForeignKey("agents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_primary: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    role: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )

    talent_client: Mapped["TalentClient"] = relationship(
        "TalentClient",
        back_populates="agents",
    )
    agent: Mapped["Agent"] = relationship("Agent")
