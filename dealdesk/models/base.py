"""
Declarative base and shared columns for the deal graph tables.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Metadata root; alembic/env.py reads Base.metadata."""
    pass


class CreatedAtMixin:
    """Server-stamped creation time. Append-only tables stop here."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class TimestampMixin(CreatedAtMixin):
    """Creation time plus the time of the last ORM update."""

    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        onupdate=func.now(),
        nullable=True,
    )


class BaseModel(Base, TimestampMixin):
    """
    Editable CRM record: integer surrogate key plus created/updated stamps.

    Server-side defaults are not loaded back on flush; refresh the
    instance before serializing created_at.
    """

    __abstract__ = True

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
