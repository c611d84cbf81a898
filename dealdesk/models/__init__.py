"""
Database models for dealdesk.

All models are exported here for convenient imports:
    from dealdesk.models import Deal, Schedule, CommissionSplit, etc.
"""

from dealdesk.models.activity import ActivityLog, ActivityType
from dealdesk.models.agent import Agent, TalentAgent, TalentClient
from dealdesk.models.attachment import Attachment
from dealdesk.models.base import Base, BaseModel, CreatedAtMixin, TimestampMixin
from dealdesk.models.brand import Brand, BrandStatus, BrandType
from dealdesk.models.deal import Deal, DealClient
from dealdesk.models.note import DealNote, NoteCategory
from dealdesk.models.payment import Payment, Remittance
from dealdesk.models.product import Product
from dealdesk.models.schedule import CommissionSplit, PaymentStatus, Schedule

__all__ = [
    # Base
    "Base",
    "BaseModel",
    "CreatedAtMixin",
    "TimestampMixin",
    # People
    "Agent",
    "TalentClient",
    "TalentAgent",
    # Brand
    "Brand",
    "BrandStatus",
    "BrandType",
    # Deal
    "Deal",
    "DealClient",
    "DealNote",
    "NoteCategory",
    "Attachment",
    # Financial
    "Product",
    "Schedule",
    "PaymentStatus",
    "CommissionSplit",
    "Payment",
    "Remittance",
    # Activity
    "ActivityLog",
    "ActivityType",
]
