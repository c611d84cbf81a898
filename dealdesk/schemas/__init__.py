"""Pydantic schemas for request/response validation."""

from dealdesk.schemas.activity import ActivityPage, ActivityResponse
from dealdesk.schemas.attachment import (
    AttachmentDownloadResponse,
    AttachmentResponse,
    AttachmentUploadRequest,
)
from dealdesk.schemas.common import ApiModel, envelope
from dealdesk.schemas.deal import (
    DealCreateRequest,
    DealDetailResponse,
    DealSummaryResponse,
    DealUpdateRequest,
    NoteCreateRequest,
    NoteResponse,
    ProductResponse,
)
from dealdesk.schemas.export import ExportRequest
from dealdesk.schemas.payment import PaymentResponse, RemittanceResponse
from dealdesk.schemas.product import ProductCreateRequest, ProductUpdateRequest
from dealdesk.schemas.schedule import (
    ScheduleCreateRequest,
    ScheduleResponse,
    ScheduleUpdateRequest,
    SplitBatchRequest,
    SplitInput,
    SplitResponse,
)
from dealdesk.schemas.search import SearchResult

__all__ = [
    "ApiModel",
    "envelope",
    # Deal
    "DealSummaryResponse",
    "DealCreateRequest",
    "DealDetailResponse",
    "DealUpdateRequest",
    "NoteCreateRequest",
    "NoteResponse",
    "ProductResponse",
    "ProductCreateRequest",
    "ProductUpdateRequest",
    # Schedule
    "ScheduleCreateRequest",
    "ScheduleResponse",
    "ScheduleUpdateRequest",
    "SplitBatchRequest",
    "SplitInput",
    "SplitResponse",
    # Payment
    "PaymentResponse",
    "RemittanceResponse",
    # Activity
    "ActivityResponse",
    "ActivityPage",
    # Attachment
    "AttachmentUploadRequest",
    "AttachmentResponse",
    "AttachmentDownloadResponse",
    # Export / search
    "ExportRequest",
    "SearchResult",
]
