"""Attachment schemas. File bytes travel base64-encoded."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from dealdesk.schemas.common import ApiModel


class AttachmentUploadRequest(ApiModel):
    file_name: str = Field(..., min_length=1, max_length=255)
    file_type: str = Field("application/octet-stream", max_length=100)
    file_size: Optional[int] = Field(None, ge=0)
    base64_data: str = Field(..., min_length=1)
    deal_id: int
    description: Optional[str] = Field(None, max_length=2000)


class AttachmentResponse(ApiModel):
    id: int
    deal_id: int
    file_name: str
    file_type: str
    file_size: int
    description: Optional[str] = None
    created_at: Optional[datetime] = None


class AttachmentDownloadResponse(ApiModel):
    base64_data: str
    file_name: str
    file_type: str
