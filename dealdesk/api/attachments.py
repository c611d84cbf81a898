"""Attachment API endpoints. File content travels base64-encoded."""

import base64
import binascii
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import undefer

from dealdesk.config import settings
from dealdesk.db import get_db
from dealdesk.models import ActivityType, Attachment, Deal
from dealdesk.schemas import (
    AttachmentDownloadResponse,
    AttachmentResponse,
    AttachmentUploadRequest,
    envelope,
)
from dealdesk.utils.activity import log_activity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attachments", tags=["Attachments"])


async def _require_attachment(db: AsyncSession, attachment_id: int, with_data: bool = False) -> Attachment:
    query = select(Attachment).where(Attachment.id == attachment_id)
    if with_data:
        query = query.options(undefer(Attachment.data))
    attachment = (await db.execute(query)).scalar_one_or_none()
    if not attachment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Attachment not found",
        )
    return attachment


@router.post("", status_code=status.HTTP_201_CREATED)
async def upload_attachment(
    data: AttachmentUploadRequest,
    db: AsyncSession = Depends(get_db),
):
    """Store a base64-encoded file against a deal."""
    if not await db.get(Deal, data.deal_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Deal not found",
        )

    try:
        content = base64.b64decode(data.base64_data, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="base64Data is not valid base64",
        )

    if len(content) > settings.max_attachment_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds the {settings.max_attachment_bytes // (1024 * 1024)} MB limit",
        )

    attachment = Attachment(
        deal_id=data.deal_id,
        file_name=data.file_name,
        file_type=data.file_type,
        file_size=len(content),
        description=data.description,
        data=content,
    )
    db.add(attachment)
    await db.flush()

    await log_activity(
        db=db,
        deal_id=data.deal_id,
        activity_type=ActivityType.ATTACHMENT_UPLOADED,
        entity_type="Attachment",
        entity_id=attachment.id,
        title=f"Uploaded {attachment.file_name}",
        activity_metadata={"fileType": attachment.file_type, "fileSize": attachment.file_size},
    )
    await db.commit()
    await db.refresh(attachment, attribute_names=["created_at", "updated_at"])
    logger.info("Attachment %s uploaded to deal %s (%d bytes)", attachment.id, data.deal_id, len(content))

    return envelope(AttachmentResponse.model_validate(attachment))


@router.get("/{attachment_id}")
async def get_attachment(
    attachment_id: int,
    db: AsyncSession = Depends(get_db),
):
    attachment = await _require_attachment(db, attachment_id)
    return envelope(AttachmentResponse.model_validate(attachment))


@router.get("/{attachment_id}/download")
async def download_attachment(
    attachment_id: int,
    db: AsyncSession = Depends(get_db),
):
    attachment = await _require_attachment(db, attachment_id, with_data=True)
    return envelope(
        AttachmentDownloadResponse(
            base64_data=base64.b64encode(attachment.data).decode("ascii"),
            file_name=attachment.file_name,
            file_type=attachment.file_type,
        )
    )


@router.delete("/{attachment_id}")
async def delete_attachment(
    attachment_id: int,
    db: AsyncSession = Depends(get_db),
):
    attachment = await _require_attachment(db, attachment_id)
    deal_id = attachment.deal_id
    file_name = attachment.file_name

    await db.delete(attachment)
    await log_activity(
        db=db,
        deal_id=deal_id,
        activity_type=ActivityType.ATTACHMENT_DELETED,
        entity_type="Attachment",
        entity_id=attachment_id,
        title=f"Deleted {file_name}",
    )
    await db.commit()
    logger.info("Attachment %s deleted from deal %s", attachment_id, deal_id)

    return envelope({"id": attachment_id})
