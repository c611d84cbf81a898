"""Activity feed schemas."""

from datetime import datetime
from typing import Any, List, Optional

from dealdesk.schemas.common import ApiModel


class ActivityResponse(ApiModel):
    id: int
    deal_id: int
    activity_type: str
    entity_type: str
    entity_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None
    actor_id: Optional[int] = None
    created_at: datetime

    @classmethod
    def from_log(cls, log) -> "ActivityResponse":
        return cls(
            id=log.id,
            deal_id=log.deal_id,
            activity_type=log.activity_type,
            entity_type=log.entity_type,
            entity_id=log.entity_id,
            title=log.title,
            description=log.description,
            metadata=log.activity_metadata,
            actor_id=log.actor_id,
            created_at=log.created_at,
        )


class ActivityPage(ApiModel):
    """One page of the feed as seen by the API client."""

    items: List[ActivityResponse]
    total: int
    limit: int
    offset: int
    has_more: bool
