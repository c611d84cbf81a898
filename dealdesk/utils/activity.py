"""
Activity feed utilities.

Every mutation of a deal's graph is recorded here for the deal timeline.
"""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from dealdesk.models.activity import ActivityLog, ActivityType


async def log_activity(
    db: AsyncSession,
    deal_id: int,
    activity_type: ActivityType,
    entity_type: str,
    title: str,
    entity_id: Optional[int] = None,
    description: Optional[str] = None,
    activity_metadata: Optional[dict[str, Any]] = None,
    actor_id: Optional[int] = None,
) -> ActivityLog:
    """
    Record an activity on a deal.

    Args:
        db: Database session
        deal_id: Deal the activity belongs to
        activity_type: Kind of change
        entity_type: Type of entity affected (e.g., "Schedule", "Note")
        title: One-line summary shown in the feed
        entity_id: ID of the affected entity
        description: Longer explanation
        activity_metadata: Additional context (changed fields, totals...)
        actor_id: Agent who made the change, if known

    Returns:
        Created ActivityLog entry
    """
    entry = ActivityLog(
        deal_id=deal_id,
        activity_type=activity_type.value,
        entity_type=entity_type,
        entity_id=entity_id,
        title=title,
        description=description,
        activity_metadata=activity_metadata,
        actor_id=actor_id,
    )
    db.add(entry)
    # Note: commit should happen in the calling context
    return entry
