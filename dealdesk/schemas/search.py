"""Global search schemas."""

from typing import Literal, Optional

from dealdesk.schemas.common import ApiModel


class SearchResult(ApiModel):
    """One hit of the unified search, tagged by entity type."""

    id: int
    type: Literal["talent", "brand", "agent", "deal"]
    title: str
    subtitle: Optional[str] = None
    category: Optional[str] = None
