"""
Domain exceptions.

Routers translate these into HTTP errors; the API client raises ApiError
for anything the backend rejects.
"""

from typing import Optional


class DealDeskError(Exception):
    """Base exception for dealdesk failures."""


class SplitError(DealDeskError):
    """Invalid commission split operation (bad index, bad field, last row...)."""


class ScheduleLockedError(SplitError):
    """Raised when splits of a paid schedule are modified."""

    def __init__(self, schedule_id: Optional[int] = None):
        self.schedule_id = schedule_id
        super().__init__(f"Schedule {schedule_id} is paid; its splits are read-only")


class OverAllocationError(SplitError):
    """Raised when committed splits exceed 100% under the reject policy."""

    def __init__(self, total_percent):
        self.total_percent = total_percent
        super().__init__(f"Splits total {total_percent}%, which exceeds 100%")


class SplitStateError(SplitError):
    """Illegal transition in the split editing state machine."""


class AttachmentTooLargeError(DealDeskError):
    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"Attachment is {size} bytes; the limit is {limit} bytes")


class ApiError(DealDeskError):
    """Raised by the API client on transport failures and non-2xx responses."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail=None):
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)
