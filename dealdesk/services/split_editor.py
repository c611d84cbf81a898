"""
Commission split editing session.

One SplitEditor serves one deal-detail view. It keeps an explicit
schedule id -> split rows store, seeded lazily from the schedule's
persisted splits or from initialize_splits(), and runs a small state
machine per row:

    VIEWING --begin_edit--> EDITING --save--> SAVING --ok--> VIEWING
                               |                 |
                               +--cancel_edit--> VIEWING (backup restored)
                                                 +--failure--> EDITING

Only one row per schedule is EDITING or SAVING at a time. Paid schedules
are read-only.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Protocol, Sequence

from dealdesk.config import settings
from dealdesk.exceptions import (
    ApiError,
    OverAllocationError,
    ScheduleLockedError,
    SplitError,
    SplitStateError,
)
from dealdesk.schemas.deal import DealDetailResponse
from dealdesk.schemas.schedule import ScheduleResponse
from dealdesk.services.splits import (
    AllocationState,
    Split,
    add_split,
    allocation_state,
    candidate_agents,
    initialize_splits,
    reconcile_splits,
    remove_split,
    total_percent,
    update_split,
)

logger = logging.getLogger(__name__)


class RowState(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"
    SAVING = "saving"


class SplitsGateway(Protocol):
    """Anything that can replace a schedule's splits (see DealDeskClient)."""

    async def replace_splits(self, schedule_id: int, splits: Sequence[Split]) -> List[Split]:
        ...


@dataclass
class SplitRow:
    split: Split
    state: RowState = RowState.VIEWING
    backup: Optional[Split] = None


class SplitEditor:
    """In-memory split store and per-row edit state for one deal."""

    def __init__(
        self,
        deal: DealDetailResponse,
        gateway: SplitsGateway,
        unassigned_label: Optional[str] = None,
        over_allocation_policy: Optional[str] = None,
        enforce_paid_lock: Optional[bool] = None,
    ):
        self.deal = deal
        self.gateway = gateway
        self.unassigned_label = unassigned_label or settings.unassigned_split_label
        self.over_allocation_policy = over_allocation_policy or settings.split_over_allocation_policy
        self.enforce_paid_lock = (
            settings.enforce_paid_split_lock if enforce_paid_lock is None else enforce_paid_lock
        )
        self.last_error: Optional[Exception] = None

        self._schedules: Dict[int, ScheduleResponse] = {s.id: s for s in deal.schedules}
        self._rows: Dict[int, List[SplitRow]] = {}

    # ── Lookup ────────────────────────────────────────────

    def schedule(self, schedule_id: int) -> ScheduleResponse:
        try:
            return self._schedules[schedule_id]
        except KeyError:
            raise SplitError(f"Schedule {schedule_id} is not part of deal {self.deal.id}") from None

    def is_locked(self, schedule_id: int) -> bool:
        return self.enforce_paid_lock and self.schedule(schedule_id).is_paid

    def refresh_schedule(self, schedule: ScheduleResponse) -> None:
        """Swap in a refetched schedule and drop its cached rows."""
        self._schedules[schedule.id] = schedule
        self._rows.pop(schedule.id, None)

    def _owner(self):
        owner = self.deal.owner
        if owner is not None:
            return owner.name, owner.id
        return self.deal.licence_holder_name, None

    def _load(self, schedule_id: int) -> List[SplitRow]:
        rows = self._rows.get(schedule_id)
        if rows is not None:
            return rows

        schedule = self.schedule(schedule_id)
        if schedule.splits:
            splits = [
                Split(
                    agent_name=s.agent_name,
                    split_percent=s.split_percent,
                    split_amount=s.split_amount,
                    agent_id=s.agent_id,
                )
                for s in schedule.splits
            ]
        else:
            owner_name, owner_id = self._owner()
            splits = initialize_splits(
                schedule.commission_amount,
                candidate_agents(self.deal.talent_clients),
                owner_name=owner_name,
                owner_id=owner_id,
            )
            logger.debug("Initialized %d default splits for schedule %s", len(splits), schedule_id)

        rows = [SplitRow(split=s) for s in splits]
        self._rows[schedule_id] = rows
        return rows

    def splits(self, schedule_id: int) -> List[Split]:
        return [row.split for row in self._load(schedule_id)]

    def states(self, schedule_id: int) -> List[RowState]:
        return [row.state for row in self._load(schedule_id)]

    def editing_index(self, schedule_id: int) -> Optional[int]:
        for index, row in enumerate(self._load(schedule_id)):
            if row.state is not RowState.VIEWING:
                return index
        return None

    def warning(self, schedule_id: int) -> Optional[str]:
        """Reconciliation warning shown when the rows do not total 100%."""
        splits = self.splits(schedule_id)
        if allocation_state(splits) is AllocationState.BALANCED:
            return None
        return f"Split percentages total {total_percent(splits)}% (should be 100%)"

    # ── Mutations ─────────────────────────────────────────

    def _guard(self, schedule_id: int) -> None:
        if self.is_locked(schedule_id):
            raise ScheduleLockedError(schedule_id)

    def _row(self, schedule_id: int, index: int) -> SplitRow:
        rows = self._load(schedule_id)
        if not 0 <= index < len(rows):
            raise SplitError(f"Split index {index} out of range (0..{len(rows) - 1})")
        return rows[index]

    def add(self, schedule_id: int) -> List[Split]:
        self._guard(schedule_id)
        rows = self._load(schedule_id)
        rows.append(SplitRow(split=add_split([])[0]))
        return self.splits(schedule_id)

    def remove(self, schedule_id: int, index: int) -> List[Split]:
        self._guard(schedule_id)
        rows = self._load(schedule_id)
        remove_split([row.split for row in rows], index)
        if rows[index].state is RowState.SAVING:
            raise SplitStateError("Cannot remove a split while it is being saved")
        del rows[index]
        return self.splits(schedule_id)

    def update(self, schedule_id: int, index: int, field, value, agent_id: Optional[int] = None) -> List[Split]:
        self._guard(schedule_id)
        rows = self._load(schedule_id)
        if self._row(schedule_id, index).state is RowState.SAVING:
            raise SplitStateError("Cannot edit a split while it is being saved")
        updated = update_split(
            [row.split for row in rows],
            index,
            field,
            value,
            self.schedule(schedule_id).commission_amount,
            agent_id=agent_id,
        )
        rows[index].split = updated[index]
        return self.splits(schedule_id)

    # ── Edit state machine ────────────────────────────────

    def begin_edit(self, schedule_id: int, index: int) -> None:
        self._guard(schedule_id)
        row = self._row(schedule_id, index)
        if row.state is RowState.EDITING:
            return
        current = self.editing_index(schedule_id)
        if current is not None:
            raise SplitStateError(f"Split {current} of schedule {schedule_id} is already being edited")
        row.backup = row.split
        row.state = RowState.EDITING

    def cancel_edit(self, schedule_id: int, index: int) -> None:
        row = self._row(schedule_id, index)
        if row.state is not RowState.EDITING:
            raise SplitStateError(f"Split {index} is not being edited")
        row.split = row.backup
        row.backup = None
        row.state = RowState.VIEWING

    async def save(self, schedule_id: int) -> Optional[List[Split]]:
        """
        Commit the row being edited.

        Returns the persisted splits, or None when the backend call failed
        (the row goes back to EDITING so the user can retry or cancel).
        """
        index = self.editing_index(schedule_id)
        if index is None:
            raise SplitStateError(f"No split of schedule {schedule_id} is being edited")
        row = self._row(schedule_id, index)
        if row.state is RowState.SAVING:
            raise SplitStateError(f"Split {index} of schedule {schedule_id} is already saving")

        row.state = RowState.SAVING
        try:
            saved = await self.commit(schedule_id)
        except Exception:
            row.state = RowState.EDITING
            raise

        if saved is None:
            row.state = RowState.EDITING
        return saved

    async def commit(self, schedule_id: int) -> Optional[List[Split]]:
        """
        Reconcile and persist a schedule's splits (replace-all).

        Blank rows are dropped and the shortfall below 100% is assigned to
        the unassigned label. Backend failures are logged and leave the
        in-memory rows untouched.
        """
        self._guard(schedule_id)
        schedule = self.schedule(schedule_id)
        kept = [s for s in self.splits(schedule_id) if not s.is_blank]
        payload = reconcile_splits(
            kept,
            schedule.commission_amount,
            unassigned_label=self.unassigned_label,
        )
        remainder_added = len(payload) > len(kept)
        if self.over_allocation_policy == "reject" and allocation_state(payload) is AllocationState.OVER:
            raise OverAllocationError(total_percent(payload))

        try:
            saved = await self.gateway.replace_splits(schedule_id, payload)
        except ApiError as exc:
            logger.exception("Failed to save splits for schedule %s", schedule_id)
            self.last_error = exc
            return None

        self.last_error = None
        self._rows[schedule_id] = [SplitRow(split=s) for s in saved]
        logger.info(
            "Saved %d splits for schedule %s (unassigned remainder: %s)",
            len(saved),
            schedule_id,
            remainder_added,
        )
        return list(saved)
