"""
Commission split allocation.

Rules:
- commission = revenue * split% (rounded to cents), talent = revenue - commission
- editing talent or commission back-derives split% from revenue
- a split row's amount follows its percent, or its percent follows its amount,
  depending on which one was edited; sibling rows are never rebalanced
- on commit, blank rows are dropped and any shortfall below 100% goes to
  an "Unassigned" row; an excess above 100% is passed through

All math is Decimal, quantized to 0.01 with ROUND_HALF_UP.
"""

import logging
from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Union

from dealdesk.exceptions import SplitError
from dealdesk.models.schedule import PaymentStatus

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")
UNASSIGNED_AGENT = "Unassigned"

Number = Union[Decimal, int, float, str, None]


def to_decimal(value: Number) -> Decimal:
    """Coerce user input to Decimal. None and blank strings are zero."""
    if value is None:
        return ZERO
    if isinstance(value, float):
        # str() keeps the shortest repr, so 0.1 stays 0.1
        value = str(value)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return ZERO
    try:
        result = value if isinstance(value, Decimal) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise SplitError(f"Not a number: {value!r}") from exc
    if not result.is_finite():
        raise SplitError(f"Not a finite number: {value!r}")
    return result


def round2(value: Number) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Number, percent: Number) -> Decimal:
    """round(amount * percent / 100, 2)"""
    return round2(to_decimal(amount) * to_decimal(percent) / HUNDRED)


def back_derive_percent(part: Number, whole: Number) -> Decimal:
    """
    round(part / whole * 100, 2), or 0 when whole is not positive.
    """
    whole = to_decimal(whole)
    if whole <= ZERO:
        return round2(ZERO)
    return round2(to_decimal(part) / whole * HUNDRED)


# ── Schedule amounts ──────────────────────────────────────


@dataclass(frozen=True)
class ScheduleAmounts:
    revenue: Decimal
    split_percent: Decimal
    talent_amount: Decimal
    commission_amount: Decimal


def derive_amounts(revenue: Number, split_percent: Number) -> ScheduleAmounts:
    """Recompute talent/commission after revenue or split% was edited.

    Percents outside 0-100 are accepted as-is; they produce a negative
    talent amount or a commission larger than revenue.
    """
    revenue = round2(revenue)
    split_percent = round2(split_percent)
    commission = percent_of(revenue, split_percent)
    return ScheduleAmounts(
        revenue=revenue,
        split_percent=split_percent,
        talent_amount=revenue - commission,
        commission_amount=commission,
    )


def amounts_from_talent(revenue: Number, talent_amount: Number) -> ScheduleAmounts:
    """Recompute commission and split% after the talent amount was edited."""
    revenue = round2(revenue)
    talent = round2(talent_amount)
    commission = revenue - talent
    return ScheduleAmounts(
        revenue=revenue,
        split_percent=back_derive_percent(commission, revenue),
        talent_amount=talent,
        commission_amount=commission,
    )


def amounts_from_commission(revenue: Number, commission_amount: Number) -> ScheduleAmounts:
    """Recompute talent and split% after the commission amount was edited."""
    revenue = round2(revenue)
    commission = round2(commission_amount)
    return ScheduleAmounts(
        revenue=revenue,
        split_percent=back_derive_percent(commission, revenue),
        talent_amount=revenue - commission,
        commission_amount=commission,
    )


def derive_payment_status(
    invoice_id: Optional[str],
    payment_status_raw: Optional[str],
) -> PaymentStatus:
    if payment_status_raw and payment_status_raw.strip().lower() == PaymentStatus.PAID.value:
        return PaymentStatus.PAID
    if invoice_id and invoice_id.strip():
        return PaymentStatus.INVOICED
    return PaymentStatus.PENDING


# ── Split rows ────────────────────────────────────────────


@dataclass(frozen=True)
class Split:
    """One (recipient, percent, amount) allocation of a schedule's commission."""

    agent_name: str = ""
    split_percent: Decimal = ZERO
    split_amount: Decimal = ZERO
    agent_id: Optional[int] = None

    @property
    def is_blank(self) -> bool:
        return not (self.agent_name or "").strip()


@dataclass(frozen=True)
class Recipient:
    agent_id: int
    name: str


class SplitField(str, Enum):
    """Editable fields of a split row (wire names)."""
    AGENT_NAME = "agentName"
    SPLIT_PERCENT = "splitPercent"
    SPLIT_AMOUNT = "splitAmount"

    @classmethod
    def _missing_(cls, value):
        # Accept snake_case too: "split_percent" -> SPLIT_PERCENT
        if isinstance(value, str):
            for member in cls:
                if member.name.lower() == value.lower():
                    return member
        return None


class AllocationState(str, Enum):
    BALANCED = "balanced"
    UNDER = "under"
    OVER = "over"


def candidate_agents(talent_clients: Iterable) -> List[Recipient]:
    """
    Agents of the deal's talent clients, de-duplicated by agent id.

    Accepts ORM TalentClient rows or any records exposing
    ``agents`` -> items with ``agent_id`` and ``agent.name``.
    """
    seen = set()
    recipients = []
    for client in talent_clients:
        for link in getattr(client, "agents", None) or []:
            agent = getattr(link, "agent", None)
            agent_id = getattr(link, "agent_id", None)
            if agent_id is None:
                agent_id = getattr(agent, "id", None)
            if agent_id is None or agent_id in seen:
                continue
            seen.add(agent_id)
            recipients.append(Recipient(agent_id=agent_id, name=getattr(agent, "name", None) or ""))
    return recipients


def initialize_splits(
    commission_amount: Number,
    agents: Sequence[Recipient],
    owner_name: Optional[str] = None,
    owner_id: Optional[int] = None,
) -> List[Split]:
    """
    Default splits for a schedule.

    N agents share 100% equally (each percent rounded to cents, so three
    agents get 33.33% each and the total drifts to 99.99%). Without
    agents the deal owner takes 100%.
    """
    commission = round2(commission_amount)
    if agents:
        percent = round2(HUNDRED / len(agents))
        amount = percent_of(commission, percent)
        return [
            Split(
                agent_name=agent.name,
                split_percent=percent,
                split_amount=amount,
                agent_id=agent.agent_id,
            )
            for agent in agents
        ]

    return [
        Split(
            agent_name=owner_name or UNASSIGNED_AGENT,
            split_percent=round2(HUNDRED),
            split_amount=commission,
            agent_id=owner_id,
        )
    ]


def _check_index(splits: Sequence[Split], index: int) -> None:
    if not 0 <= index < len(splits):
        raise SplitError(f"Split index {index} out of range (0..{len(splits) - 1})")


def update_split(
    splits: Sequence[Split],
    index: int,
    field: Union[SplitField, str],
    value,
    commission_amount: Number,
    agent_id: Optional[int] = None,
) -> List[Split]:
    """
    Return a copy of ``splits`` with one field of one row changed.

    - agentName: name only (and agent_id, cleared unless given)
    - splitPercent: amount = commission * percent / 100
    - splitAmount: percent = amount / commission * 100 (0 if commission is 0)
    """
    try:
        field = SplitField(field)
    except ValueError as exc:
        raise SplitError(f"Unknown split field: {field!r}") from exc

    rows = list(splits)
    _check_index(rows, index)
    row = rows[index]
    commission = round2(commission_amount)

    if field is SplitField.AGENT_NAME:
        row = replace(row, agent_name="" if value is None else str(value), agent_id=agent_id)
    elif field is SplitField.SPLIT_PERCENT:
        percent = round2(value)
        row = replace(row, split_percent=percent, split_amount=percent_of(commission, percent))
    else:
        amount = round2(value)
        row = replace(row, split_amount=amount, split_percent=back_derive_percent(amount, commission))

    rows[index] = row
    return rows


def add_split(splits: Sequence[Split]) -> List[Split]:
    return list(splits) + [Split()]


def remove_split(splits: Sequence[Split], index: int) -> List[Split]:
    rows = list(splits)
    if len(rows) <= 1:
        raise SplitError("Cannot remove the only split")
    _check_index(rows, index)
    del rows[index]
    return rows


def total_percent(splits: Iterable[Split]) -> Decimal:
    return sum((to_decimal(s.split_percent) for s in splits), ZERO)


def allocation_state(splits: Iterable[Split]) -> AllocationState:
    total = total_percent(splits)
    if total == HUNDRED:
        return AllocationState.BALANCED
    return AllocationState.UNDER if total < HUNDRED else AllocationState.OVER


def recompute_amounts(splits: Iterable[Split], commission_amount: Number) -> List[Split]:
    """Re-derive every row's amount from its percent."""
    commission = round2(commission_amount)
    return [
        replace(s, split_amount=percent_of(commission, s.split_percent))
        for s in splits
    ]


def reconcile_splits(
    splits: Iterable[Split],
    commission_amount: Number,
    unassigned_label: str = UNASSIGNED_AGENT,
) -> List[Split]:
    """
    Prepare splits for persistence.

    Drops rows with a blank agent name, then appends an unassigned row
    for whatever is left below 100%. Totals above 100% are returned
    unchanged; callers decide whether to accept them.
    """
    commission = round2(commission_amount)
    rows = [s for s in splits if not s.is_blank]
    total = total_percent(rows)

    if total < HUNDRED:
        remainder = round2(HUNDRED - total)
        rows.append(
            Split(
                agent_name=unassigned_label,
                split_percent=remainder,
                split_amount=percent_of(commission, remainder),
                agent_id=None,
            )
        )
    elif total > HUNDRED:
        logger.warning("Splits over-allocated: total %s%% exceeds 100%%", total)

    return rows
