"""
Fee calculation: per-line net payable, assigned/due totals, total paid and
payment status. Pure functions over already-fetched rows; every report
recomputes status from these sums instead of storing it.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from sfms.core.enums import FeeStatus, FeeView

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
# Totals at or below this are treated as "nothing to pay".
FEE_EPSILON = Decimal("0.01")


def to_decimal(val: Any) -> Decimal:
    if val is None:
        return ZERO
    return val if isinstance(val, Decimal) else Decimal(str(val))


def _as_date(val: Any) -> Optional[date]:
    if val is None:
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    return date.fromisoformat(str(val)[:10])


class FeeAssignmentInput(BaseModel):
    """One fee type linked to a student, as read from student_fee_types + fee_types."""

    fee_type_id: Optional[UUID] = None
    name: str = "Unknown Fee Type"
    assigned_amount: Optional[Decimal] = None
    default_amount: Optional[Decimal] = None
    discount: Optional[Decimal] = None
    discount_description: Optional[str] = None
    scheduled_date: Optional[date] = None


class FeeLine(BaseModel):
    fee_type_id: Optional[UUID] = None
    name: str
    assigned_amount: Decimal
    discount: Decimal
    discount_description: Optional[str] = None
    net_payable: Decimal
    scheduled_date: Optional[date] = None
    is_due: bool
    over_discounted: bool = False


class FeeResolution(BaseModel):
    lines: List[FeeLine] = Field(default_factory=list)
    total_assigned: Decimal = ZERO
    total_due: Decimal = ZERO


class FeeSummary(BaseModel):
    resolution: FeeResolution
    view: FeeView
    total_paid: Decimal
    fee_total: Decimal
    balance: Decimal
    status: FeeStatus


def resolve_fee_assignments(
    assignments: Iterable[FeeAssignmentInput],
    reference_date: Optional[date] = None,
) -> FeeResolution:
    """
    Net payable per assignment (assigned - discount) plus two totals:
    total_assigned over every line, total_due over lines whose scheduled
    date is unset or on/before reference_date (calendar date, default today).

    Assigned amount falls back to the fee type default, then 0. The discount
    is not clamped: a discount above the assigned amount gives a negative
    line, flagged over_discounted, that still counts towards the totals.
    """
    today = _as_date(reference_date) or date.today()
    lines: List[FeeLine] = []
    total_assigned = ZERO
    total_due = ZERO
    for a in assignments:
        if a.assigned_amount is not None:
            assigned = to_decimal(a.assigned_amount)
        else:
            assigned = to_decimal(a.default_amount)
        discount = to_decimal(a.discount)
        net = assigned - discount
        scheduled = _as_date(a.scheduled_date)
        is_due = scheduled is None or scheduled <= today
        over = discount > assigned
        if over:
            # Warned once when the assignment is written
            logger.debug(
                "Discount %s exceeds assigned amount %s for fee type %s (%s)",
                discount, assigned, a.fee_type_id, a.name,
            )
        total_assigned += net
        if is_due:
            total_due += net
        lines.append(
            FeeLine(
                fee_type_id=a.fee_type_id,
                name=a.name,
                assigned_amount=assigned,
                discount=discount,
                discount_description=a.discount_description,
                net_payable=net,
                scheduled_date=scheduled,
                is_due=is_due,
                over_discounted=over,
            )
        )
    return FeeResolution(lines=lines, total_assigned=total_assigned, total_due=total_due)


def _payment_amount(p: Any) -> Decimal:
    if isinstance(p, (int, float, Decimal)):
        return to_decimal(p)
    if isinstance(p, dict):
        return to_decimal(p.get("amount_paid", p.get("amount")))
    val = getattr(p, "amount_paid", None)
    if val is None:
        val = getattr(p, "amount", None)
    return to_decimal(val)


def aggregate_payments(payments: Iterable[Any]) -> Decimal:
    """Sum of payment amounts (objects, mappings or plain numbers). Empty -> 0."""
    return sum((_payment_amount(p) for p in payments), ZERO)


def classify_status(fee_total: Optional[Decimal], total_paid: Optional[Decimal]) -> FeeStatus:
    fee_total = to_decimal(fee_total)
    total_paid = to_decimal(total_paid)
    if fee_total <= FEE_EPSILON:
        return FeeStatus.paid if total_paid > 0 else FeeStatus.no_fees_due
    if total_paid >= fee_total:
        return FeeStatus.paid
    if total_paid > 0:
        return FeeStatus.partially_paid
    return FeeStatus.unpaid


def select_fee_total(resolution: FeeResolution, view: FeeView) -> Decimal:
    if view == FeeView.due:
        return resolution.total_due
    return resolution.total_assigned


def summarize_student(
    assignments: Iterable[FeeAssignmentInput],
    payments: Iterable[Any],
    view: FeeView = FeeView.total,
    reference_date: Optional[date] = None,
) -> FeeSummary:
    resolution = resolve_fee_assignments(assignments, reference_date)
    total_paid = aggregate_payments(payments)
    fee_total = select_fee_total(resolution, view)
    return FeeSummary(
        resolution=resolution,
        view=view,
        total_paid=total_paid,
        fee_total=fee_total,
        balance=fee_total - total_paid,
        status=classify_status(fee_total, total_paid),
    )


STATUS_LABELS = {
    FeeStatus.paid: "Paid",
    FeeStatus.partially_paid: "Partially Paid",
    FeeStatus.unpaid: "Unpaid",
    FeeStatus.no_fees_due: "No Fees Due",
}


def status_label(status: FeeStatus) -> str:
    return STATUS_LABELS[FeeStatus(status)]
