"""
Master ledger: per-student fee lines, assigned/due totals, payments and status,
recomputed from student_fee_types and payments on every read.
"""

from datetime import date
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sfms.api.v1.students.service import assignment_inputs, student_load_options
from sfms.core.enums import FeeStatus, FeeView
from sfms.core.fees import ZERO, classify_status, summarize_student, to_decimal
from sfms.core.models import Student

from .schemas import LastPayment, LedgerClassSummary, LedgerEntry, LedgerResponse


def _matches(entry: LedgerEntry, term: str) -> bool:
    term = term.lower()
    return (
        term in entry.name.lower()
        or (entry.roll_no is not None and term in entry.roll_no.lower())
        or term in entry.class_name.lower()
    )


def _last_payment(payments) -> Optional[LastPayment]:
    if not payments:
        return None
    latest = max(payments, key=lambda p: p.date)
    return LastPayment(
        date=latest.date,
        amount_paid=to_decimal(latest.amount_paid),
        mode_of_payment=latest.mode_of_payment,
        receipt_number=latest.receipt_number,
    )


def summarize_classes(entries: List[LedgerEntry]) -> List[LedgerClassSummary]:
    """Group ledger entries by class, ordered by class name."""
    groups: Dict[UUID, List[LedgerEntry]] = {}
    for e in entries:
        groups.setdefault(e.class_id, []).append(e)

    out = []
    for class_id, group in groups.items():
        counts = {status: 0 for status in FeeStatus}
        for e in group:
            counts[classify_status(e.fee_total, e.total_paid)] += 1
        fee_total = sum((e.fee_total for e in group), ZERO)
        total_paid = sum((e.total_paid for e in group), ZERO)
        out.append(
            LedgerClassSummary(
                class_id=class_id,
                class_name=group[0].class_name,
                student_count=len(group),
                fee_total=fee_total,
                total_paid=total_paid,
                balance=fee_total - total_paid,
                unpaid=counts[FeeStatus.unpaid],
                partially_paid=counts[FeeStatus.partially_paid],
                paid=counts[FeeStatus.paid],
                no_fees_due=counts[FeeStatus.no_fees_due],
            )
        )
    return sorted(out, key=lambda c: c.class_name)


async def get_ledger(
    db: AsyncSession,
    school_id: UUID,
    view: FeeView = FeeView.total,
    class_id: Optional[UUID] = None,
    search: Optional[str] = None,
    reference_date: Optional[date] = None,
) -> LedgerResponse:
    as_of = reference_date or date.today()
    stmt = (
        select(Student)
        .options(*student_load_options(), selectinload(Student.payments))
        .where(Student.school_id == school_id)
        .execution_options(populate_existing=True)
    )
    if class_id is not None:
        stmt = stmt.where(Student.class_id == class_id)
    stmt = stmt.order_by(Student.name)
    students = (await db.execute(stmt)).scalars().all()

    entries = []
    for s in students:
        summary = summarize_student(assignment_inputs(s.fee_links), s.payments, view, as_of)
        entries.append(
            LedgerEntry(
                student_id=s.id,
                name=s.name,
                roll_no=s.roll_no,
                class_id=s.class_id,
                class_name=s.school_class.name if s.school_class else "N/A",
                academic_year=s.academic_year,
                fee_lines=summary.resolution.lines,
                total_assigned=summary.resolution.total_assigned,
                total_due=summary.resolution.total_due,
                total_paid=summary.total_paid,
                fee_total=summary.fee_total,
                balance=summary.balance,
                status=summary.status,
                last_payment=_last_payment(s.payments),
            )
        )

    term = (search or "").strip()
    if term:
        entries = [e for e in entries if _matches(e, term)]

    return LedgerResponse(
        view=view,
        as_of=as_of,
        class_id=class_id,
        entries=entries,
        classes=summarize_classes(entries),
        total_fees=sum((e.fee_total for e in entries), ZERO),
        total_paid=sum((e.total_paid for e in entries), ZERO),
        total_balance=sum((e.balance for e in entries), ZERO),
    )
