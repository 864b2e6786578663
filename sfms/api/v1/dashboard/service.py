"""Dashboard figures. Uses the students.total_fees snapshot, not the per-line recomputation of the ledger."""

from typing import List
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sfms.core.enums import StudentStatus
from sfms.core.fees import classify_status, to_decimal
from sfms.core.models import Payment, SchoolClass, Student

from .schemas import DashboardStats, StudentFeeDetail


async def get_stats(db: AsyncSession, school_id: UUID) -> DashboardStats:
    student_count = (
        await db.execute(
            select(func.count(Student.id)).where(
                Student.school_id == school_id,
                Student.status == StudentStatus.active.value,
                Student.is_passed_out.is_(False),
            )
        )
    ).scalar() or 0
    total_assigned = to_decimal(
        (
            await db.execute(
                select(func.coalesce(func.sum(Student.total_fees), 0)).where(Student.school_id == school_id)
            )
        ).scalar()
    )
    total_collected = to_decimal(
        (
            await db.execute(
                select(func.coalesce(func.sum(Payment.amount_paid), 0)).where(Payment.school_id == school_id)
            )
        ).scalar()
    )
    return DashboardStats(
        student_count=student_count,
        total_assigned_fees=total_assigned,
        total_collected_fees=total_collected,
        total_outstanding_fees=total_assigned - total_collected,
    )


async def list_student_fee_details(db: AsyncSession, school_id: UUID) -> List[StudentFeeDetail]:
    paid_subq = (
        select(
            Payment.student_id,
            func.coalesce(func.sum(Payment.amount_paid), 0).label("total_paid"),
        )
        .where(Payment.school_id == school_id)
        .group_by(Payment.student_id)
    ).subquery()

    stmt = (
        select(
            Student,
            SchoolClass.name.label("class_name"),
            func.coalesce(paid_subq.c.total_paid, 0).label("paid"),
        )
        .outerjoin(SchoolClass, Student.class_id == SchoolClass.id)
        .outerjoin(paid_subq, paid_subq.c.student_id == Student.id)
        .where(Student.school_id == school_id)
        .order_by(Student.name)
    )
    rows = (await db.execute(stmt)).all()
    out = []
    for s, class_name, paid_val in rows:
        total_fees = to_decimal(s.total_fees)
        paid = to_decimal(paid_val)
        out.append(
            StudentFeeDetail(
                id=s.id,
                name=s.name,
                roll_no=s.roll_no,
                class_name=class_name or "N/A",
                total_fees=total_fees,
                paid=paid,
                outstanding=total_fees - paid,
                status=classify_status(total_fees, paid),
            )
        )
    return out
