"""Payments service: record a payment against a student and read payment history."""

import logging
import time
from datetime import datetime, timezone
from typing import List
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sfms.core.exceptions import ServiceError
from sfms.core.fees import to_decimal
from sfms.core.models import Payment, Student

from .schemas import PaymentCreate, PaymentResponse, RecentPaymentResponse

logger = logging.getLogger(__name__)


def generate_receipt_number() -> str:
    return f"R-{int(time.time() * 1000)}"


def payment_to_response(p: Payment) -> PaymentResponse:
    return PaymentResponse(
        id=p.id,
        school_id=p.school_id,
        student_id=p.student_id,
        amount_paid=to_decimal(p.amount_paid),
        date=p.date,
        mode_of_payment=p.mode_of_payment,
        receipt_number=p.receipt_number,
        description=p.description,
        created_at=p.created_at,
    )


async def record_payment(
    db: AsyncSession,
    school_id: UUID,
    payload: PaymentCreate,
    recorded_by: str,
) -> PaymentResponse:
    student = (
        await db.execute(
            select(Student).where(Student.id == payload.student_id, Student.school_id == school_id)
        )
    ).scalar_one_or_none()
    if not student:
        raise ServiceError("Student not found", status.HTTP_404_NOT_FOUND)

    receipt_number = (payload.receipt_number or "").strip() or generate_receipt_number()
    paid_at = payload.date or datetime.now(timezone.utc)
    try:
        p = Payment(
            school_id=school_id,
            student_id=student.id,
            amount_paid=payload.amount_paid,
            date=paid_at,
            mode_of_payment=payload.mode_of_payment.value,
            receipt_number=receipt_number,
            description=(payload.description or "").strip() or None,
        )
        db.add(p)
        await db.commit()
        await db.refresh(p)
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Failed to record payment", status.HTTP_409_CONFLICT)
    logger.info(
        "Recorded payment %s of %s (%s) for student %s by %s",
        receipt_number, payload.amount_paid, p.mode_of_payment, student.id, recorded_by,
    )
    return payment_to_response(p)


async def list_student_payments(
    db: AsyncSession,
    school_id: UUID,
    student_id: UUID,
) -> List[PaymentResponse]:
    student = (
        await db.execute(select(Student.id).where(Student.id == student_id, Student.school_id == school_id))
    ).scalar_one_or_none()
    if not student:
        raise ServiceError("Student not found", status.HTTP_404_NOT_FOUND)
    result = await db.execute(
        select(Payment)
        .where(Payment.student_id == student_id, Payment.school_id == school_id)
        .order_by(Payment.date.desc())
    )
    return [payment_to_response(p) for p in result.scalars().all()]


async def list_recent_payments(
    db: AsyncSession,
    school_id: UUID,
    limit: int = 50,
) -> List[RecentPaymentResponse]:
    result = await db.execute(
        select(Payment, Student.name, Student.roll_no)
        .join(Student, Payment.student_id == Student.id)
        .where(Payment.school_id == school_id)
        .order_by(Payment.date.desc())
        .limit(limit)
    )
    out = []
    for p, student_name, roll_no in result.all():
        out.append(
            RecentPaymentResponse(
                **payment_to_response(p).model_dump(),
                student_name=student_name,
                roll_no=roll_no,
            )
        )
    return out
