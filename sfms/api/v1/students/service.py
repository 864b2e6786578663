"""
Students service: registration, edit, listing and deletion.

A student and its fee-type assignments are always written in a single
transaction; on edit the assignments are replaced wholesale.
"""

import logging
from datetime import date
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sfms.api.v1.classes.service import get_class_for_school
from sfms.api.v1.payments.service import payment_to_response
from sfms.core.enums import FeeView
from sfms.core.exceptions import ServiceError
from sfms.core.fees import (
    FeeAssignmentInput,
    resolve_fee_assignments,
    summarize_student,
    to_decimal,
)
from sfms.core.models import FeeType, FeeTypeClass, Payment, Student, StudentFeeType

from .schemas import (
    StudentCreate,
    StudentDetailResponse,
    StudentFeeSelection,
    StudentFeeSummaryResponse,
    StudentResponse,
    StudentUpdate,
)

logger = logging.getLogger(__name__)

NAME_MISMATCH_MESSAGE = "Student name does not match. Deletion aborted."


def assignment_inputs(links: List[StudentFeeType]) -> List[FeeAssignmentInput]:
    """Core input rows for a student's loaded fee links (fee_type eagerly loaded)."""
    out = []
    for link in links:
        ft = link.fee_type
        out.append(
            FeeAssignmentInput(
                fee_type_id=link.fee_type_id,
                name=ft.name if ft else "Unknown Fee Type",
                assigned_amount=link.assigned_amount,
                default_amount=ft.default_amount if ft else None,
                discount=link.discount,
                discount_description=link.discount_description,
                scheduled_date=ft.scheduled_date if ft else None,
            )
        )
    return out


def student_load_options():
    return (
        selectinload(Student.school_class),
        selectinload(Student.fee_links).selectinload(StudentFeeType.fee_type),
    )


def _student_to_response(s: Student, reference_date: Optional[date] = None) -> StudentResponse:
    resolution = resolve_fee_assignments(assignment_inputs(s.fee_links), reference_date)
    return StudentResponse(
        id=s.id,
        school_id=s.school_id,
        class_id=s.class_id,
        class_name=s.school_class.name if s.school_class else None,
        name=s.name,
        roll_no=s.roll_no,
        academic_year=s.academic_year,
        status=s.status,
        is_passed_out=bool(s.is_passed_out),
        total_fees=to_decimal(s.total_fees),
        fee_lines=resolution.lines,
        created_at=s.created_at,
        updated_at=s.updated_at,
    )


async def _load_student(
    db: AsyncSession,
    school_id: UUID,
    student_id: UUID,
) -> Optional[Student]:
    result = await db.execute(
        select(Student)
        .options(*student_load_options())
        .where(Student.id == student_id, Student.school_id == school_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _validated_fee_types(
    db: AsyncSession,
    school_id: UUID,
    class_id: UUID,
    selections: List[StudentFeeSelection],
) -> Dict[UUID, FeeType]:
    """Selected fee types, checked to be unique and linked to the student's class."""
    ids = [s.fee_type_id for s in selections]
    if len(ids) != len(set(ids)):
        raise ServiceError("A fee type can only be assigned once", status.HTTP_400_BAD_REQUEST)
    if not ids:
        return {}
    rows = (
        await db.execute(
            select(FeeType)
            .join(FeeTypeClass, FeeTypeClass.fee_type_id == FeeType.id)
            .where(
                FeeType.school_id == school_id,
                FeeType.id.in_(ids),
                FeeTypeClass.class_id == class_id,
            )
        )
    ).scalars().unique().all()
    by_id = {ft.id: ft for ft in rows}
    if len(by_id) != len(ids):
        raise ServiceError(
            "Invalid fee type selection (not applicable to this class)",
            status.HTTP_400_BAD_REQUEST,
        )
    return by_id


def _snapshot_total(selections: List[StudentFeeSelection], fee_types: Dict[UUID, FeeType]):
    inputs = [
        FeeAssignmentInput(
            fee_type_id=sel.fee_type_id,
            name=fee_types[sel.fee_type_id].name,
            assigned_amount=sel.assigned_amount,
            default_amount=fee_types[sel.fee_type_id].default_amount,
            discount=sel.discount,
            scheduled_date=fee_types[sel.fee_type_id].scheduled_date,
        )
        for sel in selections
    ]
    return resolve_fee_assignments(inputs).total_assigned


def _fee_links(
    school_id: UUID,
    student_id: UUID,
    selections: List[StudentFeeSelection],
    fee_types: Dict[UUID, FeeType],
) -> List[StudentFeeType]:
    links = []
    for sel in selections:
        # Store the amount actually charged so later default changes do not move it
        if sel.assigned_amount is not None:
            assigned = sel.assigned_amount
        else:
            assigned = to_decimal(fee_types[sel.fee_type_id].default_amount)
        if sel.discount > assigned:
            logger.warning(
                "Discount %s exceeds assigned amount %s for fee type %s (%s) of student %s",
                sel.discount, assigned, sel.fee_type_id, fee_types[sel.fee_type_id].name, student_id,
            )
        links.append(
            StudentFeeType(
                school_id=school_id,
                student_id=student_id,
                fee_type_id=sel.fee_type_id,
                assigned_amount=assigned,
                discount=sel.discount,
                discount_description=(sel.discount_description or "").strip() or None,
            )
        )
    return links


def _required(value: str, label: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ServiceError(f"{label} is required", status.HTTP_400_BAD_REQUEST)
    return cleaned


async def register_student(
    db: AsyncSession,
    school_id: UUID,
    payload: StudentCreate,
) -> StudentResponse:
    name = _required(payload.name, "Name")
    roll_no = _required(payload.roll_no, "Roll No")
    academic_year = _required(payload.academic_year, "Academic Year")
    if not await get_class_for_school(db, school_id, payload.class_id):
        raise ServiceError("Invalid class", status.HTTP_400_BAD_REQUEST)
    fee_types = await _validated_fee_types(db, school_id, payload.class_id, payload.fee_types)

    try:
        student = Student(
            school_id=school_id,
            class_id=payload.class_id,
            name=name,
            roll_no=roll_no,
            academic_year=academic_year,
            total_fees=_snapshot_total(payload.fee_types, fee_types),
        )
        db.add(student)
        await db.flush()
        db.add_all(_fee_links(school_id, student.id, payload.fee_types, fee_types))
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Could not register student", status.HTTP_409_CONFLICT)
    logger.info(
        "Registered student %s (%s) in class %s with %d fee types, total_fees=%s",
        name, student.id, payload.class_id, len(fee_types), student.total_fees,
    )
    return _student_to_response(await _load_student(db, school_id, student.id))


async def update_student(
    db: AsyncSession,
    school_id: UUID,
    student_id: UUID,
    payload: StudentUpdate,
) -> Optional[StudentResponse]:
    student = (
        await db.execute(select(Student).where(Student.id == student_id, Student.school_id == school_id))
    ).scalar_one_or_none()
    if not student:
        return None
    name = _required(payload.name, "Name")
    roll_no = _required(payload.roll_no, "Roll No")
    academic_year = _required(payload.academic_year, "Academic Year")
    if not await get_class_for_school(db, school_id, payload.class_id):
        raise ServiceError("Invalid class", status.HTTP_400_BAD_REQUEST)
    fee_types = await _validated_fee_types(db, school_id, payload.class_id, payload.fee_types)

    try:
        student.name = name
        student.roll_no = roll_no
        student.class_id = payload.class_id
        student.academic_year = academic_year
        student.total_fees = _snapshot_total(payload.fee_types, fee_types)
        if payload.status is not None:
            student.status = payload.status.value
        if payload.is_passed_out is not None:
            student.is_passed_out = payload.is_passed_out
        await db.execute(
            delete(StudentFeeType).where(
                StudentFeeType.student_id == student_id,
                StudentFeeType.school_id == school_id,
            )
        )
        db.add_all(_fee_links(school_id, student_id, payload.fee_types, fee_types))
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Could not update student", status.HTTP_409_CONFLICT)
    logger.info("Updated student %s; fee assignments replaced (%d)", student_id, len(fee_types))
    return _student_to_response(await _load_student(db, school_id, student_id))


async def list_students(
    db: AsyncSession,
    school_id: UUID,
    class_id: Optional[UUID] = None,
    search: Optional[str] = None,
) -> List[StudentResponse]:
    stmt = (
        select(Student)
        .options(*student_load_options())
        .where(Student.school_id == school_id)
        .execution_options(populate_existing=True)
    )
    if class_id is not None:
        stmt = stmt.where(Student.class_id == class_id)
    term = (search or "").strip()
    if term:
        pattern = f"%{term}%"
        stmt = stmt.where(or_(Student.name.ilike(pattern), Student.roll_no.ilike(pattern)))
    stmt = stmt.order_by(Student.name)
    result = await db.execute(stmt)
    return [_student_to_response(s) for s in result.scalars().all()]


async def get_student_detail(
    db: AsyncSession,
    school_id: UUID,
    student_id: UUID,
    view: FeeView = FeeView.total,
    reference_date: Optional[date] = None,
) -> Optional[StudentDetailResponse]:
    student = await _load_student(db, school_id, student_id)
    if not student:
        return None
    payments = (
        await db.execute(
            select(Payment).where(Payment.student_id == student_id).order_by(Payment.date.desc())
        )
    ).scalars().all()
    summary = summarize_student(assignment_inputs(student.fee_links), payments, view, reference_date)
    base = _student_to_response(student, reference_date)
    return StudentDetailResponse(
        **base.model_dump(),
        payments=[payment_to_response(p) for p in payments],
        summary=StudentFeeSummaryResponse(
            view=summary.view,
            total_assigned=summary.resolution.total_assigned,
            total_due=summary.resolution.total_due,
            total_paid=summary.total_paid,
            fee_total=summary.fee_total,
            balance=summary.balance,
            status=summary.status,
        ),
    )


async def delete_student(
    db: AsyncSession,
    school_id: UUID,
    student_id: UUID,
    confirm_name: str,
) -> bool:
    student = (
        await db.execute(select(Student).where(Student.id == student_id, Student.school_id == school_id))
    ).scalar_one_or_none()
    if not student:
        return False
    if confirm_name != student.name:
        raise ServiceError(NAME_MISMATCH_MESSAGE, status.HTTP_400_BAD_REQUEST)
    has_payments = (
        await db.execute(select(Payment.id).where(Payment.student_id == student_id).limit(1))
    ).scalar_one_or_none()
    if has_payments is not None:
        raise ServiceError("Cannot delete student: payments have been recorded", status.HTTP_409_CONFLICT)
    name = student.name
    try:
        await db.execute(
            delete(StudentFeeType).where(StudentFeeType.student_id == student_id, StudentFeeType.school_id == school_id)
        )
        await db.execute(delete(Student).where(Student.id == student_id, Student.school_id == school_id))
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Could not delete student", status.HTTP_409_CONFLICT)
    logger.info("Deleted student %s (%s)", name, student_id)
    return True
