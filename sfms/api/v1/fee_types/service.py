"""Fee types service: CRUD with class scoping. Class links are always written together with the fee type."""

import logging
from datetime import date
from typing import Iterable, List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sfms.core.exceptions import ServiceError
from sfms.core.fees import to_decimal
from sfms.core.models import FeeType, FeeTypeClass, SchoolClass, StudentFeeType

from .schemas import FeeTypeClassInfo, FeeTypeCreate, FeeTypeResponse, FeeTypeUpdate

logger = logging.getLogger(__name__)

NAME_MISMATCH_MESSAGE = "Name did not match. Deletion aborted."


def is_currently_applicable(scheduled_date: Optional[date], today: Optional[date] = None) -> bool:
    if scheduled_date is None:
        return True
    return scheduled_date <= (today or date.today())


def _ft_to_response(ft: FeeType, today: Optional[date] = None) -> FeeTypeResponse:
    classes = sorted(
        (FeeTypeClassInfo(id=link.school_class.id, name=link.school_class.name)
         for link in ft.class_links if link.school_class is not None),
        key=lambda c: c.name,
    )
    return FeeTypeResponse(
        id=ft.id,
        school_id=ft.school_id,
        name=ft.name,
        description=ft.description,
        default_amount=to_decimal(ft.default_amount),
        scheduled_date=ft.scheduled_date,
        is_currently_applicable=is_currently_applicable(ft.scheduled_date, today),
        classes=classes,
        created_at=ft.created_at,
        updated_at=ft.updated_at,
    )


def _with_classes(stmt):
    return stmt.options(
        selectinload(FeeType.class_links).selectinload(FeeTypeClass.school_class)
    ).execution_options(populate_existing=True)


async def _validated_class_ids(
    db: AsyncSession,
    school_id: UUID,
    class_ids: Iterable[UUID],
) -> List[UUID]:
    wanted = list(dict.fromkeys(class_ids))
    if not wanted:
        return []
    found = set(
        (
            await db.execute(
                select(SchoolClass.id).where(
                    SchoolClass.school_id == school_id,
                    SchoolClass.id.in_(wanted),
                )
            )
        ).scalars().all()
    )
    if len(found) != len(wanted):
        raise ServiceError("One or more classes do not belong to this school", status.HTTP_400_BAD_REQUEST)
    return wanted


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ServiceError("Name is required", status.HTTP_400_BAD_REQUEST)
    return cleaned


async def get_fee_type(
    db: AsyncSession,
    school_id: UUID,
    fee_type_id: UUID,
) -> Optional[FeeTypeResponse]:
    ft = (
        await db.execute(
            _with_classes(select(FeeType).where(FeeType.id == fee_type_id, FeeType.school_id == school_id))
        )
    ).scalar_one_or_none()
    return _ft_to_response(ft) if ft else None


async def create_fee_type(
    db: AsyncSession,
    school_id: UUID,
    payload: FeeTypeCreate,
) -> FeeTypeResponse:
    name = _clean_name(payload.name)
    class_ids = await _validated_class_ids(db, school_id, payload.class_ids)
    try:
        ft = FeeType(
            school_id=school_id,
            name=name,
            description=(payload.description or "").strip() or None,
            default_amount=payload.default_amount,
            scheduled_date=payload.scheduled_date,
        )
        db.add(ft)
        await db.flush()
        for class_id in class_ids:
            db.add(FeeTypeClass(school_id=school_id, fee_type_id=ft.id, class_id=class_id))
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Could not create fee type", status.HTTP_409_CONFLICT)
    logger.info("Created fee type %s (%s) for school %s linked to %d classes", name, ft.id, school_id, len(class_ids))
    return await get_fee_type(db, school_id, ft.id)


async def list_fee_types(
    db: AsyncSession,
    school_id: UUID,
    today: Optional[date] = None,
) -> List[FeeTypeResponse]:
    result = await db.execute(
        _with_classes(select(FeeType).where(FeeType.school_id == school_id).order_by(FeeType.name))
    )
    return [_ft_to_response(ft, today) for ft in result.scalars().all()]


async def list_fee_types_for_class(
    db: AsyncSession,
    school_id: UUID,
    class_id: UUID,
) -> List[FeeTypeResponse]:
    """Fee types a student of this class can be assigned."""
    stmt = (
        select(FeeType)
        .join(FeeTypeClass, FeeTypeClass.fee_type_id == FeeType.id)
        .where(
            FeeType.school_id == school_id,
            FeeTypeClass.class_id == class_id,
        )
        .order_by(FeeType.name)
    )
    result = await db.execute(_with_classes(stmt))
    return [_ft_to_response(ft) for ft in result.scalars().unique().all()]


async def update_fee_type(
    db: AsyncSession,
    school_id: UUID,
    fee_type_id: UUID,
    payload: FeeTypeUpdate,
) -> Optional[FeeTypeResponse]:
    ft = (
        await db.execute(select(FeeType).where(FeeType.id == fee_type_id, FeeType.school_id == school_id))
    ).scalar_one_or_none()
    if not ft:
        return None
    name = _clean_name(payload.name)
    class_ids = await _validated_class_ids(db, school_id, payload.class_ids)
    try:
        ft.name = name
        ft.description = (payload.description or "").strip() or None
        ft.default_amount = payload.default_amount
        ft.scheduled_date = payload.scheduled_date
        # Replace links in the same transaction as the fee type update
        await db.execute(
            delete(FeeTypeClass).where(
                FeeTypeClass.fee_type_id == fee_type_id,
                FeeTypeClass.school_id == school_id,
            )
        )
        for class_id in class_ids:
            db.add(FeeTypeClass(school_id=school_id, fee_type_id=fee_type_id, class_id=class_id))
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Could not update fee type", status.HTTP_409_CONFLICT)
    logger.info("Updated fee type %s for school %s", fee_type_id, school_id)
    return await get_fee_type(db, school_id, fee_type_id)


async def delete_fee_type(
    db: AsyncSession,
    school_id: UUID,
    fee_type_id: UUID,
    confirm_name: str,
) -> bool:
    ft = (
        await db.execute(select(FeeType).where(FeeType.id == fee_type_id, FeeType.school_id == school_id))
    ).scalar_one_or_none()
    if not ft:
        return False
    if confirm_name != ft.name:
        raise ServiceError(NAME_MISMATCH_MESSAGE, status.HTTP_400_BAD_REQUEST)
    in_use = (
        await db.execute(select(StudentFeeType.id).where(StudentFeeType.fee_type_id == fee_type_id).limit(1))
    ).scalar_one_or_none()
    if in_use is not None:
        raise ServiceError("Cannot delete fee type: it is assigned to students", status.HTTP_409_CONFLICT)
    try:
        await db.execute(
            delete(FeeTypeClass).where(FeeTypeClass.fee_type_id == fee_type_id, FeeTypeClass.school_id == school_id)
        )
        await db.execute(delete(FeeType).where(FeeType.id == fee_type_id, FeeType.school_id == school_id))
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Could not delete fee type", status.HTTP_409_CONFLICT)
    logger.info("Deleted fee type %s (%s) for school %s", ft.name, fee_type_id, school_id)
    return True
