import logging
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sfms.core.exceptions import ServiceError
from sfms.core.models import SchoolClass

from .schemas import ClassCreate, ClassResponse

logger = logging.getLogger(__name__)


def _class_to_response(c: SchoolClass) -> ClassResponse:
    return ClassResponse(
        id=c.id,
        school_id=c.school_id,
        name=c.name,
        created_at=c.created_at,
    )


async def create_class(
    db: AsyncSession,
    school_id: UUID,
    payload: ClassCreate,
) -> ClassResponse:
    name = payload.name.strip()
    if not name:
        raise ServiceError("Class name is required", status.HTTP_400_BAD_REQUEST)
    existing = (
        await db.execute(
            select(SchoolClass.id).where(SchoolClass.school_id == school_id, SchoolClass.name == name)
        )
    ).scalar_one_or_none()
    if existing:
        raise ServiceError("Class name already exists for this school", status.HTTP_409_CONFLICT)
    try:
        obj = SchoolClass(school_id=school_id, name=name)
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Class name already exists for this school", status.HTTP_409_CONFLICT)
    logger.info("Created class %s (%s) for school %s", obj.name, obj.id, school_id)
    return _class_to_response(obj)


async def list_classes(db: AsyncSession, school_id: UUID) -> List[ClassResponse]:
    result = await db.execute(
        select(SchoolClass).where(SchoolClass.school_id == school_id).order_by(SchoolClass.name)
    )
    return [_class_to_response(c) for c in result.scalars().all()]


async def get_class_for_school(
    db: AsyncSession,
    school_id: UUID,
    class_id: UUID,
) -> Optional[SchoolClass]:
    result = await db.execute(
        select(SchoolClass).where(
            SchoolClass.id == class_id,
            SchoolClass.school_id == school_id,
        )
    )
    return result.scalar_one_or_none()
