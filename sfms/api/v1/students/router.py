"""Students router: register, list, detail, edit, delete."""

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sfms.auth.dependencies import get_current_admin
from sfms.auth.rbac import MANAGERS, require_roles
from sfms.auth.schemas import CurrentAdmin
from sfms.core.enums import FeeView
from sfms.core.exceptions import ServiceError
from sfms.db.session import get_db

from .schemas import StudentCreate, StudentDetailResponse, StudentResponse, StudentUpdate
from . import service

router = APIRouter(prefix="/api/v1/students", tags=["students"])


@router.post(
    "",
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*MANAGERS))],
)
async def register_student(
    payload: StudentCreate,
    db: AsyncSession = Depends(get_db),
    current_admin: CurrentAdmin = Depends(get_current_admin),
) -> StudentResponse:
    try:
        return await service.register_student(db, current_admin.school_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[StudentResponse])
async def list_students(
    class_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None, description="Name or roll number, case-insensitive"),
    db: AsyncSession = Depends(get_db),
    current_admin: CurrentAdmin = Depends(get_current_admin),
) -> List[StudentResponse]:
    return await service.list_students(db, current_admin.school_id, class_id=class_id, search=search)


@router.get("/{student_id}", response_model=StudentDetailResponse)
async def get_student(
    student_id: UUID,
    view: FeeView = Query(FeeView.total),
    as_of: Optional[date] = Query(None, description="Reference date for due fees; defaults to today"),
    db: AsyncSession = Depends(get_db),
    current_admin: CurrentAdmin = Depends(get_current_admin),
) -> StudentDetailResponse:
    obj = await service.get_student_detail(db, current_admin.school_id, student_id, view, as_of)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return obj


@router.put(
    "/{student_id}",
    response_model=StudentResponse,
    dependencies=[Depends(require_roles(*MANAGERS))],
)
async def update_student(
    student_id: UUID,
    payload: StudentUpdate,
    db: AsyncSession = Depends(get_db),
    current_admin: CurrentAdmin = Depends(get_current_admin),
) -> StudentResponse:
    try:
        obj = await service.update_student(db, current_admin.school_id, student_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return obj


@router.delete(
    "/{student_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(*MANAGERS))],
)
async def delete_student(
    student_id: UUID,
    confirm_name: str = Query(..., description="Exact student name, to confirm deletion"),
    db: AsyncSession = Depends(get_db),
    current_admin: CurrentAdmin = Depends(get_current_admin),
) -> None:
    try:
        deleted = await service.delete_student(db, current_admin.school_id, student_id, confirm_name)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
