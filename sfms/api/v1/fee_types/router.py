"""Fee types router: create, list, per-class list, update, delete."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sfms.auth.dependencies import get_current_admin
from sfms.auth.rbac import MANAGERS, require_roles
from sfms.auth.schemas import CurrentAdmin
from sfms.core.exceptions import ServiceError
from sfms.db.session import get_db

from .schemas import FeeTypeCreate, FeeTypeResponse, FeeTypeUpdate
from . import service

router = APIRouter(prefix="/api/v1/fee-types", tags=["fee-types"])


@router.post(
    "",
    response_model=FeeTypeResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*MANAGERS))],
)
async def create_fee_type(
    payload: FeeTypeCreate,
    db: AsyncSession = Depends(get_db),
    current_admin: CurrentAdmin = Depends(get_current_admin),
) -> FeeTypeResponse:
    try:
        return await service.create_fee_type(db, current_admin.school_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[FeeTypeResponse])
async def list_fee_types(
    db: AsyncSession = Depends(get_db),
    current_admin: CurrentAdmin = Depends(get_current_admin),
) -> List[FeeTypeResponse]:
    return await service.list_fee_types(db, current_admin.school_id)


@router.get("/for-class/{class_id}", response_model=List[FeeTypeResponse])
async def list_fee_types_for_class(
    class_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_admin: CurrentAdmin = Depends(get_current_admin),
) -> List[FeeTypeResponse]:
    return await service.list_fee_types_for_class(db, current_admin.school_id, class_id)


@router.get("/{fee_type_id}", response_model=FeeTypeResponse)
async def get_fee_type(
    fee_type_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_admin: CurrentAdmin = Depends(get_current_admin),
) -> FeeTypeResponse:
    obj = await service.get_fee_type(db, current_admin.school_id, fee_type_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fee type not found")
    return obj


@router.put(
    "/{fee_type_id}",
    response_model=FeeTypeResponse,
    dependencies=[Depends(require_roles(*MANAGERS))],
)
async def update_fee_type(
    fee_type_id: UUID,
    payload: FeeTypeUpdate,
    db: AsyncSession = Depends(get_db),
    current_admin: CurrentAdmin = Depends(get_current_admin),
) -> FeeTypeResponse:
    try:
        obj = await service.update_fee_type(db, current_admin.school_id, fee_type_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fee type not found")
    return obj


@router.delete(
    "/{fee_type_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(*MANAGERS))],
)
async def delete_fee_type(
    fee_type_id: UUID,
    confirm_name: str = Query(..., description="Exact fee type name, to confirm deletion"),
    db: AsyncSession = Depends(get_db),
    current_admin: CurrentAdmin = Depends(get_current_admin),
) -> None:
    try:
        deleted = await service.delete_fee_type(db, current_admin.school_id, fee_type_id, confirm_name)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fee type not found")
