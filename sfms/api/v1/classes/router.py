from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from sfms.auth.dependencies import get_current_admin
from sfms.auth.rbac import MANAGERS, require_roles
from sfms.auth.schemas import CurrentAdmin
from sfms.core.exceptions import ServiceError
from sfms.db.session import get_db

from .schemas import ClassCreate, ClassResponse
from . import service

router = APIRouter(prefix="/api/v1/classes", tags=["classes"])


@router.post(
    "",
    response_model=ClassResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*MANAGERS))],
)
async def create_class(
    payload: ClassCreate,
    db: AsyncSession = Depends(get_db),
    current_admin: CurrentAdmin = Depends(get_current_admin),
) -> ClassResponse:
    try:
        return await service.create_class(db, current_admin.school_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[ClassResponse])
async def list_classes(
    db: AsyncSession = Depends(get_db),
    current_admin: CurrentAdmin = Depends(get_current_admin),
) -> List[ClassResponse]:
    return await service.list_classes(db, current_admin.school_id)
