from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sfms.auth.dependencies import get_current_admin
from sfms.auth.schemas import CurrentAdmin
from sfms.db.session import get_db

from .schemas import DashboardStats, StudentFeeDetail
from . import service

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def get_stats(
    db: AsyncSession = Depends(get_db),
    current_admin: CurrentAdmin = Depends(get_current_admin),
) -> DashboardStats:
    return await service.get_stats(db, current_admin.school_id)


@router.get("/students", response_model=List[StudentFeeDetail])
async def list_student_fee_details(
    db: AsyncSession = Depends(get_db),
    current_admin: CurrentAdmin = Depends(get_current_admin),
) -> List[StudentFeeDetail]:
    return await service.list_student_fee_details(db, current_admin.school_id)
