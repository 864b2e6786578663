from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sfms.auth.dependencies import get_current_admin
from sfms.auth.schemas import CurrentAdmin
from sfms.core.exceptions import ServiceError
from sfms.db.session import get_db

from .schemas import PaymentCreate, PaymentResponse, RecentPaymentResponse
from . import service

router = APIRouter(prefix="/api/v1/payments", tags=["payments"])


@router.post(
    "",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_payment(
    payload: PaymentCreate,
    db: AsyncSession = Depends(get_db),
    current_admin: CurrentAdmin = Depends(get_current_admin),
) -> PaymentResponse:
    try:
        return await service.record_payment(
            db, current_admin.school_id, payload, recorded_by=current_admin.user_id
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[RecentPaymentResponse])
async def list_recent_payments(
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    current_admin: CurrentAdmin = Depends(get_current_admin),
) -> List[RecentPaymentResponse]:
    return await service.list_recent_payments(db, current_admin.school_id, limit=limit)


@router.get("/student/{student_id}", response_model=List[PaymentResponse])
async def list_student_payments(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_admin: CurrentAdmin = Depends(get_current_admin),
) -> List[PaymentResponse]:
    try:
        return await service.list_student_payments(db, current_admin.school_id, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
