"""Master ledger router: JSON ledger and CSV/Excel export."""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from sfms.auth.dependencies import get_current_admin
from sfms.auth.schemas import CurrentAdmin
from sfms.core.enums import ExportFormat, FeeView
from sfms.db.session import get_db

from .export import MEDIA_TYPES, build_export, export_filename
from .schemas import LedgerResponse
from . import service

router = APIRouter(prefix="/api/v1/ledger", tags=["ledger"])


@router.get("", response_model=LedgerResponse)
async def get_ledger(
    view: FeeView = Query(FeeView.total, description="total: all assigned fees; due: fees whose date has arrived"),
    class_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None, description="Name, roll number or class name"),
    as_of: Optional[date] = Query(None, description="Reference date for due fees; defaults to today"),
    db: AsyncSession = Depends(get_db),
    current_admin: CurrentAdmin = Depends(get_current_admin),
) -> LedgerResponse:
    return await service.get_ledger(
        db,
        current_admin.school_id,
        view=view,
        class_id=class_id,
        search=search,
        reference_date=as_of,
    )


@router.get("/export")
async def export_ledger(
    view: FeeView = Query(FeeView.total),
    class_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None),
    as_of: Optional[date] = Query(None),
    format: ExportFormat = Query(ExportFormat.csv),
    db: AsyncSession = Depends(get_db),
    current_admin: CurrentAdmin = Depends(get_current_admin),
) -> Response:
    """Download the ledger as CSV (default) or Excel."""
    ledger = await service.get_ledger(
        db,
        current_admin.school_id,
        view=view,
        class_id=class_id,
        search=search,
        reference_date=as_of,
    )
    if not ledger.entries:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No data to export.")
    return Response(
        content=build_export(ledger, format),
        media_type=MEDIA_TYPES[format],
        headers={"Content-Disposition": f"attachment; filename={export_filename(ledger, format)}"},
    )
