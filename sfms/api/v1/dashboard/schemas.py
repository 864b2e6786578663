from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from sfms.core.enums import FeeStatus


class DashboardStats(BaseModel):
    student_count: int
    total_assigned_fees: Decimal
    total_collected_fees: Decimal
    total_outstanding_fees: Decimal


class StudentFeeDetail(BaseModel):
    """Per-student row based on the total_fees snapshot."""

    id: UUID
    name: str
    roll_no: Optional[str] = None
    class_name: Optional[str] = None
    total_fees: Decimal
    paid: Decimal
    outstanding: Decimal
    status: FeeStatus
