"""Student schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from sfms.api.v1.payments.schemas import PaymentResponse
from sfms.core.enums import FeeStatus, FeeView, StudentStatus
from sfms.core.fees import FeeLine


class StudentFeeSelection(BaseModel):
    fee_type_id: UUID
    assigned_amount: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2, description="Defaults to the fee type default amount")
    discount: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    discount_description: Optional[str] = None


class StudentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    roll_no: str = Field(..., min_length=1, max_length=50)
    class_id: UUID
    academic_year: str = Field(..., min_length=1, max_length=20)
    fee_types: List[StudentFeeSelection] = Field(default_factory=list)


class StudentUpdate(StudentCreate):
    """Full replacement; fee_types replaces every existing assignment."""

    status: Optional[StudentStatus] = None
    is_passed_out: Optional[bool] = None


class StudentResponse(BaseModel):
    id: UUID
    school_id: UUID
    class_id: UUID
    class_name: Optional[str] = None
    name: str
    roll_no: str
    academic_year: str
    status: StudentStatus
    is_passed_out: bool
    total_fees: Decimal
    fee_lines: List[FeeLine] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class StudentFeeSummaryResponse(BaseModel):
    view: FeeView
    total_assigned: Decimal
    total_due: Decimal
    total_paid: Decimal
    fee_total: Decimal
    balance: Decimal
    status: FeeStatus


class StudentDetailResponse(StudentResponse):
    payments: List[PaymentResponse] = Field(default_factory=list)
    summary: StudentFeeSummaryResponse
