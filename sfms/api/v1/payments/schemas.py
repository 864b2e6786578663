"""Payments schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from sfms.core.enums import PaymentMode


class PaymentCreate(BaseModel):
    student_id: UUID
    amount_paid: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    mode_of_payment: PaymentMode = PaymentMode.cash
    receipt_number: Optional[str] = Field(None, max_length=100, description="Generated as R-<epoch millis> when empty")
    description: Optional[str] = None
    date: Optional[datetime] = None


class PaymentResponse(BaseModel):
    id: UUID
    school_id: UUID
    student_id: UUID
    amount_paid: Decimal
    date: datetime
    mode_of_payment: PaymentMode
    receipt_number: str
    description: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class RecentPaymentResponse(PaymentResponse):
    student_name: Optional[str] = None
    roll_no: Optional[str] = None
