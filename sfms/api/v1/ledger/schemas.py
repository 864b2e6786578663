"""Master ledger schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from sfms.core.enums import FeeStatus, FeeView, PaymentMode
from sfms.core.fees import FeeLine


class LastPayment(BaseModel):
    date: datetime
    amount_paid: Decimal
    mode_of_payment: PaymentMode
    receipt_number: str


class LedgerEntry(BaseModel):
    student_id: UUID
    name: str
    roll_no: Optional[str] = None
    class_id: UUID
    class_name: str
    academic_year: Optional[str] = None
    fee_lines: List[FeeLine] = Field(default_factory=list)
    total_assigned: Decimal
    total_due: Decimal
    total_paid: Decimal
    fee_total: Decimal
    balance: Decimal
    status: FeeStatus
    last_payment: Optional[LastPayment] = None


class LedgerClassSummary(BaseModel):
    """School overview row: one class, totals for the selected view and students per status."""

    class_id: UUID
    class_name: str
    student_count: int
    fee_total: Decimal
    total_paid: Decimal
    balance: Decimal
    unpaid: int = 0
    partially_paid: int = 0
    paid: int = 0
    no_fees_due: int = 0


class LedgerResponse(BaseModel):
    view: FeeView
    as_of: date
    class_id: Optional[UUID] = None
    entries: List[LedgerEntry] = Field(default_factory=list)
    classes: List[LedgerClassSummary] = Field(default_factory=list)
    total_fees: Decimal
    total_paid: Decimal
    total_balance: Decimal
