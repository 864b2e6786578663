"""Fee type schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class FeeTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    default_amount: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    scheduled_date: Optional[date] = Field(None, description="Activation date; fee is due from this day")
    class_ids: List[UUID] = Field(default_factory=list)


class FeeTypeUpdate(FeeTypeCreate):
    """Full replacement: class_ids replaces every existing class link."""


class FeeTypeClassInfo(BaseModel):
    id: UUID
    name: str


class FeeTypeResponse(BaseModel):
    id: UUID
    school_id: UUID
    name: str
    description: Optional[str] = None
    default_amount: Decimal
    scheduled_date: Optional[date] = None
    is_currently_applicable: bool
    classes: List[FeeTypeClassInfo] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
