from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ClassCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)


class ClassResponse(BaseModel):
    id: UUID
    school_id: UUID
    name: str
    created_at: datetime

    class Config:
        from_attributes = True
