from uuid import UUID

from pydantic import BaseModel


class CurrentAdmin(BaseModel):
    """Authenticated administrator resolved to the school they manage."""

    user_id: str
    school_id: UUID
    role: str
