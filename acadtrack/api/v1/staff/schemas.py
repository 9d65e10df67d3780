from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class StaffMember(BaseModel):
    id: UUID
    name: str
    email: str
    role: str
    department_id: Optional[UUID] = None
    created_at: datetime

    class Config:
        from_attributes = True


class StaffList(BaseModel):
    success: bool = True
    staff: List[StaffMember] = Field(default_factory=list)


class MessageResponse(BaseModel):
    success: bool = True
    message: str
