from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class DepartmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class DepartmentResponse(BaseModel):
    id: UUID
    name: str
    hod: Optional[str] = None
    hod_id: Optional[UUID] = None
    created_at: datetime


class DepartmentCreated(BaseModel):
    success: bool = True
    department: DepartmentResponse


class DepartmentList(BaseModel):
    success: bool = True
    departments: List[DepartmentResponse] = Field(default_factory=list)


class HodAssign(BaseModel):
    user_id: UUID


class HodAssigned(BaseModel):
    success: bool = True
    message: str
    department: DepartmentResponse


class MessageResponse(BaseModel):
    success: bool = True
    message: str
