from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ClassCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    year: int = Field(..., ge=1, le=4)
    class_teacher_id: UUID


class ClassUpdate(ClassCreate):
    """Full replacement of name, year and class teacher."""


class ClassResponse(BaseModel):
    id: UUID
    department_id: UUID
    name: str
    year: int
    class_teacher_id: Optional[UUID] = None
    teacher: str = "Not Assigned"
    total_students: int = 0
    created_at: datetime


class ClassSaved(BaseModel):
    success: bool = True
    message: str
    class_: ClassResponse = Field(..., alias="class")

    class Config:
        populate_by_name = True


class ClassList(BaseModel):
    success: bool = True
    classes: List[ClassResponse] = Field(default_factory=list)


class MessageResponse(BaseModel):
    success: bool = True
    message: str
