from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from acadtrack.api.v1.electives.schemas import FacultyOption


class OfferedSubjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=50)
    type: Literal["mdm", "oe", "pe"]
    faculty_ids: List[UUID] = Field(..., min_length=1)
    semester: Optional[int] = Field(None, ge=1, le=8)
    year: int = Field(..., ge=1, le=4)


class OfferedSubjectResponse(BaseModel):
    id: UUID
    subject_id: UUID
    code: str
    name: str
    type: str
    faculties: List[FacultyOption] = Field(default_factory=list)
    semester: Optional[int] = None
    year: int
    is_active: bool
    created_at: datetime


class OfferedSubjectCreated(BaseModel):
    success: bool = True
    message: str
    offered_subject: OfferedSubjectResponse
    faculty_assigned: int


class OfferedSubjectList(BaseModel):
    success: bool = True
    subjects: List[OfferedSubjectResponse] = Field(default_factory=list)


class MessageResponse(BaseModel):
    success: bool = True
    message: str
