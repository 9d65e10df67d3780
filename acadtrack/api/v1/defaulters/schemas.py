from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class DefaulterWorkAssign(BaseModel):
    subject_id: UUID
    instruction_text: Optional[str] = None
    reference_link: Optional[str] = Field(None, max_length=1024)
    skip: bool = False


class DefaulterWorkAssigned(BaseModel):
    success: bool = True
    message: str
    total_assigned: int = 0


class DefaulterWorkItem(BaseModel):
    id: UUID
    subject_id: UUID
    subject_code: str
    subject_name: str
    subject_type: str
    submission_text: str
    reference_link: Optional[str] = None
    skip: bool
    created_at: datetime


class DefaulterWorkList(BaseModel):
    success: bool = True
    submissions: List[DefaulterWorkItem] = Field(default_factory=list)


class StudentDefaulterWork(BaseModel):
    id: UUID
    subject_code: str
    subject_name: str
    description: str
    reference_link: Optional[str] = None
    assigned_date: datetime
    status: str


class StudentDefaulterWorkList(BaseModel):
    success: bool = True
    defaulter_work: List[StudentDefaulterWork] = Field(default_factory=list)


class MessageResponse(BaseModel):
    success: bool = True
    message: str
