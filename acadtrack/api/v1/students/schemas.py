from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from acadtrack.api.v1.electives.schemas import SelectionOverride


class StudentImportRow(BaseModel):
    """One parsed spreadsheet row. Parsing the file itself happens upstream."""

    roll_no: int = Field(..., ge=1)
    name: str = Field(..., min_length=1, max_length=255)
    hall_ticket_number: str = Field(..., min_length=1, max_length=50)
    attendance_percent: float = Field(0, ge=0, le=100)
    email: Optional[str] = None
    mobile: Optional[str] = None


class StudentImportRequest(BaseModel):
    students: List[StudentImportRow] = Field(..., min_length=1)


class StudentImportResponse(BaseModel):
    success: bool = True
    message: str
    imported: int
    skipped: int


class StudentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    roll_no: Optional[int] = Field(None, ge=1)
    email: Optional[str] = None
    mobile: Optional[str] = None
    attendance_percent: Optional[float] = Field(None, ge=0, le=100)
    hall_ticket_number: Optional[str] = Field(None, min_length=1, max_length=50)
    batch_id: Optional[UUID] = None
    # explicit override of the attendance-derived flag
    defaulter: Optional[bool] = None
    elective_selections: Optional[SelectionOverride] = None


class StudentOut(BaseModel):
    id: UUID
    class_id: UUID
    batch_id: Optional[UUID] = None
    roll_no: int
    name: str
    email: Optional[str] = None
    mobile: Optional[str] = None
    hall_ticket_number: str
    attendance_percent: float
    defaulter: bool
    created_at: datetime

    class Config:
        from_attributes = True


class StudentUpdateResponse(BaseModel):
    success: bool = True
    message: str
    student: StudentOut


class MessageResponse(BaseModel):
    success: bool = True
    message: str
