from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from acadtrack.core.enums import AssignmentSource


class EnrolledStudent(BaseModel):
    id: UUID
    name: str
    roll_no: int
    hall_ticket_number: str
    class_id: UUID
    batch_id: Optional[UUID] = None
    defaulter: bool
    attendance_percent: float
    source: AssignmentSource


class SubjectStudentsResponse(BaseModel):
    success: bool = True
    subject_id: UUID
    students: List[EnrolledStudent] = Field(default_factory=list)
