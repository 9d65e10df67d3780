from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from acadtrack.api.v1.enrollments.schemas import EnrolledStudent


class SubmissionTypeOut(BaseModel):
    id: UUID
    name: str

    class Config:
        from_attributes = True


class SubmissionTypesResponse(BaseModel):
    success: bool = True
    submission_types: List[SubmissionTypeOut] = Field(default_factory=list)


class MarkSubmissionRequest(BaseModel):
    student_id: UUID
    subject_id: UUID
    submission_type: str = Field(..., min_length=1)
    status: str = Field(..., min_length=1)


class MarkSubmissionResponse(BaseModel):
    success: bool = True
    message: str
    created: bool
    status: str


class RosterStudent(EnrolledStudent):
    submissions: Dict[str, str] = Field(default_factory=dict)


class SubjectRosterResponse(BaseModel):
    success: bool = True
    subject_id: UUID
    students: List[RosterStudent] = Field(default_factory=list)
    submission_types: List[str] = Field(default_factory=list)


class ClassStudent(BaseModel):
    id: UUID
    roll_no: int
    name: str
    email: Optional[str] = None
    mobile: Optional[str] = None
    hall_ticket_number: str
    attendance_percent: float
    defaulter: bool
    batch_id: Optional[UUID] = None
    batch_name: Optional[str] = None
    submission_percentage: int


class ClassStudentsResponse(BaseModel):
    success: bool = True
    students: List[ClassStudent] = Field(default_factory=list)


class SubjectSubmissionStatus(BaseModel):
    ta: str = "pending"
    cie: str = "pending"
    defaulter: str = "pending"


class DashboardSubject(BaseModel):
    id: UUID
    code: str
    name: str
    type: str
    faculty: str
    faculty_available: bool = False
    submissions: SubjectSubmissionStatus


class DashboardStudent(BaseModel):
    id: UUID
    name: str
    roll_no: int
    hall_ticket_number: str
    email: Optional[str] = None
    mobile: Optional[str] = None
    defaulter: bool
    attendance_percent: float
    submission_percentage: int


class StudentDashboardResponse(BaseModel):
    success: bool = True
    student: DashboardStudent
    subjects: List[DashboardSubject] = Field(default_factory=list)


class TypeStats(BaseModel):
    total: int
    completed: int
    pending: int
    not_started: int


class SubjectStatistics(BaseModel):
    id: UUID
    name: str
    code: str
    type: str
    total_students: int
    defaulter_count: int
    submission_stats: Dict[str, TypeStats] = Field(default_factory=dict)


class SubjectStatisticsResponse(BaseModel):
    success: bool = True
    subjects: List[SubjectStatistics] = Field(default_factory=list)
