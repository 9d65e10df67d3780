from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from acadtrack.core.enums import AssignmentSource


class BatchRef(BaseModel):
    id: UUID
    name: str


class CatalogSubject(BaseModel):
    """Subject as seen by a staff member, tagged with where the link was found."""

    id: UUID
    name: str
    code: str
    type: str
    class_id: Optional[UUID] = None
    source: AssignmentSource
    batches: List[BatchRef] = Field(default_factory=list)


class StaffCatalogResponse(BaseModel):
    success: bool = True
    theory: List[CatalogSubject] = Field(default_factory=list)
    practical: List[CatalogSubject] = Field(default_factory=list)
    mdm: List[CatalogSubject] = Field(default_factory=list)
    oe: List[CatalogSubject] = Field(default_factory=list)
    pe: List[CatalogSubject] = Field(default_factory=list)


class StudentSubject(BaseModel):
    id: UUID
    name: str
    code: str
    type: str
    faculty: str
    faculty_id: Optional[UUID] = None
    faculty_available: bool = False
    batch_id: Optional[UUID] = None


class StudentCatalogResponse(BaseModel):
    success: bool = True
    theory: List[StudentSubject] = Field(default_factory=list)
    practical: List[StudentSubject] = Field(default_factory=list)
    mdm: List[StudentSubject] = Field(default_factory=list)
    oe: List[StudentSubject] = Field(default_factory=list)
    pe: List[StudentSubject] = Field(default_factory=list)


class BatchFacultyItem(BaseModel):
    batch_id: UUID
    faculty_id: UUID


class ClassSubjectCreate(BaseModel):
    """Theory: one faculty for the whole class. Practical: one faculty per batch."""

    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=50)
    type: Literal["theory", "practical"]
    faculty_id: Optional[UUID] = None
    batches: List[BatchFacultyItem] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_faculty(self):
        if self.type == "theory" and self.faculty_id is None:
            raise ValueError("faculty_id is required for theory subjects")
        if self.type == "practical" and not self.batches:
            raise ValueError("batches are required for practical subjects")
        return self


class SubjectOut(BaseModel):
    id: UUID
    name: str
    code: str
    type: str
    class_id: Optional[UUID] = None
    department_id: Optional[UUID] = None

    class Config:
        from_attributes = True


class ClassSubjectResponse(BaseModel):
    success: bool = True
    subject: SubjectOut
    assignments: int


class AvailabilityUpdate(BaseModel):
    is_available: bool
    subject_codes: List[str] = Field(default_factory=list)


class AvailabilityResponse(BaseModel):
    success: bool = True
    is_available: bool
    subject_codes: List[str] = Field(default_factory=list)
