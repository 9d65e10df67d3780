from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from acadtrack.core.enums import ElectiveCategory, SelectionState


class FacultyOption(BaseModel):
    id: UUID
    name: str


class ElectiveSubject(BaseModel):
    id: UUID
    name: str
    code: str
    semester: Optional[int] = None
    department_id: UUID
    faculty_options: List[FacultyOption] = Field(default_factory=list)


class ElectiveOptions(BaseModel):
    mdm: List[ElectiveSubject] = Field(default_factory=list)
    oe: List[ElectiveSubject] = Field(default_factory=list)
    pe: List[ElectiveSubject] = Field(default_factory=list)


class SelectionOut(BaseModel):
    mdm_id: Optional[UUID] = None
    mdm_faculty_id: Optional[UUID] = None
    oe_id: Optional[UUID] = None
    oe_faculty_id: Optional[UUID] = None
    pe_id: Optional[UUID] = None
    pe_faculty_id: Optional[UUID] = None
    selections_locked: bool = False

    class Config:
        from_attributes = True


class StudentElectivesResponse(BaseModel):
    success: bool = True
    student_id: UUID
    class_year: int
    electives: ElectiveOptions
    current_selection: SelectionOut
    state: SelectionState
    required: List[ElectiveCategory] = Field(default_factory=list)


class ElectiveSelect(BaseModel):
    category: ElectiveCategory
    subject_id: UUID
    faculty_id: UUID


class SelectionOverride(BaseModel):
    """Replaces all three pairs. A null subject clears that category."""

    mdm_id: Optional[UUID] = None
    mdm_faculty_id: Optional[UUID] = None
    oe_id: Optional[UUID] = None
    oe_faculty_id: Optional[UUID] = None
    pe_id: Optional[UUID] = None
    pe_faculty_id: Optional[UUID] = None


class SelectionResponse(BaseModel):
    success: bool = True
    message: str
    state: SelectionState
    selection: SelectionOut
