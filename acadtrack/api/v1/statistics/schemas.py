from typing import List
from uuid import UUID

from pydantic import BaseModel, Field


class ClassStatistics(BaseModel):
    overall_submission: int
    submission_marked: int
    defaulter_work_submitted: int
    total_students: int
    defaulter_count: int


class ClassStatisticsResponse(BaseModel):
    success: bool = True
    statistics: ClassStatistics


class DepartmentStatistics(BaseModel):
    id: UUID
    name: str
    submission_rate: int
    total_students: int
    completed_students: int
    class_count: int


class DepartmentStatisticsResponse(BaseModel):
    success: bool = True
    statistics: List[DepartmentStatistics] = Field(default_factory=list)


class YearStatistics(BaseModel):
    year: int
    year_name: str
    percentage: int
    total_students: int
    completed_students: int
    defaulter_count: int
    class_count: int


class YearStatisticsResponse(BaseModel):
    success: bool = True
    statistics: List[YearStatistics] = Field(default_factory=list)
