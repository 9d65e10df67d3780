from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class BatchCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    roll_start: int = Field(..., ge=1)
    roll_end: int = Field(..., ge=1)
    faculty_id: UUID

    @model_validator(mode="after")
    def check_range(self):
        if self.roll_start > self.roll_end:
            raise ValueError("roll_start must not be greater than roll_end")
        return self


class BatchResponse(BaseModel):
    id: UUID
    class_id: UUID
    name: str
    roll_start: int
    roll_end: int
    faculty_id: Optional[UUID] = None
    created_at: datetime

    class Config:
        from_attributes = True


class BatchCreated(BaseModel):
    success: bool = True
    message: str
    batch: BatchResponse
    students_assigned: int
    faculty_linked: bool


class BatchList(BaseModel):
    success: bool = True
    batches: List[BatchResponse] = Field(default_factory=list)
