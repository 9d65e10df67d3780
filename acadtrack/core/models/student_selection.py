"""Elective choices (student_subject_selection). At most one row per student."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Uuid

from acadtrack.db.session import Base


class StudentSelection(Base):
    __tablename__ = "student_subject_selection"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(
        Uuid(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    mdm_id = Column(Uuid(as_uuid=True), ForeignKey("subjects.id", ondelete="SET NULL"), nullable=True)
    oe_id = Column(Uuid(as_uuid=True), ForeignKey("subjects.id", ondelete="SET NULL"), nullable=True)
    pe_id = Column(Uuid(as_uuid=True), ForeignKey("subjects.id", ondelete="SET NULL"), nullable=True)
    mdm_faculty_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    oe_faculty_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    pe_faculty_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    selections_locked = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def pair(self, category: str):
        """(subject_id, faculty_id) for MDM / OE / PE."""
        prefix = category.lower()
        return getattr(self, f"{prefix}_id"), getattr(self, f"{prefix}_faculty_id")

    def set_pair(self, category: str, subject_id, faculty_id) -> None:
        prefix = category.lower()
        setattr(self, f"{prefix}_id", subject_id)
        setattr(self, f"{prefix}_faculty_id", faculty_id)

    @classmethod
    def columns(cls, category: str):
        """Column pair, for use in queries."""
        prefix = category.lower()
        return getattr(cls, f"{prefix}_id"), getattr(cls, f"{prefix}_faculty_id")
