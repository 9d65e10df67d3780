"""Submission tracking: fixed type vocabulary and per student/subject/type status rows."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint, Uuid

from acadtrack.db.session import Base


class SubmissionType(Base):
    """TA, CIE, Defaulter work. Referenced by name."""

    __tablename__ = "submission_types"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(50), nullable=False, unique=True)


class Submission(Base):
    __tablename__ = "student_submissions"
    __table_args__ = (
        UniqueConstraint(
            "student_id", "subject_id", "submission_type_id",
            name="uq_student_submission",
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(Uuid(as_uuid=True), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    submission_type_id = Column(
        Uuid(as_uuid=True), ForeignKey("submission_types.id", ondelete="CASCADE"), nullable=False
    )
    # pending | completed
    status = Column(String(20), nullable=False, default="pending")
    marked_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    marked_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
