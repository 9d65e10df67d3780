"""Department-offered electives and the faculty allowed to teach each offering."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from acadtrack.db.session import Base


class OfferedSubject(Base):
    __tablename__ = "department_offered_subjects"
    __table_args__ = (
        UniqueConstraint(
            "subject_id", "department_id", "semester", "year",
            name="uq_offered_subject_term",
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    subject_id = Column(Uuid(as_uuid=True), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    department_id = Column(Uuid(as_uuid=True), ForeignKey("departments.id", ondelete="CASCADE"), nullable=False)
    year = Column(Integer, nullable=False)
    semester = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    faculty_links = relationship(
        "OfferedSubjectFaculty",
        order_by="OfferedSubjectFaculty.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def faculty_ids(self):
        return [link.faculty_id for link in self.faculty_links]


class OfferedSubjectFaculty(Base):
    """One row per faculty in an offering's approved set. position keeps the order the HOD entered."""

    __tablename__ = "department_offered_subject_faculty"
    __table_args__ = (
        UniqueConstraint("offered_subject_id", "faculty_id", name="uq_offered_subject_faculty"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    offered_subject_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("department_offered_subjects.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Not a FK: offerings may reference faculty that were since removed ("Unknown Faculty")
    faculty_id = Column(Uuid(as_uuid=True), nullable=False)
    position = Column(Integer, nullable=False, default=0)
