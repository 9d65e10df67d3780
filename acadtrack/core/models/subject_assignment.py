"""Faculty-subject assignment (faculty_subjects).

batch_id NULL: whole class (theory). batch_id set: one batch (practical).
class_id NULL: department-level mapping created alongside an offered elective.
subject_id NULL: faculty linked to a batch without a subject yet (batch creation).
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Uuid

from acadtrack.db.session import Base


class SubjectAssignment(Base):
    __tablename__ = "faculty_subjects"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    faculty_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(Uuid(as_uuid=True), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=True)
    class_id = Column(Uuid(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=True)
    batch_id = Column(Uuid(as_uuid=True), ForeignKey("batches.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
