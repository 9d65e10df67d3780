import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Uuid

from acadtrack.db.session import Base


class FacultyAvailability(Base):
    """Faculty-declared availability per subject, shown to students next to each subject."""

    __tablename__ = "faculty_availability"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    faculty_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(Uuid(as_uuid=True), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
