"""Subjects. Class-scoped (theory/practical) or department-level electives (mdm/oe/pe, class_id NULL)."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid

from acadtrack.db.session import Base


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    code = Column(String(50), nullable=False)
    # theory | practical | mdm | oe | pe. Legacy rows may carry other values.
    type = Column(String(20), nullable=False)
    class_id = Column(Uuid(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=True)
    department_id = Column(Uuid(as_uuid=True), ForeignKey("departments.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
