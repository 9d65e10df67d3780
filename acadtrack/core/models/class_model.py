"""Department classes (e.g. SE-A, year 2). Model named SchoolClass to avoid Python 'class' keyword."""
import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Uuid

from acadtrack.db.session import Base


class SchoolClass(Base):
    __tablename__ = "classes"
    __table_args__ = (CheckConstraint("year BETWEEN 1 AND 4", name="ck_class_year"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    department_id = Column(Uuid(as_uuid=True), ForeignKey("departments.id", ondelete="CASCADE"), nullable=False)
    year = Column(Integer, nullable=False)
    name = Column(String(50), nullable=False)
    class_teacher_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
