import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, Uuid

from acadtrack.db.session import Base


class User(Base):
    """Staff account: director, hod, class_teacher or faculty. Students live in `students`."""

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(Text, nullable=True)
    # director | hod | class_teacher | faculty
    role = Column(String(50), nullable=False)
    # HODs own a department; class teachers / faculty inherit one when assigned a class
    department_id = Column(Uuid(as_uuid=True), ForeignKey("departments.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
