import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, Uuid

from acadtrack.db.session import Base


class Student(Base):
    """Student in a class. defaulter is derived from attendance unless explicitly overridden."""

    __tablename__ = "students"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    class_id = Column(Uuid(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    batch_id = Column(Uuid(as_uuid=True), ForeignKey("batches.id", ondelete="SET NULL"), nullable=True)
    roll_no = Column(Integer, nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    mobile = Column(String(50), nullable=True)
    hall_ticket_number = Column(String(50), nullable=False, unique=True)
    attendance_percent = Column(Float, nullable=False, default=0)
    defaulter = Column(Boolean, nullable=False, default=False)
    # bcrypt hash of the hall ticket number until the student changes it
    password_hash = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
