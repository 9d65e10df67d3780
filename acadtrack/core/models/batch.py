import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Uuid

from acadtrack.db.session import Base


class Batch(Base):
    """Roll-number range partition of a class, used to scope practical assignments."""

    __tablename__ = "batches"
    __table_args__ = (CheckConstraint("roll_start <= roll_end", name="ck_batch_roll_range"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    class_id = Column(Uuid(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(50), nullable=False)
    roll_start = Column(Integer, nullable=False)
    roll_end = Column(Integer, nullable=False)
    faculty_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
