import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Uuid

from acadtrack.db.session import Base


class Department(Base):
    """Academic department (e.g. Computer Engineering). Owns classes and offered electives."""

    __tablename__ = "departments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
