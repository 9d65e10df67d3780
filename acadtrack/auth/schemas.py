from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class ActorContext(BaseModel):
    """Authenticated caller, passed explicitly into every service call.
    class_id: class teachers and students. department_id: HODs. batch_id: students.
    """

    id: UUID
    role: str
    class_id: Optional[UUID] = None
    department_id: Optional[UUID] = None
    batch_id: Optional[UUID] = None
