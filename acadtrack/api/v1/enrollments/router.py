from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.auth.dependencies import get_current_user
from acadtrack.auth.rbac import require_roles
from acadtrack.auth.schemas import ActorContext
from acadtrack.core.enums import STAFF_ROLES
from acadtrack.db.session import get_db

from .schemas import SubjectStudentsResponse
from . import service

router = APIRouter(prefix="/api/v1/enrollments", tags=["enrollments"])


@router.get(
    "/subjects/{subject_id}/students",
    response_model=SubjectStudentsResponse,
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def my_students(
    subject_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: ActorContext = Depends(get_current_user),
):
    """Students the caller teaches for a subject, via class/batch assignment or elective selection."""
    return await service.subject_students(db, current_user.id, subject_id)
